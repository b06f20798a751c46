"""Tests for ClassModelExtractor."""

from abc import ABC, abstractmethod

import pytest

from memoize_codegen import memoize, raises
from memoize_codegen.exceptions import ValidationError
from memoize_codegen.extractor import ClassModelExtractor, extract_class_model
from memoize_codegen.model import MethodBinding, ParameterKind, Visibility

SENTINEL = object()


class Calc:
    """Subject with a bit of everything."""

    precision: int
    unit = "m"

    @raises(ValueError)
    def __init__(self, seed: int, *, scale: float = 1.0) -> None:
        self.seed = seed
        self.scale = scale

    @memoize
    @raises(ArithmeticError)
    def add(self, a: int, b: int) -> int:
        return self.seed + a + b

    def describe(self, prefix: str = "calc", tags: tuple = (1, "a"), marker: object = SENTINEL) -> str:
        return f"{prefix}:{self.seed}"

    def combine(self, first, /, *rest: int, strict: bool = False, **options: list[int]) -> int | None:
        return None

    @staticmethod
    def build(seed: int) -> "Calc":
        return Calc(seed)

    @classmethod
    def default(cls) -> "Calc":
        return cls(0)

    def __secret(self) -> int:
        return 42

    @property
    def doubled(self) -> int:
        return self.seed * 2


class Base:
    def __init__(self, seed: int) -> None:
        self.seed = seed

    @memoize
    def square(self) -> int:
        return self.seed**2

    def name(self) -> str:
        return "base"


class Derived(Base):
    def name(self) -> str:
        return "derived"

    def extra(self) -> int:
        return 1


class Shadowed(Base):
    def square(self) -> int:
        return 0


class Abstract(ABC):
    def __init__(self) -> None:
        pass

    @abstractmethod
    def run(self) -> int: ...


class Outer:
    class Inner:
        def __init__(self) -> None:
            pass


class _Hidden:
    def __init__(self) -> None:
        pass


class Stateless:
    @memoize
    def square(self, x: int) -> int:
        return x * x


class Interned:
    def __new__(cls, code: str, *, strict: bool = False) -> "Interned":
        return super().__new__(cls)

    def code(self) -> str:
        return "x"


class Uninstantiable:
    __init__ = None


class Secretive:
    def __init__(self) -> None:
        pass

    def __compute(self, x: int) -> int:
        return x


@pytest.fixture
def extractor() -> ClassModelExtractor:
    return ClassModelExtractor()


class TestExtractClass:
    """Tests for class-level facts."""

    def test_names(self, extractor: ClassModelExtractor) -> None:
        """Should record names, module and package."""
        model = extractor.extract(Calc)

        assert model.name == "Calc"
        assert model.qualified_name == f"{__name__}.Calc"
        assert model.module == __name__
        assert model.package == __name__.rpartition(".")[0]
        assert model.subject.obj is Calc

    def test_methods_in_definition_order(self, extractor: ClassModelExtractor) -> None:
        """Should list methods in definition order."""
        model = extractor.extract(Calc)

        assert [m.name for m in model.methods] == [
            "__init__",
            "add",
            "describe",
            "combine",
            "build",
            "default",
            "_Calc__secret",
        ]

    def test_fields(self, extractor: ClassModelExtractor) -> None:
        """Should record non-method attributes and annotated fields."""
        model = extractor.extract(Calc)

        assert set(model.fields) == {"precision", "unit", "doubled"}

    def test_marked_methods_discovered(self, extractor: ClassModelExtractor) -> None:
        """Should discover @memoize markers by default."""
        model = extractor.extract(Calc)

        assert [m.name for m in model.methods if m.is_marked] == ["add"]

    def test_explicit_marked_methods(self, extractor: ClassModelExtractor) -> None:
        """Should use an explicit marked set instead of markers."""
        model = extractor.extract(Calc, marked_methods=["describe"])

        assert [m.name for m in model.methods if m.is_marked] == ["describe"]

    def test_unknown_marked_method(self, extractor: ClassModelExtractor) -> None:
        """Should reject marked names that are not methods."""
        with pytest.raises(ValidationError, match="unit: no such method"):
            extractor.extract(Calc, marked_methods=["unit"])

    def test_private_source_name_resolved(self, extractor: ClassModelExtractor) -> None:
        """Should map a source-level private name to its mangled member."""
        model = extractor.extract(Secretive, marked_methods=["__compute"])

        assert [m.name for m in model.methods if m.is_marked] == ["_Secretive__compute"]

    def test_extraction_is_reproducible(self, extractor: ClassModelExtractor) -> None:
        """Should produce equal models for the same class."""
        assert extractor.extract(Calc) == extractor.extract(Calc)

    def test_local_class_accepted(self, extractor: ClassModelExtractor) -> None:
        """Should accept classes defined in a function body."""

        class Local:
            def __init__(self) -> None:
                pass

            def value(self) -> int:
                return 1

        model = extractor.extract(Local)

        assert not model.subject.importable
        assert model.modifiers.is_nested is False


class TestExtractRejections:
    """Tests for classes that cannot be wrapped."""

    def test_abstract(self, extractor: ClassModelExtractor) -> None:
        """Should reject abstract classes."""
        with pytest.raises(ValidationError, match="abstract"):
            extractor.extract(Abstract)

    def test_nested(self, extractor: ClassModelExtractor) -> None:
        """Should reject classes nested in a class body."""
        with pytest.raises(ValidationError, match="nested"):
            extractor.extract(Outer.Inner)

    def test_private(self, extractor: ClassModelExtractor) -> None:
        """Should reject private classes."""
        with pytest.raises(ValidationError, match="visibility"):
            extractor.extract(_Hidden)

    def test_constructor_not_callable(self, extractor: ClassModelExtractor) -> None:
        """Should reject classes whose constructor cannot be called."""
        with pytest.raises(ValidationError, match="__init__ is not callable"):
            extractor.extract(Uninstantiable)

    def test_not_a_class(self, extractor: ClassModelExtractor) -> None:
        """Should reject non-class subjects."""
        with pytest.raises(ValidationError, match="expected a class"):
            extractor.extract(Calc(1))  # type: ignore[arg-type]


class TestExtractMethods:
    """Tests for method models."""

    def test_self_dropped(self, extractor: ClassModelExtractor) -> None:
        """Should drop self from instance methods."""
        add = extractor.extract(Calc).method("add")

        assert add is not None
        assert [p.name for p in add.parameters] == ["a", "b"]
        assert [p.annotation for p in add.parameters] == ["int", "int"]
        assert add.return_annotation == "int"

    def test_declared_failures(self, extractor: ClassModelExtractor) -> None:
        """Should record @raises declarations."""
        add = extractor.extract(Calc).method("add")

        assert add is not None
        assert [ref.obj for ref in add.declared_failures] == [ArithmeticError]

    def test_parameter_kinds(self, extractor: ClassModelExtractor) -> None:
        """Should record every parameter kind."""
        combine = extractor.extract(Calc).method("combine")

        assert combine is not None
        assert [(p.name, p.kind) for p in combine.parameters] == [
            ("first", ParameterKind.POSITIONAL_ONLY),
            ("rest", ParameterKind.VAR_POSITIONAL),
            ("strict", ParameterKind.KEYWORD_ONLY),
            ("options", ParameterKind.VAR_KEYWORD),
        ]
        assert combine.parameters[0].annotation is None
        assert combine.parameters[3].annotation == "list[int]"
        assert combine.return_annotation == "int | None"

    def test_defaults(self, extractor: ClassModelExtractor) -> None:
        """Should keep literal defaults as source and flag the others."""
        describe = extractor.extract(Calc).method("describe")

        assert describe is not None
        prefix, tags, marker = describe.parameters
        assert prefix.default is not None and prefix.default.source == "'calc'"
        assert tags.default is not None and tags.default.source == "(1, 'a')"
        assert marker.default is not None
        assert marker.default.source is None
        assert marker.default.value is SENTINEL

    def test_bindings(self, extractor: ClassModelExtractor) -> None:
        """Should keep parameters of static methods and drop cls."""
        model = extractor.extract(Calc)
        build = model.method("build")
        default = model.method("default")

        assert build is not None and default is not None
        assert build.modifiers.binding is MethodBinding.STATIC
        assert [p.name for p in build.parameters] == ["seed"]
        assert default.modifiers.binding is MethodBinding.CLASS
        assert default.parameters == ()

    def test_private_method(self, extractor: ClassModelExtractor) -> None:
        """Should flag name-mangled methods as private."""
        secret = extractor.extract(Calc).method("_Calc__secret")

        assert secret is not None
        assert secret.modifiers.visibility is Visibility.PRIVATE


class TestExtractConstructor:
    """Tests for the constructor model."""

    def test_parameters(self, extractor: ClassModelExtractor) -> None:
        """Should mirror the constructor parameters without self."""
        constructor = extractor.extract(Calc).constructor

        assert [(p.name, p.kind) for p in constructor.parameters] == [
            ("seed", ParameterKind.POSITIONAL_OR_KEYWORD),
            ("scale", ParameterKind.KEYWORD_ONLY),
        ]
        assert constructor.parameters[1].default is not None
        assert constructor.parameters[1].default.source == "1.0"
        assert [ref.obj for ref in constructor.declared_failures] == [ValueError]

    def test_inherited_constructor(self, extractor: ClassModelExtractor) -> None:
        """Should use the constructor inherited along the MRO."""
        constructor = extractor.extract(Derived).constructor

        assert constructor.defined_in == "Base"
        assert [p.name for p in constructor.parameters] == ["seed"]

    def test_implicit_constructor(self, extractor: ClassModelExtractor) -> None:
        """Should use the zero-argument constructor of object when none is defined."""
        constructor = extractor.extract(Stateless).constructor

        assert constructor.parameters == ()
        assert constructor.defined_in == "object"

    def test_new_as_constructor(self, extractor: ClassModelExtractor) -> None:
        """Should mirror __new__ when the class defines no __init__."""
        constructor = extractor.extract(Interned).constructor

        assert constructor.member == "__new__"
        assert [(p.name, p.kind) for p in constructor.parameters] == [
            ("code", ParameterKind.POSITIONAL_OR_KEYWORD),
            ("strict", ParameterKind.KEYWORD_ONLY),
        ]


class TestExtractInheritance:
    """Tests for inherited members."""

    def test_inherited_methods(self, extractor: ClassModelExtractor) -> None:
        """Should include inherited methods, most-derived first."""
        model = extractor.extract(Derived)

        assert [m.name for m in model.methods] == ["name", "extra", "__init__", "square"]
        name = model.method("name")
        assert name is not None and name.defined_in == "Derived"

    def test_inherited_marker(self, extractor: ClassModelExtractor) -> None:
        """Should keep markers of inherited methods."""
        square = extractor.extract(Derived).method("square")

        assert square is not None and square.is_marked

    def test_override_drops_marker(self, extractor: ClassModelExtractor) -> None:
        """Should judge an overridden method by the override."""
        square = extractor.extract(Shadowed).method("square")

        assert square is not None and not square.is_marked


class TestExtractClassModelHelper:
    """Tests for the module-level helper."""

    def test_matches_default_extractor(self) -> None:
        """Should match the default extractor."""
        assert extract_class_model(Calc) == ClassModelExtractor().extract(Calc)
