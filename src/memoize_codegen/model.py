"""
Structural models of the generation pipeline.

Extraction produces a ClassModel, classification a ClassifiedMembers and
synthesis a WrapperClassModel. All models are frozen; equality is structural
(live objects are carried for rendering but excluded from comparison) so two
generation runs of the same class compare equal.
"""

import inspect
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from .constants import VOID_ANNOTATIONS


class Visibility(str, Enum):
    """Member visibility derived from Python naming conventions."""

    PUBLIC = "public"
    PROTECTED = "protected"
    PRIVATE = "private"


class MethodBinding(str, Enum):
    """What a method is bound to when called."""

    INSTANCE = "instance"
    CLASS = "class"
    STATIC = "static"


class ParameterKind(str, Enum):
    """Parameter kinds mirroring ``inspect.Parameter``."""

    POSITIONAL_ONLY = "positional_only"
    POSITIONAL_OR_KEYWORD = "positional_or_keyword"
    VAR_POSITIONAL = "var_positional"
    KEYWORD_ONLY = "keyword_only"
    VAR_KEYWORD = "var_keyword"

    @classmethod
    def from_inspect(cls, kind: Any) -> "ParameterKind":
        return _INSPECT_KINDS[kind]


_INSPECT_KINDS = {
    inspect.Parameter.POSITIONAL_ONLY: ParameterKind.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD: ParameterKind.POSITIONAL_OR_KEYWORD,
    inspect.Parameter.VAR_POSITIONAL: ParameterKind.VAR_POSITIONAL,
    inspect.Parameter.KEYWORD_ONLY: ParameterKind.KEYWORD_ONLY,
    inspect.Parameter.VAR_KEYWORD: ParameterKind.VAR_KEYWORD,
}


class MemberCategory(str, Enum):
    """Classification of a subject method on the wrapper surface."""

    MEMOIZED = "memoized"
    FORWARDED = "forwarded"
    EXCLUDED = "excluded"


@dataclass(frozen=True)
class TypeRef:
    """Reference to a class by module and qualified name.

    Attributes:
        module: Defining module
        qualname: Qualified name inside the module
        obj: The live class (not part of equality)
    """

    module: str
    qualname: str
    obj: Any = field(default=None, compare=False, repr=False)

    @classmethod
    def of(cls, obj: type) -> "TypeRef":
        return cls(module=obj.__module__, qualname=obj.__qualname__, obj=obj)

    @property
    def name(self) -> str:
        return self.qualname.rsplit(".", 1)[-1]

    @property
    def importable(self) -> bool:
        """False for classes defined inside a function body."""
        return "<locals>" not in self.qualname

    @property
    def is_builtin(self) -> bool:
        return self.module == "builtins"

    @property
    def binding_name(self) -> str:
        """Module-level name that has to be bound for this reference to resolve."""
        if not self.importable:
            return self.name
        return self.qualname.split(".", 1)[0]

    @property
    def expression(self) -> str:
        """Source expression resolving to the class once ``binding_name`` is bound."""
        if not self.importable:
            return self.name
        return self.qualname

    @property
    def path(self) -> str:
        return f"{self.module}.{self.qualname}"


@dataclass(frozen=True)
class DefaultValue:
    """Default value of a parameter.

    Attributes:
        source: Literal source text, or None when the value has no literal form
        value: The live default (not part of equality)
    """

    source: str | None
    value: Any = field(default=None, compare=False, repr=False)

    @property
    def is_literal(self) -> bool:
        return self.source is not None


@dataclass(frozen=True)
class ParameterModel:
    """One parameter of a method or constructor (``self`` excluded)."""

    name: str
    kind: ParameterKind
    annotation: str | None = None
    default: DefaultValue | None = None

    @property
    def has_default(self) -> bool:
        return self.default is not None


@dataclass(frozen=True)
class MethodModifiers:
    """Modifier set of a method."""

    visibility: Visibility = Visibility.PUBLIC
    binding: MethodBinding = MethodBinding.INSTANCE
    is_abstract: bool = False
    is_async: bool = False
    is_generator: bool = False

    @property
    def is_static(self) -> bool:
        """True for class-bound and unbound members."""
        return self.binding is not MethodBinding.INSTANCE

    @property
    def is_private(self) -> bool:
        return self.visibility is Visibility.PRIVATE

    def as_tokens(self) -> tuple[str, ...]:
        """Ordered textual form, used in signature fingerprints."""
        tokens = [self.visibility.value, self.binding.value]
        if self.is_abstract:
            tokens.append("abstract")
        if self.is_async:
            tokens.append("async")
        if self.is_generator:
            tokens.append("generator")
        return tuple(tokens)


@dataclass(frozen=True)
class MethodModel:
    """Structural facts about one method of the subject class.

    Attributes:
        name: Attribute name in the class namespace
        modifiers: Visibility, binding and function flavour
        parameters: Ordered parameters, without ``self``/``cls``
        return_annotation: Return annotation text, None when absent
        declared_failures: Failure types declared through ``@raises``
        is_marked: Whether the method carries the ``@memoize`` marker
        defined_in: Qualified name of the class that defines the method
    """

    name: str
    modifiers: MethodModifiers
    parameters: tuple[ParameterModel, ...] = ()
    return_annotation: str | None = None
    declared_failures: tuple[TypeRef, ...] = ()
    is_marked: bool = False
    defined_in: str = ""

    @property
    def is_special(self) -> bool:
        return len(self.name) > 4 and self.name.startswith("__") and self.name.endswith("__")

    @property
    def is_void(self) -> bool:
        return self.return_annotation is not None and self.return_annotation in VOID_ANNOTATIONS

    @property
    def identity(self) -> tuple[Any, ...]:
        """Identity used to derive the cache identifier."""
        return (
            self.name,
            self.return_annotation,
            self.modifiers.as_tokens(),
            tuple((p.kind.value, p.annotation) for p in self.parameters),
        )


@dataclass(frozen=True)
class ConstructorModel:
    """The designated constructor replayed on the wrapper.

    The default instance stands for the implicit zero-argument constructor
    inherited from ``object``.
    """

    parameters: tuple[ParameterModel, ...] = ()
    declared_failures: tuple[TypeRef, ...] = ()
    defined_in: str = "object"
    member: str = "__init__"


@dataclass(frozen=True)
class ClassModifiers:
    visibility: Visibility = Visibility.PUBLIC
    is_abstract: bool = False
    is_nested: bool = False


@dataclass(frozen=True)
class ClassModel:
    """Structural facts about the subject class.

    Attributes:
        name: Simple class name
        qualified_name: ``module.qualname``
        module: Defining module
        package: Package of the defining module ("" for top-level modules)
        modifiers: Class-level modifiers
        constructor: Designated constructor
        methods: Methods in definition order, most-derived definition first
        fields: Non-generated attribute names (properties, class variables, ...)
        subject: Reference to the live class
    """

    name: str
    qualified_name: str
    module: str
    package: str
    modifiers: ClassModifiers
    constructor: ConstructorModel
    methods: tuple[MethodModel, ...]
    fields: tuple[str, ...]
    subject: TypeRef

    def method(self, name: str) -> MethodModel | None:
        for method in self.methods:
            if method.name == name:
                return method
        return None


@dataclass(frozen=True)
class CacheFieldModel:
    """Per-method cache storage on the wrapper.

    Attributes:
        id: Stable, collision-resistant field identifier
        method_name: Memoized method the cache belongs to
        value_type: Return annotation of the method (None when absent)
        metric_name: Key reported to the metrics collector
        key_type: Type of lookup keys
    """

    id: str
    method_name: str
    value_type: str | None
    metric_name: str
    key_type: str = "str"


@dataclass(frozen=True)
class ExcludedMember:
    method: MethodModel
    reason: str


@dataclass(frozen=True)
class ClassifiedMembers:
    """Strict partition of the subject methods."""

    memoized: tuple[MethodModel, ...] = ()
    forwarded: tuple[MethodModel, ...] = ()
    excluded: tuple[ExcludedMember, ...] = ()

    def category_of(self, name: str) -> MemberCategory | None:
        if any(m.name == name for m in self.memoized):
            return MemberCategory.MEMOIZED
        if any(m.name == name for m in self.forwarded):
            return MemberCategory.FORWARDED
        if any(e.method.name == name for e in self.excluded):
            return MemberCategory.EXCLUDED
        return None


@dataclass(frozen=True)
class WrapperMethodModel:
    """One method of the wrapper.

    Attributes:
        kind: MEMOIZED or FORWARDED
        method: Subject method being reproduced
        body: Body statements, nested blocks indented by four spaces
        cache_field: Cache of a memoized method, None when forwarded
    """

    kind: MemberCategory
    method: MethodModel
    body: tuple[str, ...]
    cache_field: CacheFieldModel | None = None


@dataclass(frozen=True)
class WrapperConstructorModel:
    parameters: tuple[ParameterModel, ...]
    declared_failures: tuple[TypeRef, ...]
    body: tuple[str, ...]


@dataclass(frozen=True)
class WrapperClassModel:
    """The synthesized wrapper class.

    Attributes:
        name: Wrapper class name
        module: Module the wrapper is emitted into
        package: Package shared with the subject
        subject: Wrapped class
        delegate_field: Attribute holding the delegate instance
        constructor: Wrapper constructor
        cache_fields: One per memoized method, in method order
        methods: Memoized and forwarded methods, in subject order
        docstring: Class docstring
    """

    name: str
    module: str
    package: str
    subject: TypeRef
    delegate_field: str
    constructor: WrapperConstructorModel
    cache_fields: tuple[CacheFieldModel, ...]
    methods: tuple[WrapperMethodModel, ...]
    docstring: str = ""

    def method(self, name: str) -> WrapperMethodModel | None:
        for method in self.methods:
            if method.method.name == name:
                return method
        return None

    @property
    def referenced_types(self) -> tuple[TypeRef, ...]:
        """Classes the emitted code refers to at runtime, subject first."""
        refs = [self.subject, *self.constructor.declared_failures]
        for method in self.methods:
            refs.extend(method.method.declared_failures)
        return tuple(dict.fromkeys(refs))
