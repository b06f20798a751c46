"""
Class model extraction.

Reads structural metadata of a subject class through ``inspect`` and builds
the immutable ClassModel consumed by the rest of the pipeline. Extraction has
no side effects on the subject.
"""

import ast
import inspect
import logging
from collections.abc import Callable, Iterable
from typing import Any

from .discovery import discover_marked_methods
from .keys.method_type_detector import MethodTypeDetector
from .markers import declared_failures
from .model import (
    ClassModel,
    ClassModifiers,
    ConstructorModel,
    DefaultValue,
    MethodModel,
    MethodBinding,
    MethodModifiers,
    ParameterKind,
    ParameterModel,
    TypeRef,
    Visibility,
)
from .validators import (
    validate_class_modifiers,
    validate_constructor_callable,
    validate_is_class,
    validate_marked_names,
)

logger = logging.getLogger(__name__)

# Bases whose namespaces never contribute members
IGNORED_BASE_MODULES = frozenset({"builtins", "abc", "typing", "typing_extensions"})

# Namespace bookkeeping entries that are neither methods nor fields
IGNORED_NAMESPACE_ENTRIES = frozenset(
    {"_abc_impl", "_is_protocol", "__weakref__", "__dict__", "__annotate__", "__annotate_func__", "__annotations_cache__"}
)

_LITERAL_TYPES = (type(None), bool, int, float, complex, str, bytes)


class ClassModelExtractor:
    """Builds ClassModel instances from live classes.

    Stateless and thread-safe.
    """

    def __init__(self, method_detector: MethodTypeDetector | None = None) -> None:
        """Initialize extractor.

        Args:
            method_detector: Method type detector instance
        """
        self._method_detector = method_detector or MethodTypeDetector()

    def extract(self, cls: type, marked_methods: Iterable[str] | None = None) -> ClassModel:
        """Extract the class model of a subject class.

        Args:
            cls: Subject class
            marked_methods: Names of methods carrying the marker; discovered
                from ``@memoize`` when None. Source-level ``__name`` entries
                resolve to their name-mangled members

        Returns:
            Immutable class model

        Raises:
            ValidationError: If the class is abstract, nested or private, its
                constructor is not callable, or a marked name is not a method
        """
        validate_is_class(cls)
        subject = f"{cls.__module__}.{cls.__qualname__}"

        modifiers = self._class_modifiers(cls)
        validate_class_modifiers(modifiers, subject)

        constructor = self._find_constructor(cls)
        if constructor is not None:
            owner, member = constructor
            validate_constructor_callable(getattr(owner, member), subject, member)

        members = self._collect_members(cls)
        method_members = [(name, attr, owner) for name, attr, owner in members if self._method_detector.is_method(attr)]

        if marked_methods is None:
            marked = discover_marked_methods(cls)
        else:
            marked = frozenset(_member_name(name, method_members) for name in marked_methods)
            validate_marked_names(marked, (name for name, _, _ in method_members), subject)

        methods = tuple(
            self._method_model(name, attr, owner, is_marked=name in marked) for name, attr, owner in method_members
        )

        model = ClassModel(
            name=cls.__name__,
            qualified_name=subject,
            module=cls.__module__,
            package=cls.__module__.rpartition(".")[0],
            modifiers=modifiers,
            constructor=self._constructor_model(constructor),
            methods=methods,
            fields=self._field_names(cls, members),
            subject=TypeRef.of(cls),
        )
        logger.debug("Extracted %s: %d methods, %d marked", subject, len(methods), len(marked))
        return model

    def _class_modifiers(self, cls: type) -> ClassModifiers:
        parts = cls.__qualname__.split(".")
        return ClassModifiers(
            visibility=Visibility.PRIVATE if cls.__name__.startswith("_") else Visibility.PUBLIC,
            is_abstract=inspect.isabstract(cls),
            # A local class sits right after "<locals>"; anything else with a dot is nested
            is_nested=len(parts) > 1 and parts[-2] != "<locals>",
        )

    def _find_constructor(self, cls: type) -> tuple[type, str] | None:
        """Find the class along the MRO that defines the constructor.

        ``__init__`` wins over ``__new__`` within one class. None means the
        implicit zero-argument constructor of ``object``.
        """
        for owner in cls.__mro__:
            if owner is object:
                return None
            for member in ("__init__", "__new__"):
                if member in vars(owner):
                    return owner, member
        return None

    def _collect_members(self, cls: type) -> list[tuple[str, Any, type]]:
        """Collect namespace entries along the MRO.

        The most-derived definition of a name wins; order follows definition
        order, subclass first.
        """
        seen: set[str] = set()
        members: list[tuple[str, Any, type]] = []
        for owner in cls.__mro__:
            if owner.__module__ in IGNORED_BASE_MODULES:
                continue
            for name, attr in vars(owner).items():
                if name in seen or name in IGNORED_NAMESPACE_ENTRIES:
                    continue
                seen.add(name)
                members.append((name, attr, owner))
        return members

    def _field_names(self, cls: type, members: list[tuple[str, Any, type]]) -> tuple[str, ...]:
        """Names of non-method attributes, including annotated instance fields."""
        names = [
            name
            for name, attr, _ in members
            if not self._method_detector.is_method(attr) and not (name.startswith("__") and name.endswith("__"))
        ]
        for owner in cls.__mro__:
            if owner.__module__ in IGNORED_BASE_MODULES:
                continue
            names.extend(inspect.get_annotations(owner))
        return tuple(dict.fromkeys(names))

    def _method_model(self, name: str, attr: Any, owner: type, is_marked: bool) -> MethodModel:
        detector = self._method_detector
        func = detector.function_of(attr)
        binding = detector.binding_of(attr)
        signature = _signature_of(func)

        parameters = list(signature.parameters.values())
        if binding is not MethodBinding.STATIC and parameters:
            # Drop self/cls
            parameters = parameters[1:]

        return MethodModel(
            name=name,
            modifiers=MethodModifiers(
                visibility=detector.visibility_of(name, owner),
                binding=binding,
                is_abstract=detector.is_abstract(attr),
                is_async=detector.is_async(attr),
                is_generator=detector.is_generator(attr),
            ),
            parameters=tuple(_parameter_model(p) for p in parameters),
            return_annotation=_annotation_text(signature.return_annotation),
            declared_failures=tuple(TypeRef.of(t) for t in declared_failures(attr)),
            is_marked=is_marked,
            defined_in=owner.__qualname__,
        )

    def _constructor_model(self, constructor: tuple[type, str] | None) -> ConstructorModel:
        if constructor is None:
            return ConstructorModel()

        owner, member = constructor
        # getattr unwraps the implicit staticmethod of __new__
        parameters = list(_signature_of(getattr(owner, member)).parameters.values())[1:]
        return ConstructorModel(
            parameters=tuple(_parameter_model(p) for p in parameters),
            declared_failures=tuple(TypeRef.of(t) for t in declared_failures(vars(owner)[member])),
            defined_in=owner.__qualname__,
            member=member,
        )


def _signature_of(func: Callable[..., Any]) -> inspect.Signature:
    """Signature of a function, permissive for C-level callables."""
    try:
        return inspect.signature(func)
    except (ValueError, TypeError):
        logger.debug("No signature for %r, assuming (self, *args, **kwargs)", func)
        return inspect.Signature(
            [
                inspect.Parameter("self", inspect.Parameter.POSITIONAL_ONLY),
                inspect.Parameter("args", inspect.Parameter.VAR_POSITIONAL),
                inspect.Parameter("kwargs", inspect.Parameter.VAR_KEYWORD),
            ]
        )


def _parameter_model(parameter: inspect.Parameter) -> ParameterModel:
    default = None
    if parameter.default is not inspect.Parameter.empty:
        default = DefaultValue(source=_literal_source(parameter.default), value=parameter.default)

    return ParameterModel(
        name=parameter.name,
        kind=ParameterKind.from_inspect(parameter.kind),
        annotation=_annotation_text(parameter.annotation),
        default=default,
    )


def _annotation_text(annotation: Any) -> str | None:
    if annotation is inspect.Parameter.empty:
        return None
    if isinstance(annotation, str):
        return annotation
    return inspect.formatannotation(annotation)


def _literal_source(value: Any) -> str | None:
    """Return literal source text for a default, or None when it has none.

    Only values that survive a ``repr``/``literal_eval`` round trip with the
    same type are rendered literally.
    """
    if not _is_literal_candidate(value):
        return None

    source = repr(value)
    try:
        restored = ast.literal_eval(source)
    except (ValueError, SyntaxError):
        return None

    if type(restored) is not type(value) or restored != value:
        return None
    return source


def _is_literal_candidate(value: Any) -> bool:
    if type(value) is tuple:
        return all(_is_literal_candidate(item) for item in value)
    return type(value) in _LITERAL_TYPES


def _member_name(name: str, members: Iterable[tuple[str, Any, type]]) -> str:
    """Map a source-level private name such as ``__compute`` to its mangled member name."""
    if not name.startswith("__") or name.endswith("__"):
        return name
    for member, _, owner in members:
        if member == f"_{owner.__name__.lstrip('_')}{name}":
            return member
    return name


def extract_class_model(cls: type, marked_methods: Iterable[str] | None = None) -> ClassModel:
    """Extract the class model of a subject class with the default extractor."""
    return ClassModelExtractor().extract(cls, marked_methods)
