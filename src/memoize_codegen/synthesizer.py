"""
Wrapper class synthesis.

Assembles the wrapper model from a class model and its classified members:
the delegate field, one cache field per memoized method, a constructor that
mirrors the subject constructor, and the bodies of memoized and forwarded
methods. Bodies are Python statements; the emitter only lays them out.

Memoized bodies perform check-then-store without any locking. Concurrent
calls with equal arguments may both miss and both call the delegate; the last
store wins. A failing delegate call stores nothing.
"""

import logging
from dataclasses import replace

from .config import GeneratorConfig
from .constants import DELEGATE_FIELD, ERROR_RESERVED_NAME, RUNTIME_ALIAS
from .exceptions import ValidationError
from .keys.cache_identifier import cache_identifier
from .model import (
    CacheFieldModel,
    ClassifiedMembers,
    ClassModel,
    DefaultValue,
    MemberCategory,
    MethodModel,
    ParameterKind,
    ParameterModel,
    WrapperClassModel,
    WrapperConstructorModel,
    WrapperMethodModel,
)
from .validators import validate_unique_cache_ids

logger = logging.getLogger(__name__)

INDENT = "    "

_LOCAL_NAMES = ("cache_key", "cached", "result", "error")


class WrapperSynthesizer:
    """Builds WrapperClassModel instances.

    Stateless apart from its configuration; thread-safe.
    """

    def __init__(self, config: GeneratorConfig | None = None) -> None:
        """Initialize synthesizer.

        Args:
            config: Generator configuration (default: GeneratorConfig())
        """
        self._config = config or GeneratorConfig()

    def synthesize(self, class_model: ClassModel, classified: ClassifiedMembers) -> WrapperClassModel:
        """Assemble the wrapper model.

        Args:
            class_model: Extracted class model
            classified: Classification of its methods

        Returns:
            Wrapper class model

        Raises:
            ValidationError: If cache identifiers collide or a parameter shadows
                a name the generated code relies on
        """
        subject = class_model.qualified_name
        wrapper_name = f"{class_model.name}{self._config.class_suffix}"

        cache_fields = tuple(self._cache_field(method, wrapper_name) for method in classified.memoized)
        validate_unique_cache_ids(cache_fields, subject)
        cache_by_method = {cache_field.method_name: cache_field for cache_field in cache_fields}

        memoized_names = {method.name for method in classified.memoized}
        forwarded_names = {method.name for method in classified.forwarded}

        methods: list[WrapperMethodModel] = []
        for method in class_model.methods:
            if method.name not in memoized_names and method.name not in forwarded_names:
                continue

            _validate_parameter_names(method.parameters, subject, method.name)
            resolved = replace(
                method,
                parameters=self._resolve_defaults(method.parameters, f"{class_model.subject.expression}.{method.name}"),
            )
            if method.name in memoized_names:
                cache_field = cache_by_method[method.name]
                methods.append(
                    WrapperMethodModel(
                        kind=MemberCategory.MEMOIZED,
                        method=resolved,
                        body=self._memoized_body(resolved, cache_field),
                        cache_field=cache_field,
                    )
                )
            else:
                methods.append(
                    WrapperMethodModel(kind=MemberCategory.FORWARDED, method=resolved, body=self._forwarded_body(resolved))
                )

        wrapper = WrapperClassModel(
            name=wrapper_name,
            module=f"{class_model.module}{self._config.module_suffix}",
            package=class_model.package,
            subject=class_model.subject,
            delegate_field=DELEGATE_FIELD,
            constructor=self._constructor(class_model, cache_fields),
            cache_fields=cache_fields,
            methods=tuple(methods),
            docstring=f"Memoizing wrapper generated for {class_model.qualified_name}.",
        )
        logger.debug(
            "Synthesized %s: %d cache fields, %d methods", wrapper_name, len(cache_fields), len(wrapper.methods)
        )
        return wrapper

    def _cache_field(self, method: MethodModel, wrapper_name: str) -> CacheFieldModel:
        return CacheFieldModel(
            id=cache_identifier(method, self._config.cache_field_prefix, self._config.identifier_length),
            method_name=method.name,
            value_type=method.return_annotation,
            metric_name=f"{wrapper_name}.{method.name}",
        )

    def _constructor(self, class_model: ClassModel, cache_fields: tuple[CacheFieldModel, ...]) -> WrapperConstructorModel:
        constructor = class_model.constructor
        _validate_parameter_names(constructor.parameters, class_model.qualified_name, "__init__")

        subject_expression = class_model.subject.expression
        if any(p.name == class_model.subject.binding_name for p in constructor.parameters):
            raise ValidationError(
                ERROR_RESERVED_NAME.format(
                    subject=class_model.qualified_name, member="__init__", name=class_model.subject.binding_name
                ),
                subject=class_model.qualified_name,
                member="__init__",
            )

        body = [f"self.{DELEGATE_FIELD} = {subject_expression}({_call_arguments(constructor.parameters)})"]
        body.extend(f"self.{cache_field.id} = {{}}" for cache_field in cache_fields)

        return WrapperConstructorModel(
            parameters=self._resolve_defaults(constructor.parameters, f"{subject_expression}.{constructor.member}"),
            declared_failures=constructor.declared_failures,
            body=tuple(body),
        )

    def _resolve_defaults(self, parameters: tuple[ParameterModel, ...], owner_expression: str) -> tuple[ParameterModel, ...]:
        """Give every non-literal default a source expression reading it from the subject."""
        resolved = []
        for parameter in parameters:
            if parameter.default is not None and not parameter.default.is_literal:
                source = f"{RUNTIME_ALIAS}.default_of({owner_expression}, {parameter.name!r})"
                parameter = replace(parameter, default=DefaultValue(source=source, value=parameter.default.value))
            resolved.append(parameter)
        return tuple(resolved)

    def _memoized_body(self, method: MethodModel, cache_field: CacheFieldModel) -> tuple[str, ...]:
        """Statements of a memoized method.

        Order: compute the lookup key, look it up, return on hit, otherwise
        call the delegate, store the result and return it.
        """
        local = _local_names(method.parameters)
        key_values = ", ".join(p.name for p in method.parameters)
        cache = f"self.{cache_field.id}"
        metric = repr(cache_field.metric_name)
        call = _delegate_call(method)
        record = self._config.record_metrics

        body = [
            f"{local['cache_key']} = {RUNTIME_ALIAS}.lookup_key({key_values})",
            f"{local['cached']} = {cache}.get({local['cache_key']}, {RUNTIME_ALIAS}.MISSING)",
            f"if {local['cached']} is not {RUNTIME_ALIAS}.MISSING:",
        ]
        if record:
            body.append(f"{INDENT}{RUNTIME_ALIAS}.record_hit({metric})")
        body.append(f"{INDENT}return {local['cached']}")

        if record:
            body.extend(
                [
                    f"{RUNTIME_ALIAS}.record_miss({metric})",
                    "try:",
                    f"{INDENT}{local['result']} = {call}",
                    f"except Exception as {local['error']}:",
                    f"{INDENT}{RUNTIME_ALIAS}.record_error({metric}, {local['error']})",
                    f"{INDENT}raise",
                ]
            )
        else:
            body.append(f"{local['result']} = {call}")

        body.append(f"{cache}[{local['cache_key']}] = {local['result']}")
        if record:
            body.append(f"{RUNTIME_ALIAS}.record_write({metric})")
        body.append(f"return {local['result']}")
        return tuple(body)

    def _forwarded_body(self, method: MethodModel) -> tuple[str, ...]:
        return (f"return {_delegate_call(method)}",)


def _delegate_call(method: MethodModel) -> str:
    call = f"self.{DELEGATE_FIELD}.{method.name}({_call_arguments(method.parameters)})"
    if method.modifiers.is_async:
        return f"await {call}"
    return call


def _call_arguments(parameters: tuple[ParameterModel, ...]) -> str:
    """Render call arguments forwarding every parameter unchanged, in order."""
    arguments = []
    for parameter in parameters:
        if parameter.kind is ParameterKind.VAR_POSITIONAL:
            arguments.append(f"*{parameter.name}")
        elif parameter.kind is ParameterKind.VAR_KEYWORD:
            arguments.append(f"**{parameter.name}")
        elif parameter.kind is ParameterKind.KEYWORD_ONLY:
            arguments.append(f"{parameter.name}={parameter.name}")
        else:
            arguments.append(parameter.name)
    return ", ".join(arguments)


def _local_names(parameters: tuple[ParameterModel, ...]) -> dict[str, str]:
    """Pick body-local names that no parameter shadows."""
    taken = {parameter.name for parameter in parameters}
    names = {}
    for base in _LOCAL_NAMES:
        name = base
        while name in taken:
            name = f"_{name}"
        taken.add(name)
        names[base] = name
    return names


def _validate_parameter_names(parameters: tuple[ParameterModel, ...], subject: str, member: str) -> None:
    for parameter in parameters:
        if parameter.name == RUNTIME_ALIAS:
            raise ValidationError(
                ERROR_RESERVED_NAME.format(subject=subject, member=member, name=RUNTIME_ALIAS),
                subject=subject,
                member=member,
            )


def synthesize_wrapper(
    class_model: ClassModel, classified: ClassifiedMembers, config: GeneratorConfig | None = None
) -> WrapperClassModel:
    """Assemble the wrapper model with a synthesizer for ``config``."""
    return WrapperSynthesizer(config).synthesize(class_model, classified)
