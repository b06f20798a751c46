"""
Structural validation rules.

Each rule raises ValidationError naming the offending class or method and the
violated precondition. Generation of a class either passes every rule or
produces nothing.
"""

from collections.abc import Iterable

from .constants import (
    ERROR_CLASS_ABSTRACT,
    ERROR_CLASS_NESTED,
    ERROR_CLASS_NOT_A_CLASS,
    ERROR_CLASS_PRIVATE,
    ERROR_CONSTRUCTOR_NOT_CALLABLE,
    ERROR_DUPLICATE_CACHE_ID,
    ERROR_MARKER_GENERATOR,
    ERROR_MARKER_PRIVATE,
    ERROR_MARKER_SPECIAL,
    ERROR_MARKER_STATIC,
    ERROR_MARKER_VOID,
    ERROR_UNKNOWN_MEMBER,
    EXCLUDED_SPECIAL_METHODS,
)
from .exceptions import ValidationError
from .model import CacheFieldModel, ClassModifiers, MethodModel, Visibility


def validate_is_class(subject: object) -> None:
    """Validate that the subject is a class.

    Raises:
        ValidationError: If subject is not a class
    """
    if not isinstance(subject, type):
        name = getattr(subject, "__qualname__", repr(subject))
        raise ValidationError(
            ERROR_CLASS_NOT_A_CLASS.format(subject=name, type_name=type(subject).__name__),
            subject=name,
        )


def validate_class_modifiers(modifiers: ClassModifiers, subject: str) -> None:
    """Validate that a delegate of the class can be constructed.

    Args:
        modifiers: Class modifiers
        subject: Qualified class name used in messages

    Raises:
        ValidationError: If the class is abstract, nested or private
    """
    if modifiers.is_abstract:
        raise ValidationError(ERROR_CLASS_ABSTRACT.format(subject=subject), subject=subject)

    if modifiers.is_nested:
        raise ValidationError(ERROR_CLASS_NESTED.format(subject=subject), subject=subject)

    if modifiers.visibility is not Visibility.PUBLIC:
        raise ValidationError(ERROR_CLASS_PRIVATE.format(subject=subject), subject=subject)


def validate_constructor_callable(constructor: object, subject: str, member: str) -> None:
    """Validate that the constructor can build a delegate.

    Raises:
        ValidationError: If the constructor attribute is not callable
    """
    if not callable(constructor):
        raise ValidationError(
            ERROR_CONSTRUCTOR_NOT_CALLABLE.format(subject=subject, member=member), subject=subject, member=member
        )


def validate_marked_names(marked_names: Iterable[str], method_names: Iterable[str], subject: str) -> None:
    """Validate that every marked name refers to a method of the class.

    Raises:
        ValidationError: For the first unknown name, in sorted order
    """
    unknown = sorted(set(marked_names) - set(method_names))
    if unknown:
        name = unknown[0]
        raise ValidationError(ERROR_UNKNOWN_MEMBER.format(subject=subject, member=name), subject=subject, member=name)


def validate_memoizable(method: MethodModel, subject: str) -> None:
    """Validate that a marked method can be memoized.

    Args:
        method: Marked method
        subject: Qualified class name used in messages

    Raises:
        ValidationError: If the marker cannot apply to the method
    """
    _validate_marker_placement(method, subject)
    _validate_has_value(method, subject)


def _validate_marker_placement(method: MethodModel, subject: str) -> None:
    """Validate visibility, binding and special-method rules."""
    if method.modifiers.is_private:
        raise ValidationError(
            ERROR_MARKER_PRIVATE.format(subject=subject, member=method.name), subject=subject, member=method.name
        )

    if method.modifiers.is_static:
        raise ValidationError(
            ERROR_MARKER_STATIC.format(subject=subject, member=method.name), subject=subject, member=method.name
        )

    if method.name in EXCLUDED_SPECIAL_METHODS:
        raise ValidationError(
            ERROR_MARKER_SPECIAL.format(subject=subject, member=method.name), subject=subject, member=method.name
        )


def _validate_has_value(method: MethodModel, subject: str) -> None:
    """Validate that there is a value to store."""
    if method.modifiers.is_generator:
        raise ValidationError(
            ERROR_MARKER_GENERATOR.format(subject=subject, member=method.name), subject=subject, member=method.name
        )

    if method.is_void:
        raise ValidationError(
            ERROR_MARKER_VOID.format(subject=subject, member=method.name), subject=subject, member=method.name
        )


def validate_unique_cache_ids(fields: Iterable[CacheFieldModel], subject: str) -> None:
    """Validate that cache identifiers are unique within one wrapper.

    Raises:
        ValidationError: If two methods share an identifier
    """
    seen: dict[str, str] = {}
    for cache_field in fields:
        other = seen.get(cache_field.id)
        if other is not None:
            raise ValidationError(
                ERROR_DUPLICATE_CACHE_ID.format(
                    cache_id=cache_field.id, subject=subject, member=cache_field.method_name, other=other
                ),
                subject=subject,
                member=cache_field.method_name,
            )
        seen[cache_field.id] = cache_field.method_name
