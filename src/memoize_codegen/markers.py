"""
Declarative markers read by the generator.

``@memoize`` tags a method for memoization in the generated wrapper and
``@raises`` records the failure types a method or constructor declares.
Neither changes the runtime behavior of the decorated function.

Usage:
    ```python
    from memoize_codegen import memoize, raises

    class Calc:
        def __init__(self, seed: int) -> None:
            self.seed = seed

        @memoize
        @raises(ArithmeticError)
        def add(self, a: int, b: int) -> int:
            return self.seed + a + b
    ```
"""

from collections.abc import Callable
from typing import Any, TypeVar

from .constants import MARKER_ATTRIBUTE, RAISES_ATTRIBUTE

F = TypeVar("F", bound=Callable[..., Any])


def _target(func: Any) -> Any:
    """Return the plain function behind staticmethod/classmethod objects."""
    return getattr(func, "__func__", func)


def _tag(func: Any, attribute: str, value: Any, marker: str) -> None:
    """Record a marker attribute on the function behind ``func``.

    Raises:
        TypeError: If ``func`` is not a function or method, e.g. a property
    """
    target = _target(func)
    if not callable(target):
        raise TypeError(f"@{marker} applies to functions and methods, got {type(func).__name__}")
    setattr(target, attribute, value)


def memoize(func: F) -> F:
    """Mark a method for memoization.

    Args:
        func: Method to mark

    Returns:
        The same object, tagged

    Raises:
        TypeError: If func is not a function or method
    """
    _tag(func, MARKER_ATTRIBUTE, True, "memoize")
    return func


def raises(*failure_types: type[BaseException]) -> Callable[[F], F]:
    """Declare the failure types a method may raise.

    Declarations accumulate when the decorator is stacked and keep their
    top-to-bottom order; duplicates are dropped.

    Args:
        failure_types: Exception classes

    Returns:
        Decorator recording the declaration

    Raises:
        TypeError: If an argument is not an exception class, or the decorated
            object is not a function or method
    """
    for failure_type in failure_types:
        if not (isinstance(failure_type, type) and issubclass(failure_type, BaseException)):
            raise TypeError(f"raises() expects exception classes, got {failure_type!r}")

    def decorator(func: F) -> F:
        target = _target(func)
        declared = getattr(target, RAISES_ATTRIBUTE, ())
        # Outer decorators run last but are declared first
        merged = tuple(dict.fromkeys(tuple(failure_types) + tuple(declared)))
        _tag(func, RAISES_ATTRIBUTE, merged, "raises")
        return func

    return decorator


def is_marked(func: Any) -> bool:
    """Check whether a member carries the ``@memoize`` marker."""
    return getattr(_target(func), MARKER_ATTRIBUTE, False) is True


def declared_failures(func: Any) -> tuple[type[BaseException], ...]:
    """Return the failure types declared through ``@raises``."""
    return tuple(getattr(_target(func), RAISES_ATTRIBUTE, ()))
