"""
Runtime support imported by generated wrapper modules.

Generated code refers to this module as ``_memo_runtime``. It supplies the
lookup key function, the miss sentinel, default-value resolution, the
``raises`` marker and the process-wide metrics collector.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any, TypeVar

from .constants import DELEGATE_FIELD, GENERATED_BY
from .keys.lookup_key import lookup_key
from .markers import raises
from .metrics import CacheMetrics, NoOpMetrics

logger = logging.getLogger(__name__)

C = TypeVar("C", bound=type)

__all__ = [
    "MISSING",
    "default_of",
    "delegate_of",
    "generated",
    "get_metrics",
    "lookup_key",
    "raises",
    "record_error",
    "record_hit",
    "record_miss",
    "record_write",
    "set_metrics",
]


class _Missing:
    """Sentinel for absent cache entries; ``None`` is a cacheable value."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

_metrics: CacheMetrics = NoOpMetrics()


def set_metrics(metrics: CacheMetrics | None) -> None:
    """Install the process-wide collector (None restores the no-op collector)."""
    global _metrics
    _metrics = metrics if metrics is not None else NoOpMetrics()


def get_metrics() -> CacheMetrics:
    return _metrics


def record_hit(key: str) -> None:
    try:
        _metrics.record_hit(key)
    except Exception as e:
        logger.warning("Failed to record cache hit for %s: %s", key, e)


def record_miss(key: str) -> None:
    try:
        _metrics.record_miss(key)
    except Exception as e:
        logger.warning("Failed to record cache miss for %s: %s", key, e)


def record_write(key: str) -> None:
    try:
        _metrics.record_write(key)
    except Exception as e:
        logger.warning("Failed to record cache write for %s: %s", key, e)


def record_error(key: str, error: BaseException) -> None:
    try:
        _metrics.record_error(key, error)
    except Exception as e:
        logger.warning("Failed to record delegate error for %s: %s", key, e)


def default_of(func: Callable[..., Any], name: str) -> Any:
    """Return the default value of a parameter of ``func``.

    Used by generated signatures whose defaults have no literal form, so the
    wrapper shares the very same default object with the subject.

    Raises:
        KeyError: If ``func`` has no such parameter or it has no default
    """
    parameter = inspect.signature(func).parameters[name]
    if parameter.default is inspect.Parameter.empty:
        raise KeyError(f"Parameter {name!r} of {func!r} has no default")
    return parameter.default


def delegate_of(wrapper: object) -> Any:
    """Return the subject instance a generated wrapper forwards to.

    Raises:
        TypeError: If ``wrapper`` is not an instance of a generated wrapper
    """
    wrapper_cls = type(wrapper)
    if getattr(wrapper_cls, "__generated__", None) != GENERATED_BY:
        raise TypeError(f"{wrapper_cls.__qualname__} is not a generated wrapper")
    return getattr(wrapper, f"_{wrapper_cls.__name__.lstrip('_')}{DELEGATE_FIELD}")


def generated(subject: type) -> Callable[[C], C]:
    """Tag a generated wrapper class with its subject and generator."""

    def decorator(wrapper_cls: C) -> C:
        wrapper_cls.__memoized_subject__ = subject  # type: ignore[attr-defined]
        wrapper_cls.__generated__ = GENERATED_BY  # type: ignore[attr-defined]
        return wrapper_cls

    return decorator
