"""
Configuration for the wrapper generator.

Handles environment variables, default values, and parameter validation
for generator configuration. Precedence rules:

1. Explicit parameter (highest precedence)
2. Environment variable
3. Default value (lowest precedence)
"""

import os
from dataclasses import dataclass

from .constants import (
    DEFAULT_CACHE_FIELD_PREFIX,
    DEFAULT_CLASS_SUFFIX,
    DEFAULT_IDENTIFIER_LENGTH,
    DEFAULT_MODULE_SUFFIX,
    MAX_IDENTIFIER_LENGTH,
    MIN_IDENTIFIER_LENGTH,
)

# Environment variable names
ENV_CLASS_SUFFIX = "MEMOIZE_CODEGEN_CLASS_SUFFIX"
ENV_MODULE_SUFFIX = "MEMOIZE_CODEGEN_MODULE_SUFFIX"
ENV_IDENTIFIER_LENGTH = "MEMOIZE_CODEGEN_IDENTIFIER_LENGTH"
ENV_RECORD_METRICS = "MEMOIZE_CODEGEN_RECORD_METRICS"

_TRUE_VALUES = frozenset({"1", "true", "yes", "on"})
_FALSE_VALUES = frozenset({"0", "false", "no", "off"})


@dataclass(frozen=True)
class GeneratorConfig:
    """Generator settings.

    Attributes:
        class_suffix: Appended to the subject class name to name the wrapper
        module_suffix: Appended to the subject module name for emitted modules
        cache_field_prefix: Prefix of every cache field identifier
        identifier_length: Number of fingerprint hex chars in cache identifiers
        record_metrics: Whether generated bodies report hits/misses to the runtime
    """

    class_suffix: str = DEFAULT_CLASS_SUFFIX
    module_suffix: str = DEFAULT_MODULE_SUFFIX
    cache_field_prefix: str = DEFAULT_CACHE_FIELD_PREFIX
    identifier_length: int = DEFAULT_IDENTIFIER_LENGTH
    record_metrics: bool = True

    def __post_init__(self) -> None:
        _validate_suffix("class_suffix", self.class_suffix)
        _validate_suffix("module_suffix", self.module_suffix)
        _validate_cache_field_prefix(self.cache_field_prefix)
        _validate_identifier_length(self.identifier_length)

    @classmethod
    def from_env(
        cls,
        class_suffix: str | None = None,
        module_suffix: str | None = None,
        identifier_length: int | None = None,
        record_metrics: bool | None = None,
    ) -> "GeneratorConfig":
        """Resolve configuration following precedence rules.

        Args:
            class_suffix: Explicit wrapper class suffix
            module_suffix: Explicit emitted module suffix
            identifier_length: Explicit fingerprint length
            record_metrics: Explicit metrics switch

        Returns:
            Resolved configuration

        Raises:
            ValueError: If a resolved value is invalid
        """
        return cls(
            class_suffix=_resolve_str(class_suffix, ENV_CLASS_SUFFIX, DEFAULT_CLASS_SUFFIX),
            module_suffix=_resolve_str(module_suffix, ENV_MODULE_SUFFIX, DEFAULT_MODULE_SUFFIX),
            identifier_length=_resolve_int(identifier_length, ENV_IDENTIFIER_LENGTH, DEFAULT_IDENTIFIER_LENGTH),
            record_metrics=_resolve_bool(record_metrics, ENV_RECORD_METRICS, True),
        )


def _resolve_str(explicit_value: str | None, env_name: str, default: str) -> str:
    if explicit_value is not None:
        return explicit_value

    env_value = os.getenv(env_name)
    if env_value:
        return env_value

    return default


def _resolve_int(explicit_value: int | None, env_name: str, default: int) -> int:
    if explicit_value is not None:
        return explicit_value

    env_value = os.getenv(env_name)
    if env_value:
        try:
            return int(env_value)
        except ValueError as e:
            raise ValueError(f"{env_name} must be an integer, got {env_value!r}") from e

    return default


def _resolve_bool(explicit_value: bool | None, env_name: str, default: bool) -> bool:
    if explicit_value is not None:
        return explicit_value

    env_value = os.getenv(env_name)
    if not env_value:
        return default

    normalized = env_value.strip().lower()
    if normalized in _TRUE_VALUES:
        return True
    if normalized in _FALSE_VALUES:
        return False
    raise ValueError(f"{env_name} must be a boolean flag, got {env_value!r}")


def _validate_suffix(param_name: str, value: str) -> None:
    """Validate a name suffix.

    The suffix must keep the derived name a valid identifier.
    """
    if not isinstance(value, str):
        raise ValueError(f"{param_name} must be str, got {type(value).__name__}")
    if not value or not ("x" + value).isidentifier():
        raise ValueError(f"{param_name} must be a non-empty identifier fragment, got {value!r}")


def _validate_cache_field_prefix(value: str) -> None:
    if not isinstance(value, str) or not value.isidentifier():
        raise ValueError(f"cache_field_prefix must be a valid identifier, got {value!r}")
    if value.startswith("__"):
        raise ValueError("cache_field_prefix cannot start with '__' (it would be name-mangled)")


def _validate_identifier_length(value: int) -> None:
    # bool is a subclass of int
    if isinstance(value, bool) or not isinstance(value, int):
        raise ValueError(f"identifier_length must be int, got {type(value).__name__}")
    if not MIN_IDENTIFIER_LENGTH <= value <= MAX_IDENTIFIER_LENGTH:
        raise ValueError(
            f"identifier_length must be between {MIN_IDENTIFIER_LENGTH} and {MAX_IDENTIFIER_LENGTH}, got {value}"
        )
