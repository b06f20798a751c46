"""memoize-codegen: generated memoizing wrappers for Python classes.

Marks methods with ``@memoize`` and generates a wrapper class that owns a
delegate instance, caches the results of marked methods per argument values
and forwards every other public method unchanged.

The wrapper reproduces methods only. Fields, class variables and properties
of the subject stay on the delegate and are not part of the wrapper surface.
A subject defining neither ``__init__`` nor ``__new__`` is built with no
arguments.

Basic usage:
    ```python
    from memoize_codegen import memoize, memoized_class

    class Calc:
        def __init__(self, seed: int) -> None:
            self.seed = seed

        @memoize
        def add(self, a: int, b: int) -> int:
            return self.seed + a + b

    CalcMemoized = memoized_class(Calc)
    CalcMemoized(10).add(1, 2)
    ```

Writing importable modules:
    ```python
    from memoize_codegen import MemoizeGenerator

    MemoizeGenerator().write_module([Calc])  # calc_memoized.py next to calc.py
    ```

With OpenTelemetry metrics:
    ```python
    from memoize_codegen import OpenTelemetryMetrics, set_metrics

    set_metrics(OpenTelemetryMetrics())
    ```
"""

__version__ = "0.1.0"

# Pipeline
from .classifier import MemberClassifier, classify_members
from .config import GeneratorConfig
from .discovery import discover_marked_classes, discover_marked_methods
from .emitter import SourceEmitter

# Exceptions
from .exceptions import EmissionError, GeneratorError, ValidationError
from .extractor import ClassModelExtractor, extract_class_model
from .generator import BatchResult, GeneratedWrapper, MemoizeGenerator, memoized_class

# Markers
from .markers import memoize, raises

# Metrics
from .metrics import (
    CacheMetrics,
    InMemoryMetrics,
    KeyStats,
    NoOpMetrics,
    OpenTelemetryMetrics,
)

# Models
from .model import (
    CacheFieldModel,
    ClassifiedMembers,
    ClassModel,
    MethodModel,
    WrapperClassModel,
)
from .runtime import delegate_of, get_metrics, set_metrics
from .synthesizer import WrapperSynthesizer, synthesize_wrapper

__all__ = [
    # Markers
    "memoize",
    "raises",
    # Pipeline
    "MemoizeGenerator",
    "GeneratedWrapper",
    "BatchResult",
    "memoized_class",
    "GeneratorConfig",
    "ClassModelExtractor",
    "extract_class_model",
    "MemberClassifier",
    "classify_members",
    "WrapperSynthesizer",
    "synthesize_wrapper",
    "SourceEmitter",
    "discover_marked_classes",
    "discover_marked_methods",
    # Models
    "ClassModel",
    "MethodModel",
    "ClassifiedMembers",
    "CacheFieldModel",
    "WrapperClassModel",
    # Metrics
    "CacheMetrics",
    "KeyStats",
    "NoOpMetrics",
    "InMemoryMetrics",
    "OpenTelemetryMetrics",
    "set_metrics",
    "get_metrics",
    "delegate_of",
    # Exceptions
    "GeneratorError",
    "ValidationError",
    "EmissionError",
]
