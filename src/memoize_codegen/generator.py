"""
Generation pipeline.

Runs extraction, classification, synthesis and emission for one class or a
batch of classes. Each class is generated independently: a failing class never
affects the output of another.

Example:
    ```python
    from memoize_codegen import MemoizeGenerator, memoize

    class Calc:
        def __init__(self, base: int) -> None:
            self.base = base

        @memoize
        def add(self, x: int) -> int:
            return self.base + x

    CalcMemoized = MemoizeGenerator().materialize(Calc)
    calc = CalcMemoized(10)
    calc.add(3)  # computed
    calc.add(3)  # answered from the cache
    ```
"""

import logging
from collections.abc import Iterable
from dataclasses import dataclass, field
from pathlib import Path
from types import ModuleType

from .classifier import MemberClassifier
from .config import GeneratorConfig
from .discovery import discover_marked_classes
from .emitter import SourceEmitter
from .exceptions import GeneratorError
from .extractor import ClassModelExtractor
from .model import WrapperClassModel
from .synthesizer import WrapperSynthesizer

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class GeneratedWrapper:
    """Wrapper model of one class and the module source rendering it."""

    model: WrapperClassModel
    source: str

    @property
    def name(self) -> str:
        return self.model.name

    @property
    def module(self) -> str:
        return self.model.module


@dataclass
class BatchResult:
    """Outcome of generating several classes."""

    generated: list[GeneratedWrapper] = field(default_factory=list)
    failures: dict[str, GeneratorError] = field(default_factory=dict)

    @property
    def ok(self) -> bool:
        return not self.failures


class MemoizeGenerator:
    """Generates memoizing wrappers for classes.

    Stateless apart from its configuration; a single instance can be shared.
    """

    def __init__(
        self,
        config: GeneratorConfig | None = None,
        extractor: ClassModelExtractor | None = None,
        classifier: MemberClassifier | None = None,
        emitter: SourceEmitter | None = None,
    ) -> None:
        """Initialize generator.

        Args:
            config: Generator configuration (default: GeneratorConfig.from_env())
            extractor: Class model extractor (default: ClassModelExtractor())
            classifier: Member classifier (default: MemberClassifier())
            emitter: Source emitter (default: SourceEmitter())
        """
        self._config = config or GeneratorConfig.from_env()
        self._extractor = extractor or ClassModelExtractor()
        self._classifier = classifier or MemberClassifier()
        self._synthesizer = WrapperSynthesizer(self._config)
        self._emitter = emitter or SourceEmitter()

    @property
    def config(self) -> GeneratorConfig:
        return self._config

    def build(self, cls: type, marked_methods: Iterable[str] | None = None) -> WrapperClassModel:
        """Build the wrapper model of a class without rendering it.

        Args:
            cls: Subject class
            marked_methods: Names of methods to memoize (default: discovered markers)

        Returns:
            Wrapper class model

        Raises:
            ValidationError: If the class or a marker violates a precondition
        """
        class_model = self._extractor.extract(cls, marked_methods)
        classified = self._classifier.classify(class_model)
        return self._synthesizer.synthesize(class_model, classified)

    def generate(self, cls: type, marked_methods: Iterable[str] | None = None) -> GeneratedWrapper:
        """Generate the wrapper of a class.

        Classes defined inside a function still render; their source can be
        materialized in-process but not written as an importable module.

        Args:
            cls: Subject class
            marked_methods: Names of methods to memoize (default: discovered markers)

        Returns:
            Wrapper model and module source

        Raises:
            ValidationError: If the class or a marker violates a precondition
            EmissionError: If the module source cannot be rendered
        """
        model = self.build(cls, marked_methods)
        source = self._emitter.render_module([model], strict=False)
        logger.debug("Generated %s for %s", model.name, model.subject.path)
        return GeneratedWrapper(model=model, source=source)

    def generate_batch(self, classes: Iterable[type]) -> BatchResult:
        """Generate wrappers for several classes, isolating failures.

        Args:
            classes: Subject classes, markers discovered on each

        Returns:
            Generated wrappers and failures keyed by class path
        """
        result = BatchResult()
        for cls in classes:
            try:
                result.generated.append(self.generate(cls))
            except GeneratorError as e:
                path = f"{getattr(cls, '__module__', '?')}.{getattr(cls, '__qualname__', repr(cls))}"
                logger.warning("Skipping %s: %s", path, e)
                result.failures[path] = e

        logger.debug("Batch generated %d wrappers, %d failures", len(result.generated), len(result.failures))
        return result

    def generate_module(self, module: ModuleType) -> BatchResult:
        """Generate wrappers for every marked class defined in a module."""
        return self.generate_batch(discover_marked_classes(module))

    def materialize(self, cls: type, marked_methods: Iterable[str] | None = None) -> type:
        """Generate and compile the wrapper of a class in-process.

        Returns:
            The live wrapper class

        Raises:
            ValidationError: If the class or a marker violates a precondition
            EmissionError: If the module source cannot be rendered
        """
        return self._emitter.materialize(self.build(cls, marked_methods))

    def write_module(self, classes: Iterable[type], path: str | Path | None = None) -> Path:
        """Generate the wrappers of several classes into one module file.

        Args:
            classes: Subject classes defined in the same module
            path: Destination file (default: next to the subject module)

        Returns:
            Path written

        Raises:
            ValidationError: If a class or a marker violates a precondition
            EmissionError: If the module cannot be rendered or written
        """
        models = [self.build(cls) for cls in classes]
        return self._emitter.write_module(models, path)

    def write_source(self, generated: GeneratedWrapper, path: str | Path | None = None) -> Path:
        """Write an already generated wrapper as an importable module.

        Raises:
            EmissionError: If the module cannot be rendered or written
        """
        return self._emitter.write_module([generated.model], path)


def memoized_class(cls: type, config: GeneratorConfig | None = None) -> type:
    """Return a live memoizing wrapper class for ``cls``.

    Convenience for ``MemoizeGenerator(config).materialize(cls)``.
    """
    return MemoizeGenerator(config).materialize(cls)
