"""Shared fixtures."""

from collections.abc import Iterator

import pytest

from memoize_codegen import GeneratorConfig, InMemoryMetrics, MemoizeGenerator, set_metrics


@pytest.fixture
def config() -> GeneratorConfig:
    """Default configuration, independent of the environment."""
    return GeneratorConfig()


@pytest.fixture
def generator(config: GeneratorConfig) -> MemoizeGenerator:
    """Generator with the default configuration."""
    return MemoizeGenerator(config)


@pytest.fixture
def metrics() -> Iterator[InMemoryMetrics]:
    """In-memory collector installed as the process-wide collector."""
    collector = InMemoryMetrics()
    set_metrics(collector)
    yield collector
    set_metrics(None)
