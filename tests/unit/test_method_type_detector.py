"""Tests for MethodTypeDetector."""

import functools
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Iterator

import pytest

from memoize_codegen.keys import MethodTypeDetector
from memoize_codegen.model import MethodBinding, Visibility


class Sample:
    def instance_method(self) -> int:
        return 1

    @classmethod
    def class_method(cls) -> int:
        return 2

    @staticmethod
    def static_method() -> int:
        return 3

    async def coroutine(self) -> int:
        return 4

    def generator(self) -> Iterator[int]:
        yield 5

    async def async_generator(self) -> AsyncIterator[int]:
        yield 6

    def __secret(self) -> int:
        return 7

    def _internal(self) -> int:
        return 8

    def __len__(self) -> int:
        return 9

    @property
    def value(self) -> int:
        return 10


def _logged(func):
    @functools.wraps(func)
    async def wrapper(*args, **kwargs):
        return await func(*args, **kwargs)

    return wrapper


class Wrapped:
    @_logged
    async def fetch(self) -> int:
        return 1


class Base(ABC):
    @abstractmethod
    def run(self) -> int: ...


@pytest.fixture
def detector() -> MethodTypeDetector:
    return MethodTypeDetector()


def _attr(name: str, owner: type = Sample) -> object:
    return vars(owner)[name]


class TestIsMethod:
    """Tests for is_method."""

    @pytest.mark.parametrize("name", ["instance_method", "class_method", "static_method", "coroutine"])
    def test_methods(self, detector: MethodTypeDetector, name: str) -> None:
        """Should accept functions, classmethods and staticmethods."""
        assert detector.is_method(_attr(name))

    def test_property_is_not_a_method(self, detector: MethodTypeDetector) -> None:
        """Should reject properties."""
        assert not detector.is_method(_attr("value"))

    def test_plain_value_is_not_a_method(self, detector: MethodTypeDetector) -> None:
        """Should reject plain values."""
        assert not detector.is_method(42)


class TestBindingOf:
    """Tests for binding_of."""

    @pytest.mark.parametrize(
        ("name", "binding"),
        [
            ("instance_method", MethodBinding.INSTANCE),
            ("class_method", MethodBinding.CLASS),
            ("static_method", MethodBinding.STATIC),
        ],
    )
    def test_binding(self, detector: MethodTypeDetector, name: str, binding: MethodBinding) -> None:
        """Should detect the binding of each kind."""
        assert detector.binding_of(_attr(name)) is binding

    def test_function_of_unwraps_descriptors(self, detector: MethodTypeDetector) -> None:
        """Should return the plain function behind a staticmethod."""
        func = detector.function_of(_attr("static_method"))

        assert func() == 3


class TestVisibilityOf:
    """Tests for visibility_of."""

    def test_public(self, detector: MethodTypeDetector) -> None:
        """Should treat plain names as public."""
        assert detector.visibility_of("instance_method", Sample) is Visibility.PUBLIC

    def test_dunder_is_public(self, detector: MethodTypeDetector) -> None:
        """Should treat special methods as public."""
        assert detector.visibility_of("__len__", Sample) is Visibility.PUBLIC

    def test_mangled_is_private(self, detector: MethodTypeDetector) -> None:
        """Should treat name-mangled members as private."""
        assert "_Sample__secret" in vars(Sample)
        assert detector.visibility_of("_Sample__secret", Sample) is Visibility.PRIVATE

    def test_single_underscore_is_protected(self, detector: MethodTypeDetector) -> None:
        """Should treat single-underscore names as protected."""
        assert detector.visibility_of("_internal", Sample) is Visibility.PROTECTED

    def test_mangled_for_other_owner_is_protected(self, detector: MethodTypeDetector) -> None:
        """Should only treat names mangled for the owner as private."""
        assert detector.visibility_of("_Other__secret", Sample) is Visibility.PROTECTED


class TestFunctionFlavour:
    """Tests for is_async, is_generator and is_abstract."""

    def test_coroutine(self, detector: MethodTypeDetector) -> None:
        """Should detect coroutine functions."""
        assert detector.is_async(_attr("coroutine"))
        assert not detector.is_async(_attr("instance_method"))

    def test_wrapped_coroutine(self, detector: MethodTypeDetector) -> None:
        """Should see through functools.wraps."""
        assert detector.is_async(_attr("fetch", Wrapped))

    def test_generators(self, detector: MethodTypeDetector) -> None:
        """Should detect sync and async generators."""
        assert detector.is_generator(_attr("generator"))
        assert detector.is_generator(_attr("async_generator"))
        assert not detector.is_async(_attr("async_generator"))
        assert not detector.is_generator(_attr("coroutine"))

    def test_abstract(self, detector: MethodTypeDetector) -> None:
        """Should detect abstract methods."""
        assert detector.is_abstract(_attr("run", Base))
        assert not detector.is_abstract(_attr("instance_method"))
