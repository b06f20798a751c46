"""Tests for cache identifiers and lookup keys."""

import re

import pytest

from memoize_codegen.keys import (
    cache_identifier,
    calculate_deterministic_hash,
    canonical_signature,
    lookup_key,
    stable_hash,
    to_unsigned,
    truncate_hash,
)
from memoize_codegen.model import (
    MethodBinding,
    MethodModel,
    MethodModifiers,
    ParameterKind,
    ParameterModel,
)


def _method(name: str = "add", *annotations: str, returns: str | None = "int") -> MethodModel:
    return MethodModel(
        name=name,
        modifiers=MethodModifiers(),
        parameters=tuple(
            ParameterModel(name=f"p{i}", kind=ParameterKind.POSITIONAL_OR_KEYWORD, annotation=annotation)
            for i, annotation in enumerate(annotations)
        ),
        return_annotation=returns,
    )


class TestHashUtils:
    """Tests for hash helpers."""

    def test_deterministic_hash(self) -> None:
        """Should be a stable SHA256 hex digest."""
        digest = calculate_deterministic_hash("test")

        assert digest == calculate_deterministic_hash("test")
        assert len(digest) == 64
        assert digest.startswith("9f86d081884c7d65")

    def test_truncate(self) -> None:
        """Should keep the first characters."""
        assert truncate_hash("abcdef0123", 4) == "abcd"

    @pytest.mark.parametrize("length", [0, -3, 11])
    def test_truncate_invalid_length(self, length: int) -> None:
        """Should reject lengths out of range."""
        with pytest.raises(ValueError):
            truncate_hash("abcdef0123", length)

    def test_to_unsigned(self) -> None:
        """Should map negative hashes to unsigned 64-bit integers."""
        assert to_unsigned(-1) == 2**64 - 1
        assert to_unsigned(5) == 5


class TestCacheIdentifier:
    """Tests for per-method cache identifiers."""

    def test_canonical_signature(self) -> None:
        """Should describe name, parameters, return and modifiers."""
        method = _method("add", "int", "int")

        assert canonical_signature(method) == (
            "add(positional_or_keyword:int,positional_or_keyword:int)->int[public,instance]"
        )

    def test_missing_annotations(self) -> None:
        """Should write missing annotations as '?'."""
        method = MethodModel(
            name="f",
            modifiers=MethodModifiers(),
            parameters=(ParameterModel(name="x", kind=ParameterKind.VAR_POSITIONAL),),
        )

        assert canonical_signature(method) == "f(var_positional:?)->?[public,instance]"

    def test_format(self) -> None:
        """Should be prefix plus hex fingerprint."""
        identifier = cache_identifier(_method("add", "int"))

        assert re.fullmatch(r"_cache_[0-9a-f]{16}", identifier)

    def test_reproducible(self) -> None:
        """Should be equal for equal method identities."""
        assert cache_identifier(_method("add", "int")) == cache_identifier(_method("add", "int"))

    def test_parameter_names_do_not_matter(self) -> None:
        """Should depend on parameter kinds and annotations only."""
        renamed = MethodModel(
            name="add",
            modifiers=MethodModifiers(),
            parameters=(ParameterModel(name="value", kind=ParameterKind.POSITIONAL_OR_KEYWORD, annotation="int"),),
            return_annotation="int",
        )

        assert cache_identifier(renamed) == cache_identifier(_method("add", "int"))

    @pytest.mark.parametrize(
        "other",
        [
            _method("add", "float"),
            _method("add", "int", "int"),
            _method("add", "int", returns="float"),
            _method("sub", "int"),
        ],
    )
    def test_distinct_for_different_identities(self, other: MethodModel) -> None:
        """Should differ when name, parameters or return differ."""
        assert cache_identifier(other) != cache_identifier(_method("add", "int"))

    def test_modifiers_participate(self) -> None:
        """Should differ when modifiers differ."""
        coroutine = MethodModel(
            name="add",
            modifiers=MethodModifiers(is_async=True),
            parameters=_method("add", "int").parameters,
            return_annotation="int",
        )
        static = MethodModel(name="add", modifiers=MethodModifiers(binding=MethodBinding.STATIC))

        assert cache_identifier(coroutine) != cache_identifier(_method("add", "int"))
        assert cache_identifier(static) != cache_identifier(MethodModel(name="add", modifiers=MethodModifiers()))

    def test_custom_prefix_and_length(self) -> None:
        """Should honor prefix and length."""
        identifier = cache_identifier(_method(), prefix="memo_", length=32)

        assert re.fullmatch(r"memo_[0-9a-f]{32}", identifier)

    def test_empty_prefix(self) -> None:
        """Should reject an empty prefix."""
        with pytest.raises(ValueError, match="prefix"):
            cache_identifier(_method(), prefix="")


class TestStableHash:
    """Tests for argument hashing."""

    def test_equal_lists(self) -> None:
        """Should hash equal lists equally."""
        assert stable_hash([1, 2, [3]]) == stable_hash([1, 2, [3]])

    def test_dict_order_independent(self) -> None:
        """Should ignore dict insertion order."""
        assert stable_hash({"a": 1, "b": [2]}) == stable_hash({"b": [2], "a": 1})

    def test_list_and_tuple_differ(self) -> None:
        """Should keep lists and tuples apart."""
        assert stable_hash([1, 2]) != stable_hash((1, 2))

    def test_bytearray_as_bytes(self) -> None:
        """Should hash bytearray like bytes."""
        assert stable_hash(bytearray(b"ab")) == stable_hash(b"ab")

    def test_unhashable_object_uses_identity(self) -> None:
        """Should fall back to identity for unhashable objects."""

        class Box:
            __hash__ = None  # type: ignore[assignment]

        box = Box()

        assert stable_hash(box) == stable_hash(box)
        assert stable_hash(box) != stable_hash(Box())


class TestLookupKey:
    """Tests for per-call lookup keys."""

    def test_format(self) -> None:
        """Should be the key prefix followed by an unsigned integer."""
        assert re.fullmatch(r"_key_\d+", lookup_key(2, 3))

    def test_equal_arguments_collapse(self) -> None:
        """Should give equal keys for equal argument values."""
        assert lookup_key(2, [3, 4], {"k": "v"}) == lookup_key(2, [3, 4], {"k": "v"})

    def test_argument_order_matters(self) -> None:
        """Should distinguish argument order."""
        assert lookup_key(2, 3) != lookup_key(3, 2)

    def test_different_arguments(self) -> None:
        """Should distinguish different values."""
        assert lookup_key(2, 3) != lookup_key(2, 4)

    def test_no_arguments(self) -> None:
        """Should build a constant key for parameterless calls."""
        assert lookup_key() == lookup_key()
        assert lookup_key() != lookup_key(None)
