"""
Per-call lookup keys.

Generated wrappers call ``lookup_key`` with the actual argument values of a
memoized call. The key is a combined hash of all values, so logically equal
argument tuples collapse to the same key. Lookups do not re-check equality on
a hit: two unequal argument tuples with colliding hashes share a cache entry.

Normalization applied before hashing:
- list, tuple -> hashed by items (lists and tuples stay distinct)
- dict -> hashed by items, independent of insertion order
- set, frozenset -> hashed by members
- bytearray -> hashed as bytes
- other unhashable objects -> identity hash (a misuse; equal-by-value
  mutable objects will not share an entry)
"""

from typing import Any

from ..constants import LOOKUP_KEY_PREFIX
from .hash_utils import to_unsigned


def _hash_sequence(tag: str, items: Any) -> int:
    return hash((tag, tuple(stable_hash(item) for item in items)))


def _hash_mapping(mapping: dict[Any, Any]) -> int:
    return hash(("dict", frozenset((stable_hash(k), stable_hash(v)) for k, v in mapping.items())))


def _hash_members(members: Any) -> int:
    return hash(("set", frozenset(stable_hash(member) for member in members)))


def stable_hash(value: Any) -> int:
    """Hash a value by content where Python containers allow it.

    Args:
        value: Argument value

    Returns:
        Integer hash
    """
    if isinstance(value, list):
        return _hash_sequence("list", value)
    if isinstance(value, tuple):
        return _hash_sequence("tuple", value)
    if isinstance(value, dict):
        return _hash_mapping(value)
    if isinstance(value, (set, frozenset)):
        return _hash_members(value)
    if isinstance(value, bytearray):
        return hash(bytes(value))

    try:
        return hash(value)
    except TypeError:
        return object.__hash__(value)


def lookup_key(*values: Any) -> str:
    """Build the lookup key for one call.

    Args:
        values: Argument values in parameter order; ``*args`` is passed as one
            tuple and ``**kwargs`` as one dict

    Returns:
        Key in format ``_key_{unsigned 64-bit hash}``
    """
    return f"{LOOKUP_KEY_PREFIX}{to_unsigned(_hash_sequence('args', values))}"
