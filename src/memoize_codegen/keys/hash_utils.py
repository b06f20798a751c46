"""
Hash utilities for cache identifiers and lookup keys.

Provides SHA256-based hashing for generation-time identifiers, which must be
stable across executions and Python versions, and the unsigned encoding used
by run-time lookup keys.
"""

import hashlib

_UINT64_MASK = (1 << 64) - 1


def calculate_deterministic_hash(data: str) -> str:
    """Calculate SHA256 hash of string data.

    Args:
        data: String data to hash

    Returns:
        Hexadecimal hash string (64 characters)
    """
    # Use UTF-8 encoding for consistent byte representation
    return hashlib.sha256(data.encode("utf-8")).hexdigest()


def truncate_hash(full_hash: str, length: int = 16) -> str:
    """Truncate hash to specified length for shorter identifiers.

    Args:
        full_hash: Full hexadecimal hash string
        length: Number of characters to keep (default: 16)

    Returns:
        Truncated hash string

    Raises:
        ValueError: If length is not positive or exceeds the hash length
    """
    if length <= 0:
        raise ValueError(f"Requested length must be positive, got {length}")

    if length > len(full_hash):
        raise ValueError(f"Requested length {length} exceeds hash length {len(full_hash)}")

    return full_hash[:length]


def to_unsigned(value: int) -> int:
    """Reinterpret a Python hash as an unsigned 64-bit integer."""
    return value & _UINT64_MASK
