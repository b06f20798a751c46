"""
Cache key scheme.

This module provides the generation-time cache identifiers of memoized
methods and the run-time lookup keys derived from call arguments.
"""

from .cache_identifier import cache_identifier, canonical_signature
from .hash_utils import calculate_deterministic_hash, to_unsigned, truncate_hash
from .lookup_key import lookup_key, stable_hash
from .method_type_detector import MethodTypeDetector

__all__ = [
    "MethodTypeDetector",
    # Hash utilities
    "cache_identifier",
    "calculate_deterministic_hash",
    "canonical_signature",
    "lookup_key",
    "stable_hash",
    "to_unsigned",
    "truncate_hash",
]
