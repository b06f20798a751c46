"""
Per-method cache identifiers.

A cache identifier names the storage field of one memoized method. It is a
fingerprint of the method identity (name, return annotation, modifiers and
parameter kinds/annotations), so it is reproducible across generation runs
and distinct for different overloads of the same name.
"""

from ..constants import DEFAULT_CACHE_FIELD_PREFIX, DEFAULT_IDENTIFIER_LENGTH
from ..model import MethodModel
from .hash_utils import calculate_deterministic_hash, truncate_hash


def canonical_signature(method: MethodModel) -> str:
    """Build the canonical text fingerprinted into the cache identifier.

    Format: ``name(kind:annotation,...)->return[modifiers]``; a missing
    annotation is written as ``?``.

    Args:
        method: Method model

    Returns:
        Canonical signature text
    """
    parameters = ",".join(f"{p.kind.value}:{p.annotation or '?'}" for p in method.parameters)
    modifiers = ",".join(method.modifiers.as_tokens())
    return f"{method.name}({parameters})->{method.return_annotation or '?'}[{modifiers}]"


def cache_identifier(
    method: MethodModel,
    prefix: str = DEFAULT_CACHE_FIELD_PREFIX,
    length: int = DEFAULT_IDENTIFIER_LENGTH,
) -> str:
    """Derive the cache field identifier of a method.

    Args:
        method: Method model
        prefix: Identifier prefix
        length: Number of fingerprint hex chars

    Returns:
        Identifier in format ``{prefix}{fingerprint}``

    Raises:
        ValueError: If prefix is empty or length is out of range
    """
    if not prefix:
        raise ValueError("Cache identifier prefix cannot be empty")

    fingerprint = calculate_deterministic_hash(canonical_signature(method))
    return f"{prefix}{truncate_hash(fingerprint, length)}"
