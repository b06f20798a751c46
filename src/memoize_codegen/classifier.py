"""
Member classification.

Partitions the methods of a class model into memoized, forwarded and excluded
members. A marker always classifies its method as memoized, and a marker that
cannot apply fails the whole class instead of being skipped.
"""

import logging

from .constants import EXCLUDED_SPECIAL_METHODS
from .model import ClassifiedMembers, ClassModel, ExcludedMember, MethodModel
from .validators import validate_memoizable

logger = logging.getLogger(__name__)

REASON_PRIVATE = "private method"
REASON_STATIC = "static or class method"
REASON_CONSTRUCTOR = "constructor"
REASON_SPECIAL = "lifecycle or attribute-protocol special method"


class MemberClassifier:
    """Classifies subject methods for the wrapper surface.

    Stateless and thread-safe.
    """

    def classify(self, class_model: ClassModel) -> ClassifiedMembers:
        """Partition methods of a class model.

        Args:
            class_model: Extracted class model

        Returns:
            Memoized, forwarded and excluded members in subject order

        Raises:
            ValidationError: If a marker is applied to a method that cannot be memoized
        """
        memoized: list[MethodModel] = []
        forwarded: list[MethodModel] = []
        excluded: list[ExcludedMember] = []

        for method in class_model.methods:
            if method.is_marked:
                validate_memoizable(method, class_model.qualified_name)
                memoized.append(method)
                continue

            reason = self.exclusion_reason(method)
            if reason is None:
                forwarded.append(method)
            else:
                excluded.append(ExcludedMember(method=method, reason=reason))

        logger.debug(
            "Classified %s: %d memoized, %d forwarded, %d excluded",
            class_model.qualified_name,
            len(memoized),
            len(forwarded),
            len(excluded),
        )
        return ClassifiedMembers(memoized=tuple(memoized), forwarded=tuple(forwarded), excluded=tuple(excluded))

    def exclusion_reason(self, method: MethodModel) -> str | None:
        """Return why an unmarked method stays off the wrapper, None if it is forwarded."""
        if method.name == "__init__":
            return REASON_CONSTRUCTOR
        if method.modifiers.is_private:
            return REASON_PRIVATE
        if method.modifiers.is_static:
            return REASON_STATIC
        if method.name in EXCLUDED_SPECIAL_METHODS:
            return REASON_SPECIAL
        return None


def classify_members(class_model: ClassModel) -> ClassifiedMembers:
    """Partition methods of a class model with the default classifier."""
    return MemberClassifier().classify(class_model)
