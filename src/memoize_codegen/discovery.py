"""
Marker discovery.

Default collaborator that finds the methods carrying ``@memoize`` in a class
and the classes of a module that have at least one marked method.
"""

import inspect
import logging
from types import ModuleType

from .markers import is_marked

logger = logging.getLogger(__name__)


def discover_marked_methods(cls: type) -> frozenset[str]:
    """Find marked method names along the MRO.

    A name shadowed by a subclass is judged by the subclass definition.

    Args:
        cls: Subject class

    Returns:
        Names of marked methods
    """
    seen: set[str] = set()
    marked: set[str] = set()
    for owner in cls.__mro__:
        if owner is object:
            continue
        for name, attr in vars(owner).items():
            if name in seen:
                continue
            seen.add(name)
            if is_marked(attr):
                marked.add(name)
    return frozenset(marked)


def discover_marked_classes(module: ModuleType) -> list[type]:
    """Find classes defined in a module that have marked methods.

    Args:
        module: Imported module

    Returns:
        Classes in definition order
    """
    classes = [
        obj
        for obj in vars(module).values()
        if inspect.isclass(obj) and obj.__module__ == module.__name__ and discover_marked_methods(obj)
    ]
    logger.debug("Discovered %d marked classes in %s", len(classes), module.__name__)
    return classes
