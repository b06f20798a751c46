"""
Method type detection utilities.

Provides detection of instance methods, class methods and static methods,
their visibility and function flavour (coroutine, generator, abstract) from
raw class namespace entries.
"""

import inspect
from collections.abc import Callable
from typing import Any

from ..model import MethodBinding, Visibility


class MethodTypeDetector:
    """Detects method types of class namespace entries.

    Stateless and thread-safe utility class.
    """

    def is_method(self, attr: Any) -> bool:
        """Check if a namespace entry is a method of any binding.

        Args:
            attr: Raw value from a class ``__dict__``

        Returns:
            True for functions, staticmethod and classmethod objects
        """
        return isinstance(attr, (staticmethod, classmethod)) or inspect.isfunction(attr)

    def binding_of(self, attr: Any) -> MethodBinding:
        """Return what the method is bound to when called.

        Args:
            attr: Raw value from a class ``__dict__``

        Returns:
            Method binding
        """
        if isinstance(attr, staticmethod):
            return MethodBinding.STATIC
        if isinstance(attr, classmethod):
            return MethodBinding.CLASS
        return MethodBinding.INSTANCE

    def function_of(self, attr: Any) -> Callable[..., Any]:
        """Return the plain function behind a namespace entry."""
        return getattr(attr, "__func__", attr)

    def visibility_of(self, name: str, owner: type) -> Visibility:
        """Derive visibility from naming conventions.

        Dunder names are public; ``__name`` (stored name-mangled as
        ``_Owner__name``) is private; ``_name`` is protected.

        Args:
            name: Attribute name as stored in the class namespace
            owner: Class defining the attribute

        Returns:
            Member visibility
        """
        if name.startswith("__") and name.endswith("__"):
            return Visibility.PUBLIC
        if self._is_mangled(name, owner) or name.startswith("__"):
            return Visibility.PRIVATE
        if name.startswith("_"):
            return Visibility.PROTECTED
        return Visibility.PUBLIC

    def is_async(self, attr: Any) -> bool:
        """Check for a coroutine function (``async def`` returning a value)."""
        return inspect.iscoroutinefunction(self._unwrapped(attr))

    def is_generator(self, attr: Any) -> bool:
        """Check for generator and async generator functions."""
        func = self._unwrapped(attr)
        return inspect.isgeneratorfunction(func) or inspect.isasyncgenfunction(func)

    def is_abstract(self, attr: Any) -> bool:
        return bool(getattr(attr, "__isabstractmethod__", False))

    def _unwrapped(self, attr: Any) -> Callable[..., Any]:
        """Follow ``__wrapped__`` chains left by functools.wraps."""
        func = self.function_of(attr)
        try:
            return inspect.unwrap(func)
        except ValueError:
            return func

    def _is_mangled(self, name: str, owner: type) -> bool:
        """Check for a name mangled by the compiler inside ``owner``'s body."""
        stripped_owner = owner.__name__.lstrip("_")
        return bool(stripped_owner) and name.startswith(f"_{stripped_owner}__")
