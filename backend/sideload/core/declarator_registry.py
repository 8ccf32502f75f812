"""Declarator Registry: explicit mapping from type handle to EntityDeclarator instance.

Invariants:
    - One declarator per type handle; re-registering a handle raises DuplicateEntityTypeError
    - resolve() accepts a handle (str / str Enum) or a declarator instance
    - Unregistered handles raise UnknownEntityTypeError; nothing is auto-discovered

Design Decisions:
    - Explicit register() calls at startup (no import-time scanning)
    - Declarator instances used as link keys must also be registered, so every
      type in a render is known up front
"""

from enum import Enum
from typing import Any, Iterable, Iterator

from sideload.core.domain_types import TypeHandle
from sideload.core.entity_protocols import EntityDeclarator
from sideload.core.errors import DuplicateEntityTypeError, UnknownEntityTypeError


def type_handle_of(key: Any) -> TypeHandle:
    """Normalize a link key or include-list entry to its type handle."""
    if isinstance(key, Enum):
        return TypeHandle(str(key.value))
    if isinstance(key, str):
        return TypeHandle(key)
    type_name = getattr(key, "type_name", None)
    if callable(type_name):
        return TypeHandle(type_name())
    raise TypeError(f"Cannot derive a type handle from {key!r}")


class DeclaratorRegistry:
    """Registry of entity declarators keyed by type handle."""

    def __init__(self, declarators: Iterable[EntityDeclarator] = ()):
        self._declarators: dict[TypeHandle, EntityDeclarator] = {}
        for declarator in declarators:
            self.register(declarator)

    def register(self, declarator: EntityDeclarator) -> EntityDeclarator:
        handle = type_handle_of(declarator)
        if handle in self._declarators:
            raise DuplicateEntityTypeError(handle)
        self._declarators[handle] = declarator
        return declarator

    def resolve(self, key: Any) -> EntityDeclarator:
        """Declarator for a handle or declarator key."""
        handle = type_handle_of(key)
        try:
            return self._declarators[handle]
        except KeyError:
            raise UnknownEntityTypeError(handle) from None

    def __contains__(self, key: Any) -> bool:
        try:
            return type_handle_of(key) in self._declarators
        except TypeError:
            return False

    def __iter__(self) -> Iterator[TypeHandle]:
        return iter(self._declarators)

    def __len__(self) -> int:
        return len(self._declarators)
