"""Declarator Registry: registration, lookup by handle / enum / instance, errors."""

from enum import Enum

import pytest

from sideload.core.declarator_registry import DeclaratorRegistry, type_handle_of
from sideload.core.errors import DuplicateEntityTypeError, UnknownEntityTypeError
from sideload.core.view_declarator import ViewDeclarator


class Kind(str, Enum):
    USER = "user"


def _declarator(handle):
    return ViewDeclarator(handle, get=lambda i: None, view=lambda d: {})


def test_resolve_by_handle_enum_and_instance():
    user = _declarator("user")
    registry = DeclaratorRegistry([user])
    assert registry.resolve("user") is user
    assert registry.resolve(Kind.USER) is user
    assert registry.resolve(user) is user


def test_unknown_handle_raises():
    registry = DeclaratorRegistry()
    with pytest.raises(UnknownEntityTypeError) as exc_info:
        registry.resolve("phantom")
    assert exc_info.value.code == "UNKNOWN_ENTITY_TYPE"


def test_duplicate_registration_raises():
    registry = DeclaratorRegistry([_declarator("user")])
    with pytest.raises(DuplicateEntityTypeError):
        registry.register(_declarator("user"))


def test_container_protocol():
    registry = DeclaratorRegistry([_declarator("user"), _declarator("team")])
    assert "user" in registry
    assert "post" not in registry
    assert 3.5 not in registry
    assert len(registry) == 2
    assert list(registry) == ["user", "team"]


def test_type_handle_of_rejects_unrelated_objects():
    with pytest.raises(TypeError):
        type_handle_of(3.5)
