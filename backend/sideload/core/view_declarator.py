"""View Declarator: ready-made EntityDeclarator built from get / view / links callables.

Invariants:
    - prepare_for_view always returns ViewRecord(id=hash(identity), type=type_handle, data=view(data))
    - declare_links returns {} when no links callable was given
    - hash() encodes via IdCodec when one is configured, otherwise returns the raw id
    - decode_id() returns the codec's DecodeResult untouched

Design Decisions:
    - Plain constructor arguments replace per-type generated code; a type is one instance
    - decode_id_or_raise() is the only place a failed DecodeResult becomes an exception
"""

from typing import Any, Callable, Mapping

from sideload.core.domain_types import DecodeResult, TypeHandle, ViewRecord
from sideload.core.entity_identity import extract_identity, is_id_scalar
from sideload.core.entity_protocols import IdCodec
from sideload.core.errors import IdentifierDecodeError


class ViewDeclarator:
    """EntityDeclarator assembled from callables."""

    def __init__(
        self,
        type_handle: str,
        *,
        get: Callable[[Any], Any],
        view: Callable[[Any], dict],
        links: Callable[[Any], Mapping[Any, Any]] | None = None,
        codec: IdCodec | None = None,
    ):
        self._type_handle = TypeHandle(type_handle)
        self._get = get
        self._view = view
        self._links = links
        self._codec = codec

    def __repr__(self) -> str:
        return f"ViewDeclarator({self._type_handle!r})"

    def type_name(self) -> TypeHandle:
        return self._type_handle

    def get_by_id(self, entity_id: Any) -> Any:
        return self._get(entity_id)

    def declare_links(self, data: Any) -> Mapping[Any, Any]:
        if self._links is None:
            return {}
        return self._links(data)

    def prepare_for_view(self, data: Any) -> ViewRecord:
        return ViewRecord(
            id=self.hash(data),
            type=self._type_handle,
            data=self._view(data),
        )

    def hash(self, id_or_data: Any) -> Any:
        """Public id for an entity or bare id."""
        entity_id = id_or_data if is_id_scalar(id_or_data) else extract_identity(id_or_data)
        if self._codec is None or not isinstance(entity_id, int):
            return entity_id
        return self._codec.encode(self._type_handle, entity_id)

    def decode_id(self, token: str) -> DecodeResult:
        if self._codec is None:
            return DecodeResult.ok(token)
        return self._codec.decode(self._type_handle, token)

    def decode_id_or_raise(self, token: str) -> Any:
        result = self.decode_id(token)
        if not result.is_ok:
            raise IdentifierDecodeError(self._type_handle, result.reason)
        return result.value
