"""Render Schemas: Pydantic models for rendered entity payloads.

Invariants:
    - ViewRecordOut shape is {id, type, data}, matching core ViewRecord
    - SingleRender.result is one record; ManyRender.result is a list
    - links never contains two records with the same (type, id)

Design Decisions:
    - Built from ViewRecord.to_dict(): no pydantic coupling inside core
    - Separate from core domain types: core stays free of pydantic, schemas are presentation
"""

from typing import Any

from pydantic import BaseModel, ConfigDict


class ViewRecordOut(BaseModel):
    """One rendered entity."""
    model_config = ConfigDict(frozen=True)

    id: Any
    type: str
    data: dict[str, Any] = {}


class SingleRender(BaseModel):
    """Rendered root entity plus its side-loaded links."""

    result: ViewRecordOut
    links: list[ViewRecordOut] = []


class ManyRender(BaseModel):
    """Rendered root entities plus their side-loaded links."""

    result: list[ViewRecordOut] = []
    links: list[ViewRecordOut] = []
