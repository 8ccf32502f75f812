"""Pydantic Schemas: response shapes for rendered entities.

Invariants:
    - Schemas describe output only; core works with plain dataclasses
"""
