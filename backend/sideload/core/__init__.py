"""Core Layer: link-graph resolution logic, no IO, no async.

Invariants:
    - No module in core/ imports from services/, api/, or infrastructure/
    - The cache is reached only through the RenderCacheLike protocol

Design Decisions:
    - Functional core separated from the imperative shell that owns cache lifetimes
"""
