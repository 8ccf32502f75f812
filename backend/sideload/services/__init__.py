"""Services Layer: render entry points.

Invariants:
    - Every render owns (or receives) exactly one cache context
"""
