"""Infrastructure Layer: render cache and logging setup.

Invariants:
    - Infrastructure never imports walker logic from core/
    - Backend faults are contained here (fail-open), never raised to callers
"""
