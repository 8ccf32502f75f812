"""API Layer: error handlers for host FastAPI applications.

Invariants:
    - No routes live here; the host application owns its endpoints
    - All errors surface as structured JSON responses
"""
