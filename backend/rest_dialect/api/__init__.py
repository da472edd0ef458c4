"""API Layer: Starlette/FastAPI-facing controller, renderer, handlers and routes.

Invariants:
    - Backend outcomes are mapped to responses here and nowhere else
"""
