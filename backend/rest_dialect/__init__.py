"""rest-dialect: a JSON-Server style REST controller over pluggable repositories.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
