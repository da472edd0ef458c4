"""Core Layer: pure dialect logic, no IO, no web framework imports.

Invariants:
    - No module in core/ imports from api/, infrastructure/ or examples/
    - parse_options and classify are pure and deterministic
"""
