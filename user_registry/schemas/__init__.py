"""Pydantic Schemas — user input shape and persisted record.

Invariants:
    - Schemas validate at system boundary (tool input, generated text, backing file)
"""
