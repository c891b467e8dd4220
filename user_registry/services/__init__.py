"""Services Layer — user handlers, tool definitions, text generators, tool dispatch.

Invariants:
    - Handlers return envelopes, never raise RegistryError
    - Tool dispatch uses explicit dict mapping (no auto-discovery)
"""
