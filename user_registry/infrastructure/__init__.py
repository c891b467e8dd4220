"""Infrastructure Layer — disk store, Anthropic client, logging setup.

Invariants:
    - All disk and network failures mapped to RegistryError subclasses
    - Anthropic calls wrapped with retry/timeout/error mapping
"""
