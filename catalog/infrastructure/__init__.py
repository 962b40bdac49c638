"""Infrastructure Layer: persistence gateway, HTTP listener, logging setup.

Invariants:
    - Infrastructure never imports from the API layer
    - All store exceptions mapped to PersistenceError before leaving this layer
"""
