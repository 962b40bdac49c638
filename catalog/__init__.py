"""Product Catalog Service: async CRUD over a relational store.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)
"""
