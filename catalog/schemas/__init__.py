"""Pydantic Schemas: request/response contracts for API endpoints.

Invariants:
    - Schemas decode at the system boundary; models are persistence only
"""
