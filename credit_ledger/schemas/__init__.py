"""Pydantic Schemas — account, patch and transfer contracts.

Invariants:
    - Schemas validate at system boundary (user input, API responses)
    - Credential hashes appear only in AccountWithCredential

Design Decisions:
    - Separate from models: schemas are API contracts, models are persistence (ADR: DDD boundary)
"""
