"""Core Layer — pure domain logic: error taxonomy, classification, transfer rules.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - All functions are pure and deterministic; classify() never raises

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
