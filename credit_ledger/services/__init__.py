"""Services Layer — account persistence, credit transfers and service wiring.

Invariants:
    - All database access goes through the TransactionRunner
    - Services are built once by container.build_services() (no module globals)

Design Decisions:
    - One file per service for locality (ADR: no god objects)
"""
