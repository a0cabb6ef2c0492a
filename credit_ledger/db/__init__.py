"""Database Schema — SQLAlchemy Base and startup bootstrap.

Invariants:
    - Table metadata lives on db.base.Base
    - Schema is created idempotently; no migrations

Design Decisions:
    - asyncpg driver for PostgreSQL (ADR: native async, no thread pool overhead)
"""
