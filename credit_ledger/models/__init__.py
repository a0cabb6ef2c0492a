"""ORM Models — SQLAlchemy declarative models for persisted entities.

Invariants:
    - All models inherit from Base (db/base.py)

Design Decisions:
    - One file per entity for locality
    - All models imported here so Base.metadata is complete before
      ensure_schema() runs
"""

from credit_ledger.models.account import AccountRecord  # noqa: F401
