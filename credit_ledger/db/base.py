"""SQLAlchemy Declarative Base — shared metadata for the ledger tables.

Invariants:
    - Every table registers on Base.metadata
    - Constraint and index names are deterministic (naming convention below)

Design Decisions:
    - Named constraints: the CHECK on credits and the unique email index keep
      stable names across bootstraps, so operators can grep for them in errors
"""

from sqlalchemy import MetaData
from sqlalchemy.orm import DeclarativeBase

NAMING_CONVENTION = {
    "ix": "ix_%(column_0_label)s",
    "uq": "uq_%(table_name)s_%(column_0_name)s",
    "ck": "ck_%(table_name)s_%(constraint_name)s",
    "pk": "pk_%(table_name)s",
}


class Base(DeclarativeBase):
    """Declarative base for credit ledger tables."""
    metadata = MetaData(naming_convention=NAMING_CONVENTION)
