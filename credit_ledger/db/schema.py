"""Schema Bootstrap — idempotent table creation at startup.

Invariants:
    - Safe to run on every start (CREATE ... IF NOT EXISTS semantics)
    - Never alters or drops existing tables

Design Decisions:
    - metadata.create_all over migration tooling: the schema is a single table
      and evolves with the code (ADR: no migration framework)
"""

import logging

from sqlalchemy.ext.asyncio import AsyncEngine

import credit_ledger.models  # noqa: F401  registers tables on Base.metadata
from credit_ledger.db.base import Base

logger = logging.getLogger(__name__)


async def ensure_schema(engine: AsyncEngine) -> None:
    """Create missing tables and indexes."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    logger.info("Database schema ensured")
