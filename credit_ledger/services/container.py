"""Service Container — builds the pool, connector, runner and services once per process.

Invariants:
    - Created once at startup from validated Settings, stored on app.state
    - close() drains in-flight units of work before closing connections
    - Nothing here runs at import time

Design Decisions:
    - Explicit container over a module-level db_manager singleton: tests build
      their own container around an injected engine
"""

import logging
from dataclasses import dataclass

from sqlalchemy.ext.asyncio import AsyncEngine

from credit_ledger.config import Settings
from credit_ledger.infrastructure.database import DatabasePool
from credit_ledger.infrastructure.retrying_connector import RetryingConnector
from credit_ledger.infrastructure.transaction_runner import (
    TransactionOptions,
    TransactionRunner,
)
from credit_ledger.services.account_repository import AccountRepository
from credit_ledger.services.credit_transfer import CreditTransferEngine

logger = logging.getLogger(__name__)


@dataclass
class LedgerServices:
    pool: DatabasePool
    connector: RetryingConnector
    runner: TransactionRunner
    accounts: AccountRepository
    transfers: CreditTransferEngine

    async def close(self, timeout_s: float | None = 30.0) -> None:
        await self.pool.drain(timeout_s)


def build_services(
    settings: Settings, engine: AsyncEngine | None = None,
) -> LedgerServices:
    """Wire the data-access stack from settings."""
    pool = DatabasePool(
        None if engine is not None else settings.database_url,
        max_connections=settings.db_pool_max_connections,
        idle_timeout_ms=settings.db_idle_timeout_ms,
        connect_timeout_ms=settings.db_connect_timeout_ms,
        engine=engine,
    )
    connector = RetryingConnector(
        pool,
        max_attempts=settings.db_connect_retry_max_attempts,
        base_delay_ms=settings.db_connect_retry_base_delay_ms,
    )
    runner = TransactionRunner(
        connector,
        default_isolation_level=settings.db_default_isolation_level,
        retry_base_delay_ms=settings.transaction_retry_base_delay_ms,
    )
    accounts = AccountRepository(runner)
    transfers = CreditTransferEngine(
        runner,
        accounts,
        TransactionOptions(retries=settings.transfer_max_retries),
    )
    logger.info(
        "Ledger services built",
        extra={"isolation_level": getattr(
            settings.db_default_isolation_level, "value", None,
        )},
    )
    return LedgerServices(pool, connector, runner, accounts, transfers)
