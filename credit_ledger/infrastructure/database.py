"""Database Pool — bounded async connection pool with drain and health checks.

Invariants:
    - Every checked-out connection is counted in-flight until release()
    - release() returns the connection to the pool exactly once
    - After drain() starts, acquire() refuses new work; drain() waits for in-flight
      units of work before disposing the engine
    - Every statement run through SqlQueryHandle has its raw fault translated
      (core/classify_errors.py) before reaching the caller

Design Decisions:
    - Explicit service object built at startup from validated Settings
      (ADR: no implicit process-wide singleton)
    - max_overflow=0: the pool size IS the connection bound
    - idle timeout enforced as a maximum connection age (pool_recycle): SQLAlchemy has
      no idle eviction. 0 disables recycling, as 0 disables the connect timeout
    - engine injectable: tests hand in a SQLite StaticPool engine
"""

import asyncio
import logging
from typing import Any

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection, AsyncEngine, create_async_engine

from credit_ledger.core.classify_errors import translate_db_error
from credit_ledger.core.errors import CreditLedgerError, ServiceUnavailableError

logger = logging.getLogger(__name__)


def engine_options(
    max_connections: int, idle_timeout_ms: int, connect_timeout_ms: int,
) -> dict[str, Any]:
    """Pool keyword arguments for create_async_engine. A 0 timeout means no limit."""
    connect_timeout_s = connect_timeout_ms / 1000 if connect_timeout_ms > 0 else None
    options: dict[str, Any] = {
        "pool_size": max_connections,
        "max_overflow": 0,
        "pool_timeout": connect_timeout_s,
        "pool_recycle": idle_timeout_ms / 1000 if idle_timeout_ms > 0 else -1,
        "pool_pre_ping": True,
        "connect_args": {},
    }
    if connect_timeout_s is not None:
        options["connect_args"]["timeout"] = connect_timeout_s
    return options


class DatabasePool:
    """Owns the async engine and tracks connections checked out of it."""

    def __init__(
        self,
        database_url: str | None = None,
        *,
        max_connections: int = 10,
        idle_timeout_ms: int = 10_000,
        connect_timeout_ms: int = 10_000,
        engine: AsyncEngine | None = None,
    ):
        if engine is None:
            if database_url is None:
                raise ValueError("database_url or engine is required")
            engine = create_async_engine(
                database_url,
                **engine_options(max_connections, idle_timeout_ms, connect_timeout_ms),
            )
        self.engine = engine
        self._in_flight = 0
        self._idle = asyncio.Event()
        self._idle.set()
        self._draining = False

    @property
    def in_flight(self) -> int:
        return self._in_flight

    @property
    def is_draining(self) -> bool:
        return self._draining

    async def acquire(self) -> AsyncConnection:
        """Check out one connection. Raw connect faults propagate unchanged."""
        if self._draining:
            raise ServiceUnavailableError("Database pool is draining")
        self._in_flight += 1
        self._idle.clear()
        try:
            return await self.engine.connect()
        except BaseException:
            self._release_slot()
            raise

    async def release(self, connection: AsyncConnection) -> None:
        """Return a connection to the pool."""
        try:
            await connection.close()
        finally:
            self._release_slot()

    def _release_slot(self) -> None:
        self._in_flight -= 1
        if self._in_flight == 0:
            self._idle.set()

    async def drain(self, timeout_s: float | None = None) -> None:
        """Stop new checkouts, wait for in-flight work, then close all connections."""
        self._draining = True
        logger.info(
            f"Draining database pool ({self._in_flight} connection(s) in flight)",
        )
        try:
            await asyncio.wait_for(self._idle.wait(), timeout=timeout_s)
        except TimeoutError:
            logger.warning(
                f"Drain timed out with {self._in_flight} connection(s) in flight",
            )
        await self.engine.dispose()
        logger.info("Database pool closed")

    async def health_check(self) -> bool:
        """Check database connectivity (for readiness probes)."""
        if self._draining:
            return False
        try:
            connection = await self.acquire()
            try:
                await connection.execute(text("SELECT 1"))
            finally:
                await self.release(connection)
            return True
        except Exception as e:
            logger.error(f"DB health check failed: {e}")
            return False


class SqlQueryHandle:
    """QueryHandle over one checked-out AsyncConnection."""

    def __init__(self, connection: AsyncConnection):
        self._connection = connection

    async def fetch_all(self, statement) -> list[dict[str, Any]]:
        result = await self._run(statement)
        return [dict(row) for row in result.mappings().all()]

    async def fetch_one(self, statement) -> dict[str, Any] | None:
        result = await self._run(statement)
        row = result.mappings().first()
        return dict(row) if row is not None else None

    async def execute(self, statement) -> int:
        """Run a write statement and return the affected row count."""
        result = await self._run(statement)
        return result.rowcount

    async def _run(self, statement):
        try:
            return await self._connection.execute(statement)
        except CreditLedgerError:
            raise
        except Exception as e:
            translated = translate_db_error(e)
            logger.debug(
                f"Query failed: {type(e).__name__}",
                extra={"error_code": translated.code},
            )
            raise translated from e
