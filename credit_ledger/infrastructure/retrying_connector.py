"""Retrying Connector — acquires one pooled connection with bounded exponential backoff.

Invariants:
    - Only TRANSIENT faults (core/classify_errors.py) are retried
    - Non-transient faults are translated and raised immediately, never retried
    - At most max_attempts connection attempts; wait base_delay_ms * 2^attempt
      between attempt n and n+1 (attempts numbered from 0)
    - Exhausted retries raise DatabaseConnectionError

Design Decisions:
    - Retry loop shaped like the resilient API client: for-attempt loop with a
      _handle_transient_error helper that either sleeps or raises
    - No jitter: the connect bound is deterministic so total wait is predictable
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncConnection

from credit_ledger.core.classify_errors import classify, translate_db_error
from credit_ledger.core.domain_types import ErrorKind
from credit_ledger.core.errors import DatabaseConnectionError
from credit_ledger.infrastructure.database import DatabasePool

logger = logging.getLogger(__name__)


class RetryingConnector:
    """Wraps DatabasePool.acquire() with transient-fault retry."""

    def __init__(
        self,
        pool: DatabasePool,
        max_attempts: int = 4,
        base_delay_ms: int = 1000,
    ):
        if max_attempts < 1:
            raise ValueError("max_attempts must be at least 1")
        self.pool = pool
        self.max_attempts = max_attempts
        self.base_delay_ms = base_delay_ms

    async def acquire(self) -> AsyncConnection:
        """Acquire a connection, retrying transient connectivity faults."""
        for attempt in range(self.max_attempts):
            try:
                connection = await self.pool.acquire()
                if attempt:
                    logger.info(
                        "Database connection acquired after retry",
                        extra={"attempt": attempt + 1},
                    )
                return connection
            except Exception as e:
                if classify(e) is not ErrorKind.TRANSIENT:
                    raise translate_db_error(e) from e
                await self._handle_transient_error(e, attempt)
        raise DatabaseConnectionError("no attempts made", 0)

    async def release(self, connection: AsyncConnection) -> None:
        await self.pool.release(connection)

    async def _handle_transient_error(self, e: Exception, attempt: int) -> None:
        """Sleep before the next attempt, or raise when none remain."""
        if attempt + 1 >= self.max_attempts:
            logger.error(
                f"Database connect failed after {self.max_attempts} attempt(s): {e}",
                extra={"attempt": attempt + 1},
            )
            raise DatabaseConnectionError(str(e), self.max_attempts) from e
        delay = self._backoff(attempt)
        logger.warning(
            f"Transient connect error, retry after {delay}ms: {e}",
            extra={"attempt": attempt + 1},
        )
        await asyncio.sleep(delay / 1000)

    def _backoff(self, attempt: int) -> int:
        return self.base_delay_ms * (2 ** attempt)
