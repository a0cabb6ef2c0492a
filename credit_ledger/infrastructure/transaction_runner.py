"""Transaction Runner — executes a unit of work under BEGIN/COMMIT with conflict retry.

Invariants:
    - One connection per attempt, released exactly once on every exit path
    - Any error from the unit of work or COMMIT triggers ROLLBACK; a failing
      ROLLBACK is logged and never replaces the original error
    - Only RETRYABLE_CONFLICT is retried, restarting the whole attempt from BEGIN
    - Raw driver faults leave the runner translated into the taxonomy; domain
      errors raised by the unit of work propagate untouched
    - Backoff sleep happens after the connection is released

Design Decisions:
    - Attempt loop driven by the pure state machine in core/transaction_states.py
      (ADR: retry boundary testable without a database)
    - Isolation set with SET TRANSACTION as the first statement after BEGIN
    - Units of work must not dispatch side effects outside the transaction:
      a retried attempt replays them
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import TypeVar

from sqlalchemy import text
from sqlalchemy.ext.asyncio import AsyncConnection

from credit_ledger.core.classify_errors import classify, translate_db_error
from credit_ledger.core.domain_types import IsolationLevel, TransactionState
from credit_ledger.core.errors import (
    CreditLedgerError,
    TransactionRetriesExhaustedError,
)
from credit_ledger.core.repository_protocols import UnitOfWork
from credit_ledger.core.transaction_states import (
    next_state_after_failure,
    next_state_on_success,
    retry_delay_ms,
)
from credit_ledger.infrastructure.database import SqlQueryHandle
from credit_ledger.infrastructure.retrying_connector import RetryingConnector

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class TransactionOptions:
    """Per-call transaction settings."""
    isolation_level: IsolationLevel | None = None
    retries: int = 0


class TransactionRunner:
    """Runs units of work inside database transactions."""

    def __init__(
        self,
        connector: RetryingConnector,
        default_isolation_level: IsolationLevel | None = None,
        retry_base_delay_ms: int = 10,
    ):
        self.connector = connector
        self.default_isolation_level = default_isolation_level
        self.retry_base_delay_ms = retry_base_delay_ms

    async def run(
        self, unit_of_work: UnitOfWork[T], options: TransactionOptions | None = None,
    ) -> T:
        """Run unit_of_work in a transaction, retrying on store-detected conflicts."""
        options = options or TransactionOptions()
        if options.retries < 0:
            raise ValueError("retries must be >= 0")
        isolation = options.isolation_level or self.default_isolation_level
        attempts = options.retries + 1

        for attempt in range(attempts):
            try:
                return await self._run_attempt(unit_of_work, isolation, attempt)
            except Exception as e:
                kind = classify(e)
                outcome = next_state_after_failure(kind, attempt, options.retries)
                self._log_transition(TransactionState.ROLLING_BACK, outcome, attempt)
                if outcome is TransactionState.FAILED:
                    if isinstance(e, CreditLedgerError):
                        raise
                    raise translate_db_error(e) from e
                delay = retry_delay_ms(self.retry_base_delay_ms, attempt)
                logger.warning(
                    f"Transaction conflict, retry after {delay}ms: {e}",
                    extra={"attempt": attempt + 1, "error_code": kind.value},
                )
                await asyncio.sleep(delay / 1000)

        raise TransactionRetriesExhaustedError(attempts)

    async def _run_attempt(
        self,
        unit_of_work: UnitOfWork[T],
        isolation: IsolationLevel | None,
        attempt: int,
    ) -> T:
        """One BEGIN -> EXECUTING -> COMMITTING -> DONE pass."""
        connection = await self.connector.acquire()
        state = TransactionState.BEGIN
        transaction = None
        try:
            transaction = await connection.begin()
            if isolation is not None:
                await connection.execute(
                    text(f"SET TRANSACTION ISOLATION LEVEL {isolation.value}"),
                )
            state = self._advance(state, attempt)
            result = await unit_of_work(SqlQueryHandle(connection))
            state = self._advance(state, attempt)
            await transaction.commit()
            self._advance(state, attempt)
            return result
        except BaseException:
            self._log_transition(state, TransactionState.ROLLING_BACK, attempt)
            await self._rollback(connection, transaction)
            raise
        finally:
            await self._release(connection)

    def _advance(self, state: TransactionState, attempt: int) -> TransactionState:
        new_state = next_state_on_success(state)
        self._log_transition(state, new_state, attempt)
        return new_state

    async def _rollback(self, connection: AsyncConnection, transaction) -> None:
        """ROLLBACK, swallowing failures so the original error survives."""
        try:
            if transaction is not None:
                await transaction.rollback()
            else:
                await connection.rollback()
        except Exception as e:
            logger.warning(f"Rollback failed (ignored): {e}")

    async def _release(self, connection: AsyncConnection) -> None:
        try:
            await self.connector.release(connection)
        except Exception as e:
            logger.warning(f"Connection release failed (ignored): {e}")

    def _log_transition(
        self, old: TransactionState, new: TransactionState, attempt: int,
    ) -> None:
        logger.debug(
            f"Transaction {old.value} -> {new.value}",
            extra={"attempt": attempt + 1, "transaction_state": new.value},
        )
