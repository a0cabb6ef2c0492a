"""Credit Transfer Engine — moves credits between two accounts in one transaction.

Invariants:
    - Validation (same account, non-positive/non-integer amount) before any DB access
    - Both rows locked by ONE FOR UPDATE read in ascending id order (deadlock avoidance)
    - Missing accounts reported by id, source first
    - Insufficient balance aborts before any write
    - Debit and credit happen in the same transaction: sum of credits is conserved
    - Store-detected conflicts restart the whole sequence (TransactionRunner)

Design Decisions:
    - Impureim sandwich: rules in core/transfer_rules.py, IO here
    - The unit of work has no side effects outside the transaction; logging of the
      outcome happens after run() returns so retries never duplicate it
"""

import logging

from credit_ledger.core.domain_types import AccountId, Credits
from credit_ledger.core.errors import NotFoundError
from credit_ledger.core.repository_protocols import CreditStore, QueryHandle
from credit_ledger.core.transfer_rules import (
    check_sufficient_balance,
    find_missing_ids,
    order_lock_ids,
    validate_transfer_request,
)
from credit_ledger.infrastructure.transaction_runner import (
    TransactionOptions,
    TransactionRunner,
)
from credit_ledger.schemas.account import TransferResult

logger = logging.getLogger(__name__)


class CreditTransferEngine:
    """Validated, deadlock-avoiding, balance-conserving transfers."""

    def __init__(
        self,
        runner: TransactionRunner,
        store: CreditStore,
        options: TransactionOptions | None = None,
    ):
        self._runner = runner
        self._store = store
        self._options = options or TransactionOptions()

    async def transfer(
        self, source_id: AccountId, destination_id: AccountId, amount: Credits,
    ) -> TransferResult:
        validate_transfer_request(source_id, destination_id, amount)

        async def unit_of_work(handle: QueryHandle) -> TransferResult:
            return await self._move_credits(handle, source_id, destination_id, amount)

        result = await self._runner.run(unit_of_work, self._options)
        logger.info(
            f"Transferred {amount} credits {source_id} -> {destination_id}",
        )
        return result

    async def _move_credits(
        self,
        handle: QueryHandle,
        source_id: AccountId,
        destination_id: AccountId,
        amount: Credits,
    ) -> TransferResult:
        balances = await self._store.lock_for_update(
            order_lock_ids(source_id, destination_id), handle,
        )
        find_missing_ids(source_id, destination_id, balances)
        check_sufficient_balance(source_id, balances[source_id], amount)

        await self._store.adjust_credits(source_id, -amount, handle)
        await self._store.adjust_credits(destination_id, amount, handle)

        source = await self._store.find_by_id(source_id, handle)
        destination = await self._store.find_by_id(destination_id, handle)
        if source is None or destination is None:
            missing = [
                str(account_id)
                for account_id, account in (
                    (source_id, source), (destination_id, destination),
                )
                if account is None
            ]
            raise NotFoundError("Account", missing)
        return TransferResult(source=source, destination=destination)
