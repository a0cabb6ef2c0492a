"""Transfer Rules — pure validation and ordering rules for credit transfers.

Invariants:
    - Validation runs before any database access
    - Lock order is ascending by id for every transfer touching the same pair
    - Missing ids are reported source first, then destination
    - A balance check never mutates anything

Design Decisions:
    - Pure functions raise domain errors directly: the engine in services/ only
      sequences them around the IO (ADR: impureim sandwich)
"""

from credit_ledger.core.domain_types import AccountId, Credits
from credit_ledger.core.errors import (
    InsufficientBalanceError,
    InvalidArgumentError,
    NotFoundError,
)


def validate_transfer_request(
    source_id: AccountId, destination_id: AccountId, amount: object,
) -> None:
    """Reject same-account transfers and non-positive or non-integer amounts."""
    if source_id == destination_id:
        raise InvalidArgumentError(
            "Source and destination accounts cannot be the same",
            field="destination_id",
        )
    # bool is an int subclass; True must not transfer one credit
    if isinstance(amount, bool) or not isinstance(amount, int) or amount <= 0:
        raise InvalidArgumentError(
            "Amount must be a positive integer", field="amount",
        )


def order_lock_ids(
    source_id: AccountId, destination_id: AccountId,
) -> list[AccountId]:
    """Deterministic global lock order for a pair of accounts."""
    return sorted([source_id, destination_id])


def find_missing_ids(
    source_id: AccountId, destination_id: AccountId,
    found: dict[AccountId, Credits],
) -> None:
    """Raise NotFoundError naming exactly the ids absent from the locked rows."""
    missing = [
        str(account_id)
        for account_id in (source_id, destination_id)
        if account_id not in found
    ]
    if missing:
        raise NotFoundError("Account", missing)


def check_sufficient_balance(
    source_id: AccountId, balance: Credits, amount: Credits,
) -> None:
    if balance < amount:
        raise InsufficientBalanceError(str(source_id), balance, amount)
