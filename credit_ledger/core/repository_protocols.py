"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy
    - Statements are SQLAlchemy Executables: repositories build them, the handle
      runs them and translates every raw fault before it reaches the caller
"""

from typing import Any, Awaitable, Callable, Protocol, TypeVar

from credit_ledger.core.domain_types import AccountId, Credits

Statement = Any  # SQLAlchemy Executable; core stays free of the import

T = TypeVar("T")


class QueryHandle(Protocol):
    """Transaction-scoped, error-classified query path."""
    async def fetch_all(self, statement: Statement) -> list[dict[str, Any]]: ...
    async def fetch_one(self, statement: Statement) -> dict[str, Any] | None: ...
    async def execute(self, statement: Statement) -> int: ...


UnitOfWork = Callable[[QueryHandle], Awaitable[T]]


class CreditStore(Protocol):
    """What the transfer engine needs from account persistence."""
    async def lock_for_update(
        self, account_ids: list[AccountId], handle: QueryHandle,
    ) -> dict[AccountId, Credits]: ...
    async def adjust_credits(
        self, account_id: AccountId, delta: int, handle: QueryHandle,
    ) -> int: ...
    async def find_by_id(
        self, account_id: AccountId, handle: QueryHandle | None = None,
    ) -> Any: ...
