"""Account Repository — parameterized CRUD plus the locking read used by transfers.

Invariants:
    - Every statement runs through a QueryHandle (raw faults already translated)
    - Without an explicit handle each call runs in its own unit of work
    - Emails are lowercased on write and on lookup
    - update() with no provided fields issues no statement and returns None
    - delete() of a missing id raises NotFoundError
    - lock_for_update() locks rows in ascending id order in ONE statement

Design Decisions:
    - Core statements over ORM sessions: FOR UPDATE and RETURNING stay explicit,
      and the statement is what the unit of work sees
    - Optional handle parameter: the transfer engine passes its transaction's
      handle so CRUD reads participate in the same transaction
"""

from __future__ import annotations

import logging
import uuid
from typing import Any
from uuid import UUID

from sqlalchemy import delete, func, insert, select, update

from credit_ledger.core.domain_types import AccountId, Credits
from credit_ledger.core.errors import NotFoundError
from credit_ledger.core.repository_protocols import QueryHandle
from credit_ledger.infrastructure.transaction_runner import TransactionRunner
from credit_ledger.models.account import accounts_table
from credit_ledger.schemas.account import (
    Account,
    AccountCreate,
    AccountPatch,
    AccountWithCredential,
)

logger = logging.getLogger(__name__)

_c = accounts_table.c
_PUBLIC_COLUMNS = (
    _c.id, _c.email, _c.name, _c.date_of_birth,
    _c.credits, _c.created_at, _c.updated_at,
)

DEFAULT_PAGE_LIMIT = 20


class AccountRepository:
    """Account persistence over the transaction runner."""

    def __init__(self, runner: TransactionRunner):
        self._runner = runner

    async def _with_handle(self, handle: QueryHandle | None, work):
        if handle is not None:
            return await work(handle)
        return await self._runner.run(work)

    async def create(
        self, params: AccountCreate, handle: QueryHandle | None = None,
    ) -> Account:
        statement = (
            insert(accounts_table)
            .values(
                id=params.id or uuid.uuid4(),
                email=params.email.lower(),
                credential_hash=params.credential_hash,
                name=params.name,
                date_of_birth=params.date_of_birth,
                credits=params.credits,
            )
            .returning(*_PUBLIC_COLUMNS)
        )

        async def work(h: QueryHandle) -> Account:
            row = await h.fetch_one(statement)
            return Account.model_validate(row)

        account = await self._with_handle(handle, work)
        logger.info(f"Account created: {account.id}")
        return account

    async def find_by_id(
        self, account_id: UUID, handle: QueryHandle | None = None,
    ) -> Account | None:
        statement = select(*_PUBLIC_COLUMNS).where(_c.id == account_id)

        async def work(h: QueryHandle) -> Account | None:
            row = await h.fetch_one(statement)
            return Account.model_validate(row) if row else None

        return await self._with_handle(handle, work)

    async def find_by_email(
        self, email: str, handle: QueryHandle | None = None,
    ) -> AccountWithCredential | None:
        statement = select(*_PUBLIC_COLUMNS, _c.credential_hash).where(
            _c.email == email.lower(),
        )

        async def work(h: QueryHandle) -> AccountWithCredential | None:
            row = await h.fetch_one(statement)
            return AccountWithCredential.model_validate(row) if row else None

        return await self._with_handle(handle, work)

    async def list(
        self,
        limit: int = DEFAULT_PAGE_LIMIT,
        offset: int = 0,
        handle: QueryHandle | None = None,
    ) -> list[Account]:
        """Page of accounts, newest first."""
        statement = (
            select(*_PUBLIC_COLUMNS)
            .order_by(_c.created_at.desc(), _c.id)
            .limit(limit)
            .offset(offset)
        )

        async def work(h: QueryHandle) -> list[Account]:
            rows = await h.fetch_all(statement)
            return [Account.model_validate(row) for row in rows]

        return await self._with_handle(handle, work)

    async def update(
        self,
        account_id: UUID,
        patch: AccountPatch,
        handle: QueryHandle | None = None,
    ) -> Account | None:
        values: dict[str, Any] = patch.provided_fields()
        if not values:
            return None
        if "email" in values:
            values["email"] = values["email"].lower()
        statement = (
            update(accounts_table)
            .where(_c.id == account_id)
            .values(**values, updated_at=func.now())
            .returning(*_PUBLIC_COLUMNS)
        )

        async def work(h: QueryHandle) -> Account | None:
            row = await h.fetch_one(statement)
            return Account.model_validate(row) if row else None

        return await self._with_handle(handle, work)

    async def delete(
        self, account_id: UUID, handle: QueryHandle | None = None,
    ) -> None:
        statement = delete(accounts_table).where(_c.id == account_id)

        async def work(h: QueryHandle) -> int:
            return await h.execute(statement)

        deleted = await self._with_handle(handle, work)
        if deleted == 0:
            raise NotFoundError("Account", [str(account_id)])
        logger.info(f"Account deleted: {account_id}")

    # ─── Transfer support (always inside the caller's transaction) ───

    async def lock_for_update(
        self, account_ids: list[AccountId], handle: QueryHandle,
    ) -> dict[AccountId, Credits]:
        """SELECT ... FOR UPDATE in ascending id order; returns {id: credits}."""
        statement = (
            select(_c.id, _c.credits)
            .where(_c.id.in_(sorted(account_ids)))
            .order_by(_c.id)
            .with_for_update()
        )
        rows = await handle.fetch_all(statement)
        return {AccountId(row["id"]): Credits(row["credits"]) for row in rows}

    async def adjust_credits(
        self, account_id: AccountId, delta: int, handle: QueryHandle,
    ) -> int:
        """Add delta to one balance; returns the affected row count."""
        statement = (
            update(accounts_table)
            .where(_c.id == account_id)
            .values(credits=_c.credits + delta, updated_at=func.now())
        )
        return await handle.execute(statement)
