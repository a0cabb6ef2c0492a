"""Account Routes — CRUD over the account repository.

Invariants:
    - Passwords are hashed before reaching the repository; hashes never returned
    - PATCH with no fields is a 400, PATCH/GET/DELETE of a missing id a 404
    - Pagination limit bounded 1..100

Design Decisions:
    - Thin handlers: all persistence and error mapping live in services/ and core/
"""

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, Query, Response, status

from credit_ledger.api.dependencies import get_account_repository
from credit_ledger.core.errors import InvalidArgumentError, NotFoundError
from credit_ledger.schemas.account import (
    Account,
    AccountCreate,
    AccountPatch,
    AccountSignup,
    AccountUpdate,
)
from credit_ledger.services.account_repository import AccountRepository
from credit_ledger.services.credentials import hash_password

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/accounts", tags=["accounts"])


@router.post(
    "", response_model=Account, status_code=status.HTTP_201_CREATED,
)
async def create_account(
    body: AccountSignup,
    accounts: AccountRepository = Depends(get_account_repository),
):
    """Create an account (signup)."""
    return await accounts.create(AccountCreate(
        email=body.email,
        credential_hash=hash_password(body.password),
        name=body.name,
        date_of_birth=body.date_of_birth,
        credits=body.credits,
    ))


@router.get("")
async def list_accounts(
    limit: int = Query(20, ge=1, le=100),
    offset: int = Query(0, ge=0),
    accounts: AccountRepository = Depends(get_account_repository),
):
    """List accounts, newest first."""
    page = await accounts.list(limit=limit, offset=offset)
    return {
        "accounts": [a.model_dump(mode="json") for a in page],
        "pagination": {"limit": limit, "offset": offset},
    }


@router.get("/{account_id}", response_model=Account)
async def get_account(
    account_id: UUID,
    accounts: AccountRepository = Depends(get_account_repository),
):
    account = await accounts.find_by_id(account_id)
    if account is None:
        raise NotFoundError("Account", [str(account_id)])
    return account


@router.patch("/{account_id}", response_model=Account)
async def update_account(
    account_id: UUID,
    body: AccountUpdate,
    accounts: AccountRepository = Depends(get_account_repository),
):
    """Partial update — only fields present in the body are written."""
    fields = {
        name: getattr(body, name)
        for name in body.model_fields_set
        if name != "password"
    }
    if "password" in body.model_fields_set and body.password is not None:
        fields["credential_hash"] = hash_password(body.password)
    patch = AccountPatch(**fields)
    if not patch.provided_fields():
        raise InvalidArgumentError("No fields to update")
    account = await accounts.update(account_id, patch)
    if account is None:
        raise NotFoundError("Account", [str(account_id)])
    return account


@router.delete("/{account_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_account(
    account_id: UUID,
    accounts: AccountRepository = Depends(get_account_repository),
):
    await accounts.delete(account_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
