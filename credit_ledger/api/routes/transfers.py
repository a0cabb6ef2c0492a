"""Transfer Routes — atomic two-party credit transfer.

Invariants:
    - Amount and same-account checks happen in the engine, before any DB access
    - Response carries both accounts as committed

Design Decisions:
    - Body schema accepts any int: the engine owns the positive-integer rule so the
      API and programmatic callers share one error shape
"""

from fastapi import APIRouter, Depends

from credit_ledger.api.dependencies import get_transfer_engine
from credit_ledger.core.domain_types import AccountId, Credits
from credit_ledger.schemas.account import TransferBody, TransferResult
from credit_ledger.services.credit_transfer import CreditTransferEngine

router = APIRouter(prefix="/api/v1/transfers", tags=["transfers"])


@router.post("", response_model=TransferResult)
async def transfer_credits(
    body: TransferBody,
    engine: CreditTransferEngine = Depends(get_transfer_engine),
):
    return await engine.transfer(
        AccountId(body.source_id), AccountId(body.destination_id), Credits(body.amount),
    )
