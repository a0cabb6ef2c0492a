"""Route Dependencies — resolve services built in the lifespan.

Invariants:
    - Services come from app.state.services, never from module globals
    - Missing services (lifespan not run) is a 503, not a crash

Design Decisions:
    - One dependency per service so tests override exactly what they fake
"""

from fastapi import Request

from credit_ledger.core.errors import ServiceUnavailableError
from credit_ledger.services.account_repository import AccountRepository
from credit_ledger.services.container import LedgerServices
from credit_ledger.services.credit_transfer import CreditTransferEngine


def get_services(request: Request) -> LedgerServices:
    services = getattr(request.app.state, "services", None)
    if services is None:
        raise ServiceUnavailableError("Services not initialized")
    return services


def get_account_repository(request: Request) -> AccountRepository:
    return get_services(request).accounts


def get_transfer_engine(request: Request) -> CreditTransferEngine:
    return get_services(request).transfers
