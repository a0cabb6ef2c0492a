"""Credit Ledger API — FastAPI application entry point.

Invariants:
    - Routes registered explicitly (no auto-discovery)
    - Global error handlers map CreditLedgerError → structured JSON responses
    - CORS configured from settings (not hardcoded)
    - Services built on startup and drained on shutdown via the lifespan

Design Decisions:
    - Lifespan over @app.on_event: FastAPI recommended pattern, cleaner cleanup
    - Services live on app.state, not in module globals (ADR: explicit lifecycle)
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from credit_ledger.api.error_handlers import register_error_handlers
from credit_ledger.api.request_context import RequestContextMiddleware
from credit_ledger.api.routes import accounts, health, transfers
from credit_ledger.config import get_settings
from credit_ledger.db.schema import ensure_schema
from credit_ledger.infrastructure.observability import setup_logging
from credit_ledger.services.container import build_services

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup/shutdown lifecycle."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    services = build_services(settings)
    await ensure_schema(services.pool.engine)
    app.state.services = services
    logger.info("Credit ledger API started")
    yield
    logger.info("Credit ledger API shutting down")
    await services.close()


app = FastAPI(
    title="Credit Ledger API", version="1.0.0", lifespan=lifespan,
)

settings = get_settings()
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(RequestContextMiddleware)

app.include_router(health.router)
app.include_router(accounts.router)
app.include_router(transfers.router)

register_error_handlers(app)
