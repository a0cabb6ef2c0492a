"""Error Handlers — global exception handlers for the credit ledger API.

Invariants:
    - CreditLedgerError → structured JSON with error code, message, severity
    - RequestValidationError → field-level error details
    - Routing errors (unknown path, wrong method) → same envelope as domain errors
    - Exception (catch-all) → never leaks internal details
    - Error envelopes carry the current request id

Design Decisions:
    - Layered handlers: domain (CreditLedgerError), routing (Starlette HTTPException),
      validation (Pydantic), catch-all (Exception)
    - Extracted from main.py (ADR: import fan-out < 10)
"""

import logging

from fastapi import FastAPI, Request, status
from fastapi.responses import JSONResponse
from fastapi.exceptions import RequestValidationError
from starlette.exceptions import HTTPException as StarletteHTTPException

from credit_ledger.core.errors import CreditLedgerError, ErrorCategory, ErrorSeverity
from credit_ledger.infrastructure.observability import request_id_var

logger = logging.getLogger(__name__)


def register_error_handlers(app: FastAPI) -> None:
    """Register all global error handlers on the FastAPI app."""
    _register_ledger_error_handler(app)
    _register_http_error_handler(app)
    _register_validation_error_handler(app)
    _register_generic_error_handler(app)


def _register_ledger_error_handler(app: FastAPI) -> None:
    """Register domain/infrastructure error handler."""

    @app.exception_handler(CreditLedgerError)
    async def ledger_error_handler(request: Request, exc: CreditLedgerError):
        """Handle all credit ledger domain/infrastructure errors."""
        exc.context.request_id = exc.context.request_id or request_id_var.get() or None
        log = logger.error if exc.http_status >= 500 else logger.warning
        log(
            f"CreditLedgerError: {exc.message}",
            extra={"error_code": exc.code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.http_status, content=exc.to_response(),
        )


_HTTP_ERROR_CODES = {
    status.HTTP_404_NOT_FOUND: ("NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND),
    status.HTTP_405_METHOD_NOT_ALLOWED: ("METHOD_NOT_ALLOWED", ErrorCategory.VALIDATION),
}


def _register_http_error_handler(app: FastAPI) -> None:
    """Register handler for routing-level HTTP errors raised by Starlette."""

    @app.exception_handler(StarletteHTTPException)
    async def http_error_handler(request: Request, exc: StarletteHTTPException):
        """Wrap 404/405 and friends in the ledger error envelope."""
        code, category = _HTTP_ERROR_CODES.get(
            exc.status_code, ("HTTP_ERROR", ErrorCategory.VALIDATION),
        )
        logger.warning(
            f"HTTP {exc.status_code} on {request.method} {request.url.path}",
            extra={"error_code": code, "path": request.url.path},
        )
        return JSONResponse(
            status_code=exc.status_code,
            content={
                "error": {
                    "code": code,
                    "message": str(exc.detail),
                    "category": category.value,
                    "severity": ErrorSeverity.WARNING.value,
                    "context": {"request_id": request_id_var.get() or None},
                },
            },
            headers=getattr(exc, "headers", None),
        )


def _register_validation_error_handler(app: FastAPI) -> None:
    """Register Pydantic validation error handler."""

    @app.exception_handler(RequestValidationError)
    async def validation_error_handler(
        request: Request, exc: RequestValidationError,
    ):
        """Handle Pydantic validation errors."""
        logger.warning(
            f"Validation error on {request.url.path}: {exc.errors()}",
        )
        return JSONResponse(
            status_code=status.HTTP_400_BAD_REQUEST,
            content=_build_validation_error_response(exc),
        )


def _register_generic_error_handler(app: FastAPI) -> None:
    """Register catch-all error handler."""

    @app.exception_handler(Exception)
    async def generic_error_handler(request: Request, exc: Exception):
        """Catch-all — never leaks internal details."""
        logger.error(
            f"Unhandled exception on {request.url.path}: {exc}",
            exc_info=True,
        )
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "error": {
                    "code": "INTERNAL_ERROR",
                    "message": "An unexpected error occurred",
                    "category": "internal",
                    "severity": ErrorSeverity.CRITICAL.value,
                },
            },
        )


def _build_validation_error_response(exc: RequestValidationError) -> dict:
    """Build structured validation error response."""
    return {
        "error": {
            "code": "VALIDATION_ERROR",
            "message": "Invalid request data",
            "category": "validation",
            "severity": ErrorSeverity.ERROR.value,
            "details": [
                {
                    "field": ".".join(str(loc) for loc in e["loc"]),
                    "message": e["msg"],
                    "type": e["type"],
                }
                for e in exc.errors()
            ],
        },
    }
