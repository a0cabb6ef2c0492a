"""Error Hierarchy — typed, categorized exceptions for every credit ledger failure mode.

Invariants:
    - Every error has a code (str), category (ErrorCategory), severity (ErrorSeverity)
    - Domain errors (400-level) are recoverable; infrastructure errors (500-level) are critical
    - to_response() produces the REST envelope
    - No driver internals leaked in user-facing messages (raw fault kept as __cause__)

Design Decisions:
    - Single hierarchy with CreditLedgerError base: FastAPI global handler catches all
      (ADR: uniform error shape)
    - ErrorContext as dataclass: rich observability without coupling to logging framework
"""

from dataclasses import dataclass, field
from enum import Enum
from datetime import datetime, timezone


class ErrorSeverity(str, Enum):
    """Error severity for observability and client handling."""
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class ErrorCategory(str, Enum):
    """High-level error categories for routing and handling."""
    VALIDATION = "validation"
    BUSINESS_RULE = "business_rule"
    RESOURCE_NOT_FOUND = "resource_not_found"
    DATABASE = "database"
    INTERNAL = "internal"
    CONFLICT = "conflict"


@dataclass
class ErrorContext:
    """Rich context for error observability and debugging."""
    timestamp: datetime = field(default_factory=lambda: datetime.now(timezone.utc))
    request_id: str | None = None
    account_ids: list[str] | None = None


class CreditLedgerError(Exception):
    """Base exception for all credit ledger errors."""

    def __init__(
        self,
        message: str,
        code: str,
        category: ErrorCategory,
        severity: ErrorSeverity = ErrorSeverity.ERROR,
        context: ErrorContext | None = None,
        http_status: int = 500,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.category = category
        self.severity = severity
        self.context = context or ErrorContext()
        self.http_status = http_status

    def to_response(self) -> dict:
        """Convert to standardized REST error response."""
        return {
            "error": {
                "code": self.code,
                "message": self.message,
                "category": self.category.value,
                "severity": self.severity.value,
                "timestamp": self.context.timestamp.isoformat(),
                "context": {
                    "request_id": self.context.request_id,
                    "account_ids": self.context.account_ids,
                },
            }
        }


# ─── Domain Errors (400-level) ──────────────────────────────────

class InvalidArgumentError(CreditLedgerError):
    """Caller supplied an argument the operation cannot accept."""
    def __init__(
        self, message: str, field: str | None = None, context: ErrorContext | None = None,
    ):
        super().__init__(
            message, "INVALID_ARGUMENT", ErrorCategory.VALIDATION,
            ErrorSeverity.ERROR, context, 400,
        )
        self.field = field


class NotFoundError(CreditLedgerError):
    """One or more target rows do not exist."""
    def __init__(
        self,
        resource_type: str,
        resource_ids: list[str],
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.account_ids = list(resource_ids)
        quoted = ", ".join(f"'{rid}'" for rid in resource_ids)
        super().__init__(
            f"{resource_type} {quoted} not found",
            "NOT_FOUND", ErrorCategory.RESOURCE_NOT_FOUND,
            ErrorSeverity.ERROR, ctx, 404,
        )
        self.resource_type = resource_type
        self.missing_ids = list(resource_ids)


class InsufficientBalanceError(CreditLedgerError):
    """Source account holds fewer credits than the transfer amount."""
    def __init__(
        self, account_id: str, balance: int, amount: int,
        context: ErrorContext | None = None,
    ):
        ctx = context or ErrorContext()
        ctx.account_ids = [account_id]
        super().__init__(
            f"Account '{account_id}' has {balance} credits, {amount} required",
            "INSUFFICIENT_BALANCE", ErrorCategory.BUSINESS_RULE,
            ErrorSeverity.ERROR, ctx, 422,
        )
        self.account_id = account_id
        self.balance = balance
        self.amount = amount


class ConflictError(CreditLedgerError):
    """Write collided with a unique constraint."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.ERROR, context, 409,
        )


class TransactionConflictError(CreditLedgerError):
    """Store aborted the transaction (serialization failure or deadlock)."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "TRANSACTION_CONFLICT", ErrorCategory.CONFLICT,
            ErrorSeverity.WARNING, context, 409,
        )


# ─── Infrastructure Errors (500-level) ──────────────────────────

class DatabaseConnectionError(CreditLedgerError):
    """Connection could not be acquired after exhausting retries."""
    def __init__(
        self, message: str, attempts: int, context: ErrorContext | None = None,
    ):
        super().__init__(
            f"Database connection failed after {attempts} attempt(s): {message}",
            "CONNECTION_ERROR", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )
        self.attempts = attempts


class ServiceUnavailableError(CreditLedgerError):
    """Database fault with no more specific mapping."""
    def __init__(self, message: str, context: ErrorContext | None = None):
        super().__init__(
            message, "SERVICE_UNAVAILABLE", ErrorCategory.DATABASE,
            ErrorSeverity.CRITICAL, context, 503,
        )


class TransactionRetriesExhaustedError(CreditLedgerError):
    """Transaction loop ended without returning or raising."""
    def __init__(self, attempts: int, context: ErrorContext | None = None):
        super().__init__(
            f"Transaction exceeded retries ({attempts} attempt(s))",
            "TRANSACTION_RETRIES_EXHAUSTED", ErrorCategory.INTERNAL,
            ErrorSeverity.CRITICAL, context, 500,
        )
        self.attempts = attempts
