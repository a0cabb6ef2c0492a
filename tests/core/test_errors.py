"""Error Hierarchy — verifies codes, statuses and the REST envelope.

Tests:
    - Every error maps to its HTTP status and code
    - to_response() carries account ids and request id from the context
    - NotFoundError names every missing id
"""

import pytest

from credit_ledger.core.errors import (
    ConflictError,
    CreditLedgerError,
    DatabaseConnectionError,
    ErrorCategory,
    ErrorContext,
    ErrorSeverity,
    InsufficientBalanceError,
    InvalidArgumentError,
    NotFoundError,
    ServiceUnavailableError,
    TransactionConflictError,
    TransactionRetriesExhaustedError,
)


@pytest.mark.parametrize("error,status,code", [
    (InvalidArgumentError("bad"), 400, "INVALID_ARGUMENT"),
    (NotFoundError("Account", ["a"]), 404, "NOT_FOUND"),
    (InsufficientBalanceError("a", 0, 1), 422, "INSUFFICIENT_BALANCE"),
    (ConflictError("dup"), 409, "CONFLICT"),
    (TransactionConflictError("aborted"), 409, "TRANSACTION_CONFLICT"),
    (DatabaseConnectionError("refused", 4), 503, "CONNECTION_ERROR"),
    (ServiceUnavailableError("down"), 503, "SERVICE_UNAVAILABLE"),
    (TransactionRetriesExhaustedError(2), 500, "TRANSACTION_RETRIES_EXHAUSTED"),
])
def test_status_and_code(error, status, code):
    assert isinstance(error, CreditLedgerError)
    assert error.http_status == status
    assert error.code == code


def test_not_found_names_all_ids():
    error = NotFoundError("Account", ["a1", "b2"])
    assert error.message == "Account 'a1', 'b2' not found"
    assert error.missing_ids == ["a1", "b2"]
    assert error.context.account_ids == ["a1", "b2"]


def test_connection_error_reports_attempts():
    error = DatabaseConnectionError("refused", 4)
    assert error.attempts == 4
    assert "4 attempt(s)" in error.message
    assert error.severity is ErrorSeverity.CRITICAL


def test_to_response_envelope():
    ctx = ErrorContext(request_id="req-1")
    error = InsufficientBalanceError("acc-1", 10, 50, context=ctx)

    body = error.to_response()["error"]

    assert body["code"] == "INSUFFICIENT_BALANCE"
    assert body["category"] == ErrorCategory.BUSINESS_RULE.value
    assert body["severity"] == "error"
    assert body["context"]["request_id"] == "req-1"
    assert body["context"]["account_ids"] == ["acc-1"]
    assert "timestamp" in body


def test_envelope_context_carries_only_populated_fields():
    body = ConflictError("dup").to_response()["error"]
    assert set(body["context"]) == {"request_id", "account_ids"}


def test_transaction_conflict_is_warning():
    assert TransactionConflictError("x").severity is ErrorSeverity.WARNING
