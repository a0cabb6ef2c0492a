"""Error Classification — verifies the total mapping from raw faults to ErrorKind.

Invariants:
    - classify() never raises, whatever it is handed
    - Network faults win over SQLSTATE codes found further down the chain
    - SQLSTATE read from `sqlstate` (asyncpg) or `pgcode` (psycopg2), at any depth
    - translate_db_error() returns taxonomy errors only; domain errors pass through

Design Decisions:
    - Driver errors faked with plain exceptions carrying `sqlstate`: the classifier
      only looks at attributes, so no database or driver is needed
"""

import errno

import pytest
from sqlalchemy.exc import DBAPIError, TimeoutError as PoolTimeoutError

from credit_ledger.core.classify_errors import classify, translate_db_error
from credit_ledger.core.domain_types import ErrorKind
from credit_ledger.core.errors import (
    ConflictError,
    InsufficientBalanceError,
    InvalidArgumentError,
    ServiceUnavailableError,
    TransactionConflictError,
)


class DriverError(Exception):
    def __init__(self, sqlstate=None, pgcode=None):
        super().__init__("driver error")
        if sqlstate is not None:
            self.sqlstate = sqlstate
        if pgcode is not None:
            self.pgcode = pgcode


class CodedError(Exception):
    """Error exposing a symbolic errno name instead of a number."""
    def __init__(self, code):
        super().__init__(code)
        self.code = code


def _wrapped(orig: BaseException) -> DBAPIError:
    return DBAPIError("SELECT 1", {}, orig)


# ─── Network faults ──────────────────────────────────────────────

@pytest.mark.parametrize("code", [
    errno.ECONNREFUSED, errno.ECONNRESET, errno.ETIMEDOUT,
    errno.EHOSTUNREACH, errno.ENETUNREACH, errno.EPIPE,
])
def test_transient_errnos_classify_as_transient(code):
    assert classify(OSError(code, "network down")) is ErrorKind.TRANSIENT


def test_connection_refused_with_errno_is_transient():
    error = ConnectionRefusedError(errno.ECONNREFUSED, "Connection refused")
    assert classify(error) is ErrorKind.TRANSIENT


def test_builtin_timeout_is_transient():
    assert classify(TimeoutError()) is ErrorKind.TRANSIENT


def test_symbolic_code_name_is_transient():
    assert classify(CodedError("ECONNRESET")) is ErrorKind.TRANSIENT


MULTI_ADDRESS_REFUSED = (
    "Multiple exceptions: "
    "[Errno 111] Connect call failed ('127.0.0.1', 5432), "
    "[Errno 111] Connect call failed ('::1', 5432, 0, 0)"
)


@pytest.mark.parametrize("error", [
    ConnectionRefusedError("Connection refused"),
    ConnectionResetError(),
    BrokenPipeError(),
])
def test_connection_error_subclasses_without_errno_are_transient(error):
    assert error.errno is None
    assert classify(error) is ErrorKind.TRANSIENT


def test_combined_multi_address_refusal_is_transient():
    """Host resolving to several addresses, every connect refused."""
    error = OSError(MULTI_ADDRESS_REFUSED)
    assert error.errno is None
    assert classify(error) is ErrorKind.TRANSIENT


def test_combined_refusal_inside_sqlalchemy_wrapper_is_transient():
    assert classify(_wrapped(OSError(MULTI_ADDRESS_REFUSED))) is ErrorKind.TRANSIENT


def test_errno_less_oserror_without_connect_failure_is_unclassified():
    assert classify(OSError("read-only file system")) is ErrorKind.UNCLASSIFIED


def test_unrelated_oserror_is_unclassified():
    assert classify(OSError(errno.ENOENT, "missing")) is ErrorKind.UNCLASSIFIED


def test_pool_checkout_timeout_is_not_transient():
    """Pool exhaustion is SQLAlchemy's own TimeoutError, not a network fault."""
    assert classify(PoolTimeoutError("QueuePool limit reached")) is ErrorKind.UNCLASSIFIED


def test_network_fault_wins_over_sqlstate():
    error = DriverError(sqlstate="23505")
    error.__cause__ = OSError(errno.ECONNRESET, "reset")
    assert classify(error) is ErrorKind.TRANSIENT


# ─── SQLSTATE codes ──────────────────────────────────────────────

@pytest.mark.parametrize("sqlstate,kind", [
    ("23505", ErrorKind.UNIQUE_VIOLATION),
    ("23503", ErrorKind.FOREIGN_KEY_VIOLATION),
    ("22P02", ErrorKind.INVALID_INPUT),
    ("23514", ErrorKind.INTEGRITY_VIOLATION),
    ("40001", ErrorKind.RETRYABLE_CONFLICT),
    ("40P01", ErrorKind.RETRYABLE_CONFLICT),
])
def test_sqlstate_codes_map_to_kinds(sqlstate, kind):
    assert classify(DriverError(sqlstate=sqlstate)) is kind


def test_pgcode_attribute_is_read():
    assert classify(DriverError(pgcode="23505")) is ErrorKind.UNIQUE_VIOLATION


def test_sqlstate_found_through_sqlalchemy_wrapper():
    assert classify(_wrapped(DriverError(sqlstate="40001"))) is ErrorKind.RETRYABLE_CONFLICT


def test_sqlstate_found_through_cause_chain():
    inner = DriverError(sqlstate="23503")
    outer = RuntimeError("wrapped")
    outer.__cause__ = inner
    assert classify(outer) is ErrorKind.FOREIGN_KEY_VIOLATION


def test_unknown_sqlstate_is_unclassified():
    assert classify(DriverError(sqlstate="42P01")) is ErrorKind.UNCLASSIFIED


def test_transaction_conflict_error_is_retryable():
    error = TransactionConflictError("aborted")
    assert classify(error) is ErrorKind.RETRYABLE_CONFLICT


def test_domain_error_is_unclassified():
    assert classify(InsufficientBalanceError("a", 1, 2)) is ErrorKind.UNCLASSIFIED


# ─── Totality ────────────────────────────────────────────────────

def test_none_is_unclassified():
    assert classify(None) is ErrorKind.UNCLASSIFIED


def test_plain_object_is_unclassified():
    assert classify(object()) is ErrorKind.UNCLASSIFIED


def test_attribute_access_failure_is_unclassified():
    class Hostile:
        def __getattr__(self, name):
            raise RuntimeError("no attributes for you")

    assert classify(Hostile()) is ErrorKind.UNCLASSIFIED


def test_cyclic_chain_terminates():
    first = RuntimeError("first")
    second = RuntimeError("second")
    first.__cause__ = second
    second.__context__ = first
    assert classify(first) is ErrorKind.UNCLASSIFIED


def test_non_string_sqlstate_is_ignored():
    error = DriverError()
    error.sqlstate = 23505
    assert classify(error) is ErrorKind.UNCLASSIFIED


# ─── translate_db_error ──────────────────────────────────────────

@pytest.mark.parametrize("raw,expected", [
    (OSError(errno.ECONNREFUSED, "refused"), ServiceUnavailableError),
    (DriverError(sqlstate="23505"), ConflictError),
    (DriverError(sqlstate="23503"), InvalidArgumentError),
    (DriverError(sqlstate="22P02"), InvalidArgumentError),
    (DriverError(sqlstate="23514"), ServiceUnavailableError),
    (DriverError(sqlstate="40P01"), TransactionConflictError),
    (RuntimeError("boom"), ServiceUnavailableError),
])
def test_translate_maps_kinds_to_taxonomy(raw, expected):
    assert type(translate_db_error(raw)) is expected


def test_translate_passes_domain_errors_through():
    error = InsufficientBalanceError("a", 1, 2)
    assert translate_db_error(error) is error


def test_translated_message_hides_driver_text():
    raw = DriverError(sqlstate="23505")
    raw.args = ('duplicate key value violates unique constraint "accounts_email_key"',)
    translated = translate_db_error(raw)
    assert "accounts_email_key" not in translated.message
    assert translated.http_status == 409
