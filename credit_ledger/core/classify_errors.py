"""Error Classification — pure mapping from raw driver/network faults to ErrorKind.

Invariants:
    - classify() is total: every input yields an ErrorKind, it never raises
    - Network faults are checked before SQLSTATE codes (they carry no database code)
    - ConnectionError subclasses and asyncio's combined multi-address connect
      failure (errno None) are network faults
    - Unknown or unshaped errors degrade to UNCLASSIFIED
    - translate_db_error() never returns a raw driver exception

Design Decisions:
    - Walks the exception chain (SQLAlchemy .orig, __cause__, __context__): the
      asyncpg/psycopg fault is usually wrapped one or two levels deep
    - Reads both `sqlstate` (asyncpg) and `pgcode` (psycopg2) so the classifier
      works for either driver
"""

import errno

from credit_ledger.core.domain_types import ErrorKind
from credit_ledger.core.errors import (
    ConflictError,
    CreditLedgerError,
    InvalidArgumentError,
    ServiceUnavailableError,
    TransactionConflictError,
)

TRANSIENT_ERRNOS = frozenset({
    errno.ECONNREFUSED,
    errno.ECONNRESET,
    errno.ETIMEDOUT,
    errno.EHOSTUNREACH,
    errno.ENETUNREACH,
    errno.EPIPE,
})
TRANSIENT_CODE_NAMES = frozenset(errno.errorcode[code] for code in TRANSIENT_ERRNOS)
CONNECT_CALL_FAILED = "Connect call failed"

SQLSTATE_KINDS = {
    "23505": ErrorKind.UNIQUE_VIOLATION,
    "23503": ErrorKind.FOREIGN_KEY_VIOLATION,
    "22P02": ErrorKind.INVALID_INPUT,
    "23514": ErrorKind.INTEGRITY_VIOLATION,
    "40001": ErrorKind.RETRYABLE_CONFLICT,   # serialization_failure
    "40P01": ErrorKind.RETRYABLE_CONFLICT,   # deadlock_detected
}

_MAX_CHAIN_DEPTH = 8


def classify(error: BaseException | None) -> ErrorKind:
    """Map any raised object to its logical ErrorKind."""
    try:
        return _classify(error)
    except Exception:
        return ErrorKind.UNCLASSIFIED


def _classify(error: BaseException | None) -> ErrorKind:
    if isinstance(error, TransactionConflictError):
        return ErrorKind.RETRYABLE_CONFLICT
    chain = _exception_chain(error)
    if any(_is_transient(link) for link in chain):
        return ErrorKind.TRANSIENT
    for link in chain:
        sqlstate = _sqlstate(link)
        if sqlstate in SQLSTATE_KINDS:
            return SQLSTATE_KINDS[sqlstate]
    return ErrorKind.UNCLASSIFIED


def _exception_chain(error: BaseException | None) -> list[object]:
    """Flatten error, .orig, __cause__ and __context__ links (cycle-safe)."""
    chain: list[object] = []
    pending: list[object] = [error]
    seen: set[int] = set()
    while pending and len(chain) < _MAX_CHAIN_DEPTH:
        link = pending.pop(0)
        if link is None or id(link) in seen:
            continue
        seen.add(id(link))
        chain.append(link)
        for attr in ("orig", "__cause__", "__context__"):
            pending.append(getattr(link, attr, None))
    return chain


def _is_transient(link: object) -> bool:
    if isinstance(link, (TimeoutError, ConnectionError)):
        return True
    if isinstance(link, OSError):
        if link.errno in TRANSIENT_ERRNOS:
            return True
        # asyncio folds per-address failures into one errno-less OSError
        if link.errno is None and CONNECT_CALL_FAILED in str(link):
            return True
    code = getattr(link, "code", None)
    return isinstance(code, str) and code in TRANSIENT_CODE_NAMES


def _sqlstate(link: object) -> str | None:
    for attr in ("sqlstate", "pgcode"):
        value = getattr(link, attr, None)
        if isinstance(value, str):
            return value
    return None


def translate_db_error(error: BaseException) -> CreditLedgerError:
    """Map a raw fault into the caller-facing taxonomy. Domain errors pass through."""
    if isinstance(error, CreditLedgerError):
        return error
    kind = classify(error)
    if kind is ErrorKind.TRANSIENT:
        return ServiceUnavailableError("Database connection failed")
    if kind is ErrorKind.UNIQUE_VIOLATION:
        return ConflictError("Unique constraint violation")
    if kind is ErrorKind.FOREIGN_KEY_VIOLATION:
        return InvalidArgumentError("Foreign key constraint violation")
    if kind is ErrorKind.INVALID_INPUT:
        return InvalidArgumentError("Invalid text representation")
    if kind is ErrorKind.RETRYABLE_CONFLICT:
        return TransactionConflictError("Transaction aborted by a concurrent update")
    if kind is ErrorKind.INTEGRITY_VIOLATION:
        return ServiceUnavailableError("Integrity constraint violation")
    return ServiceUnavailableError("Database error")
