"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - AccountId wraps UUID — never use bare strings for account identity in domain logic
    - Credits are integers, never floats
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON and log fields without custom encoders
"""

from enum import Enum
from typing import NewType
from uuid import UUID


# ─── Identity Types ──────────────────────────────────────────────

AccountId = NewType("AccountId", UUID)


# ─── Value Types ─────────────────────────────────────────────────

Credits = NewType("Credits", int)   # >= 0 for stored balances


# ─── Enums ───────────────────────────────────────────────────────

class ErrorKind(str, Enum):
    """Closed set of logical failure kinds produced by classify()."""
    TRANSIENT = "transient"
    UNIQUE_VIOLATION = "unique_violation"
    FOREIGN_KEY_VIOLATION = "foreign_key_violation"
    INVALID_INPUT = "invalid_input"
    INTEGRITY_VIOLATION = "integrity_violation"
    RETRYABLE_CONFLICT = "retryable_conflict"
    UNCLASSIFIED = "unclassified"


class IsolationLevel(str, Enum):
    """Transaction isolation levels — values are the literal SQL keywords."""
    READ_COMMITTED = "READ COMMITTED"
    REPEATABLE_READ = "REPEATABLE READ"
    SERIALIZABLE = "SERIALIZABLE"


class TransactionState(str, Enum):
    """Per-attempt states of a unit of work."""
    BEGIN = "begin"
    EXECUTING = "executing"
    COMMITTING = "committing"
    ROLLING_BACK = "rolling_back"
    RETRY = "retry"
    DONE = "done"
    FAILED = "failed"
