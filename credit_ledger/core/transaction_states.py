"""Transaction State Machine — pure transition rules for one unit-of-work attempt.

Invariants:
    - Success path: BEGIN -> EXECUTING -> COMMITTING -> DONE
    - Failure path: EXECUTING|COMMITTING -> ROLLING_BACK -> RETRY | FAILED
    - RETRY only for RETRYABLE_CONFLICT with attempts remaining
    - Attempts are numbered from 0; `retries` counts re-runs after the first attempt

Design Decisions:
    - Pure functions, no IO: the runner in infrastructure/ drives the IO and asks
      these functions where to go next (ADR: exit conditions testable without a DB)
"""

from credit_ledger.core.domain_types import ErrorKind, TransactionState

_SUCCESS_TRANSITIONS = {
    TransactionState.BEGIN: TransactionState.EXECUTING,
    TransactionState.EXECUTING: TransactionState.COMMITTING,
    TransactionState.COMMITTING: TransactionState.DONE,
    TransactionState.RETRY: TransactionState.BEGIN,
}


def next_state_on_success(state: TransactionState) -> TransactionState:
    """Next state after the current step completed without error."""
    if state not in _SUCCESS_TRANSITIONS:
        raise ValueError(f"No success transition from {state.value}")
    return _SUCCESS_TRANSITIONS[state]


def next_state_after_failure(
    kind: ErrorKind, attempt: int, retries: int,
) -> TransactionState:
    """Decide between RETRY and FAILED once the attempt has rolled back."""
    if kind is ErrorKind.RETRYABLE_CONFLICT and attempt < retries:
        return TransactionState.RETRY
    return TransactionState.FAILED


def retry_delay_ms(base_delay_ms: int, attempt: int) -> int:
    """Exponential backoff: base * 2^attempt."""
    return base_delay_ms * (2 ** attempt)
