"""Credential Hashing — bcrypt password hashes for the signup surface.

Invariants:
    - Plain passwords never reach the repository or logs
    - Each hash carries its own salt and work factor
    - Passwords longer than 72 bytes are rejected, never silently truncated

Design Decisions:
    - bcrypt with a fixed work factor: hashes stay verifiable if the factor changes
"""

import logging

import bcrypt

from credit_ledger.core.errors import InvalidArgumentError

logger = logging.getLogger(__name__)

BCRYPT_ROUNDS = 12
MAX_PASSWORD_BYTES = 72


def hash_password(password: str, rounds: int = BCRYPT_ROUNDS) -> str:
    encoded = password.encode("utf-8")
    if len(encoded) > MAX_PASSWORD_BYTES:
        raise InvalidArgumentError(
            f"Password must be at most {MAX_PASSWORD_BYTES} bytes", field="password",
        )
    return bcrypt.hashpw(encoded, bcrypt.gensalt(rounds=rounds)).decode("utf-8")


def verify_password(password: str, credential_hash: str) -> bool:
    """True if password matches; malformed hashes never match."""
    try:
        return bcrypt.checkpw(
            password.encode("utf-8"), credential_hash.encode("utf-8"),
        )
    except ValueError as e:
        logger.warning(f"Password verification failed: {e}")
        return False
