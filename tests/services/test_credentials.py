"""Credential Hashing — verifies bcrypt hashing, verification and length bound."""

import pytest

from credit_ledger.core.errors import InvalidArgumentError
from credit_ledger.services.credentials import hash_password, verify_password


def test_hash_is_bcrypt():
    assert hash_password("correct horse", rounds=4).startswith("$2b$04$")


def test_hashes_are_salted():
    assert hash_password("same password", rounds=4) != hash_password(
        "same password", rounds=4,
    )


def test_verify_accepts_correct_password():
    assert verify_password("correct horse", hash_password("correct horse", rounds=4))


def test_verify_rejects_wrong_password():
    assert not verify_password("wrong horse", hash_password("correct horse", rounds=4))


def test_verify_rejects_malformed_hash():
    assert not verify_password("anything", "not-a-hash")


def test_overlong_password_rejected():
    with pytest.raises(InvalidArgumentError) as exc_info:
        hash_password("é" * 40)
    assert exc_info.value.field == "password"
