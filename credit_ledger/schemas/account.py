"""Account Schemas — Pydantic models for accounts, patches and transfers.

Invariants:
    - Account never carries credential_hash; AccountWithCredential does
    - AccountPatch fields are all optional; presence is model_fields_set, never truthiness
    - AccountCreate.credits defaults to 0 and is never negative
    - Emails are lowercased at the repository, not here (case kept for display in errors)

Design Decisions:
    - from_attributes/row dicts: repositories build these from Core result mappings
    - API request bodies separate from repository params: the API accepts a
      password, the repository only ever sees its hash
"""

from datetime import date, datetime
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Account(BaseModel):
    """Public account state."""
    model_config = ConfigDict(from_attributes=True)

    id: UUID
    email: str
    name: str
    date_of_birth: date
    credits: int
    created_at: datetime
    updated_at: datetime


class AccountWithCredential(Account):
    """Account plus credential hash — returned only by the by-email lookup."""
    credential_hash: str


class AccountCreate(BaseModel):
    """Repository create params."""
    id: UUID | None = None
    email: str = Field(min_length=3, max_length=320)
    credential_hash: str = Field(min_length=1)
    name: str = Field(min_length=1, max_length=200)
    date_of_birth: date
    credits: int = Field(0, ge=0)


class AccountPatch(BaseModel):
    """Partial update — only explicitly provided fields are written."""
    email: str | None = Field(None, min_length=3, max_length=320)
    credential_hash: str | None = Field(None, min_length=1)
    name: str | None = Field(None, min_length=1, max_length=200)
    date_of_birth: date | None = None

    def provided_fields(self) -> dict:
        """Fields the caller actually set, excluding explicit nulls."""
        return {
            name: getattr(self, name)
            for name in self.model_fields_set
            if getattr(self, name) is not None
        }


class TransferResult(BaseModel):
    """Post-commit state of both transfer parties."""
    source: Account
    destination: Account


# --- API request bodies ------------------------------------------------------

class AccountSignup(BaseModel):
    """POST /accounts body."""
    email: str = Field(min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$")
    password: str = Field(min_length=8, max_length=72)
    name: str = Field(min_length=1, max_length=200)
    date_of_birth: date
    credits: int = Field(0, ge=0)

    @field_validator("name")
    @classmethod
    def strip_name(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("name cannot be empty or whitespace")
        return v


class AccountUpdate(BaseModel):
    """PATCH /accounts/{id} body."""
    email: str | None = Field(
        None, min_length=3, max_length=320, pattern=r"^[^@\s]+@[^@\s]+$",
    )
    password: str | None = Field(None, min_length=8, max_length=72)
    name: str | None = Field(None, min_length=1, max_length=200)
    date_of_birth: date | None = None


class TransferBody(BaseModel):
    """POST /transfers body. Strict int so JSON booleans never become 1; range checks
    live in the transfer engine."""
    source_id: UUID
    destination_id: UUID
    amount: int = Field(strict=True)
