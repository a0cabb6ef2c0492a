"""Account ORM — table declaration for accounts holding an integer credit balance.

Invariants:
    - id is UUID primary key (assigned by the repository when absent)
    - email is unique and stored lowercased
    - credits >= 0 enforced by CHECK constraint ck_accounts_credits_non_negative
    - created_at/updated_at are server-assigned

Design Decisions:
    - Declared via the ORM for metadata (schema bootstrap) but queried with Core
      statements on raw connections: row locks and RETURNING stay explicit
"""

import uuid
from datetime import date, datetime

from sqlalchemy import CheckConstraint, Date, DateTime, Integer, Text, func
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.dialects.postgresql import UUID

from credit_ledger.db.base import Base


class AccountRecord(Base):
    """Account row — identity, credential and credit balance."""
    __tablename__ = "accounts"
    __table_args__ = (
        CheckConstraint("credits >= 0", name="credits_non_negative"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True), primary_key=True,
    )
    email: Mapped[str] = mapped_column(
        Text, nullable=False, unique=True, index=True,
    )
    credential_hash: Mapped[str] = mapped_column(Text, nullable=False)
    name: Mapped[str] = mapped_column(Text, nullable=False)
    date_of_birth: Mapped[date] = mapped_column(Date, nullable=False)
    credits: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default="0",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, server_default=func.now(),
    )


accounts_table = AccountRecord.__table__
