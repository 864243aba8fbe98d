"""
Account model — a wallet account owned by a User.

Each account has:
  - A unique 10-digit account number
  - A kind: MAIN (created at signup), SAVINGS or INVESTMENT
  - A balance in integer cents, the only mutable money state in the system
  - A display-only currency label ("₱"); amounts are never converted

Balance management:
  balance_cents is changed only by the ledger primitives in
  pitaka.services.ledger, in the same database transaction as the ledger
  Transaction rows that explain the change. Replaying those rows
  reconciles to the stored balance (see account_service.get_balance).

  A CHECK constraint enforces a non-negative balance at the database
  level as well; the ledger's debit() rejects overdrafts before the
  constraint is ever reached.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, BigInteger, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pitaka.config import settings
from pitaka.database import Base


class AccountKind(str, enum.Enum):
    MAIN = "MAIN"
    SAVINGS = "SAVINGS"
    INVESTMENT = "INVESTMENT"


class Account(Base):
    __tablename__ = "accounts"

    __table_args__ = (
        CheckConstraint(
            "balance_cents >= 0",
            name="ck_accounts_non_negative_balance",
        ),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    # Unique 10-digit account number (generated at creation time)
    account_number: Mapped[str] = mapped_column(
        String(10),
        unique=True,
        nullable=False,
        index=True,
    )

    kind: Mapped[AccountKind] = mapped_column(
        Enum(AccountKind),
        nullable=False,
        default=AccountKind.MAIN,
    )

    display_name: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        default="Main Account",
    )

    balance_cents: Mapped[int] = mapped_column(
        BigInteger,
        nullable=False,
        default=0,
    )

    currency_label: Mapped[str] = mapped_column(
        String(8),
        nullable=False,
        default=lambda: settings.CURRENCY_LABEL,
    )

    is_active: Mapped[bool] = mapped_column(
        Boolean,
        default=True,
        nullable=False,
    )

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
