"""
Biller and Payment models — bill payments.

A Biller is a payee from the seeded catalogue (utilities, subscriptions,
insurance). It bounds what can be paid to it:

  - minimum_amount_cents <= amount <= maximum_amount_cents
  - convenience_fee_cents is charged on top of the amount
  - account_number_length, when set, is the exact length of the payee
    account number the biller expects

A Payment records one bill payment. It is written as COMPLETED together
with the DEBIT ledger row that funds it (transaction_id points at that
row's public id). PENDING payments can be cancelled; completed ones can't.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, BigInteger, Integer, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pitaka.database import Base
from pitaka.models.transaction import OperationStatus


class BillerCategory(str, enum.Enum):
    ELECTRICITY = "ELECTRICITY"
    WATER = "WATER"
    INTERNET = "INTERNET"
    TELECOM = "TELECOM"
    ENTERTAINMENT = "ENTERTAINMENT"
    INSURANCE = "INSURANCE"
    GOVERNMENT = "GOVERNMENT"
    OTHER = "OTHER"


class Biller(Base):
    __tablename__ = "billers"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(200), unique=True, nullable=False)
    category: Mapped[BillerCategory] = mapped_column(Enum(BillerCategory), nullable=False)

    # What the payee account number is called on the biller's side ("Policy Number")
    account_number_label: Mapped[str] = mapped_column(
        String(100), nullable=False, default="Account Number",
    )
    account_number_length: Mapped[int | None] = mapped_column(Integer, nullable=True)

    minimum_amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=1)
    maximum_amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    convenience_fee_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # Lower sorts first in the biller list; NULL sorts last
    popular_index: Mapped[int | None] = mapped_column(Integer, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)


class Payment(Base):
    __tablename__ = "payments"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_payments_positive_amount"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    reference_number: Mapped[str] = mapped_column(
        String(40),
        unique=True,
        nullable=False,
        index=True,
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
    )
    biller_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("billers.id"),
        nullable=False,
    )

    # Copied from the biller so the record reads correctly if the biller is renamed
    biller_name: Mapped[str] = mapped_column(String(200), nullable=False)
    payee_account_number: Mapped[str] = mapped_column(String(100), nullable=False)

    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    fee_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    status: Mapped[OperationStatus] = mapped_column(
        Enum(OperationStatus),
        nullable=False,
        default=OperationStatus.COMPLETED,
    )

    # Public id of the funding ledger row
    transaction_id: Mapped[str | None] = mapped_column(String(40), nullable=True)

    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
