"""
Transfer and TransferRecipient models.

A Transfer is the operation record for one account-to-account move. Its
`reference` is unique and is reused, with "S"/"R" suffixes, as the
transaction_id of the ledger rows it spawns:

  INTERNAL   between two accounts of the same owner        fee 0, 2 ledger rows
  EXTERNAL   to another user's account, by account number  fee 0, 2 ledger rows
  INTERBANK  to an account at another bank                 flat fee, 1 ledger row

owner_id is the sending user. For INTERBANK transfers the destination
lives outside the system, so recipient_id and recipient_account_id stay
NULL and bank_name/bank_code identify where the money went.

A TransferRecipient is an address-book entry. External and interbank
transfers add one automatically the first time money is sent to a
(account_number, bank_code) pair.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, BigInteger, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pitaka.database import Base
from pitaka.models.transaction import OperationStatus


class TransferKind(str, enum.Enum):
    INTERNAL = "INTERNAL"
    EXTERNAL = "EXTERNAL"
    INTERBANK = "INTERBANK"


class Transfer(Base):
    __tablename__ = "transfers"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_transfers_positive_amount"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    reference: Mapped[str] = mapped_column(
        String(40),
        unique=True,
        nullable=False,
        index=True,
    )

    # Sender
    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    sender_account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
    )

    # Receiver (NULL ids for interbank)
    recipient_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("users.id"),
        nullable=True,
        index=True,
    )
    recipient_account_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=True,
    )
    recipient_account_number: Mapped[str] = mapped_column(String(34), nullable=False)
    recipient_name: Mapped[str] = mapped_column(String(200), nullable=False)

    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    fee_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    kind: Mapped[TransferKind] = mapped_column(Enum(TransferKind), nullable=False)
    status: Mapped[OperationStatus] = mapped_column(
        Enum(OperationStatus),
        nullable=False,
        default=OperationStatus.COMPLETED,
    )

    bank_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    bank_code: Mapped[str | None] = mapped_column(String(20), nullable=True)

    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    @property
    def total_debit_cents(self) -> int:
        return self.amount_cents + self.fee_cents


class TransferRecipient(Base):
    __tablename__ = "transfer_recipients"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    account_number: Mapped[str] = mapped_column(String(34), nullable=False)

    # Both set for interbank recipients, both NULL for recipients inside Pitaka
    bank_name: Mapped[str | None] = mapped_column(String(200), nullable=True)
    bank_code: Mapped[str | None] = mapped_column(String(20), nullable=True)

    is_favorite: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
