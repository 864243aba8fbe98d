"""
Transaction model — one immutable ledger entry per affected account.

Every change to an account balance writes exactly one Transaction for that
account, in the same database transaction as the balance change:

  - A deposit writes one CREDIT row
  - A withdrawal, bill payment or loan payment writes one DEBIT row
  - A transfer between two accounts in the system writes TWO rows, a DEBIT
    on the sender and a CREDIT on the receiver. Both point at the same
    Transfer via transfer_id, and their transaction_id values are the
    transfer reference with an "S" or "R" suffix

Amounts are unsigned:
  amount_cents is always positive; `direction` says which way the money
  moved. fee_cents is charged on top of a debit, so the balance effect of
  a row is +amount for a credit and -(amount + fee) for a debit.

Status:
  Operations complete synchronously, so rows are written as COMPLETED.
  PENDING, FAILED and CANCELLED exist for the operation records (Payment,
  Transfer) that share this vocabulary.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, BigInteger, DateTime, Enum, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pitaka.database import Base


class TransactionKind(str, enum.Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    TRANSFER = "TRANSFER"
    TRANSFER_RECEIVED = "TRANSFER_RECEIVED"
    PAYMENT = "PAYMENT"
    LOAN_PAYMENT = "LOAN_PAYMENT"
    LOAN_DISBURSEMENT = "LOAN_DISBURSEMENT"
    INVESTMENT = "INVESTMENT"
    SAVINGS_DEPOSIT = "SAVINGS_DEPOSIT"
    SAVINGS_WITHDRAWAL = "SAVINGS_WITHDRAWAL"


class Direction(str, enum.Enum):
    CREDIT = "credit"
    DEBIT = "debit"


class OperationStatus(str, enum.Enum):
    PENDING = "PENDING"
    COMPLETED = "COMPLETED"
    FAILED = "FAILED"
    CANCELLED = "CANCELLED"


class Transaction(Base):
    __tablename__ = "transactions"

    __table_args__ = (
        CheckConstraint("amount_cents > 0", name="ck_transactions_positive_amount"),
        CheckConstraint("fee_cents >= 0", name="ck_transactions_non_negative_fee"),
    )

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    # Public identifier, e.g. "TXN17293456789120042" or "TRF...S"
    transaction_id: Mapped[str] = mapped_column(
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
        index=True,
    )

    kind: Mapped[TransactionKind] = mapped_column(Enum(TransactionKind), nullable=False)
    direction: Mapped[Direction] = mapped_column(Enum(Direction), nullable=False)

    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    fee_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    description: Mapped[str | None] = mapped_column(String(255), nullable=True)

    status: Mapped[OperationStatus] = mapped_column(
        Enum(OperationStatus),
        nullable=False,
        default=OperationStatus.COMPLETED,
    )

    # Backlinks to the operation record that produced this entry
    transfer_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("transfers.id"), nullable=True, index=True,
    )
    payment_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("payments.id"), nullable=True, index=True,
    )
    loan_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("loans.id"), nullable=True, index=True,
    )
    savings_goal_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("savings_goals.id"), nullable=True, index=True,
    )
    investment_id: Mapped[uuid.UUID | None] = mapped_column(
        ForeignKey("investments.id"), nullable=True, index=True,
    )

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )

    @property
    def balance_effect_cents(self) -> int:
        """Signed change this entry made to its account's balance."""
        if self.direction == Direction.CREDIT:
            return self.amount_cents
        return -(self.amount_cents + self.fee_cents)
