"""
Savings sub-ledger models: SavingsGoal and its SavingsTransaction log.

A goal is money set aside from its linked account. Deposits debit the
linked account and raise current_amount_cents; withdrawals do the
reverse. Each move appends a SavingsTransaction and recomputes progress,
always as min(current / target, 1).

Auto-transfer settings are stored for display; nothing in the API runs
them on a schedule.
"""

import enum
import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, BigInteger, Float, DateTime, Enum, ForeignKey, Text, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from pitaka.database import Base


class SavingsEntryKind(str, enum.Enum):
    DEPOSIT = "DEPOSIT"
    WITHDRAWAL = "WITHDRAWAL"
    INTEREST = "INTEREST"


class AutoTransferFrequency(str, enum.Enum):
    NONE = "NONE"
    WEEKLY = "WEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"


class SavingsGoal(Base):
    __tablename__ = "savings_goals"

    __table_args__ = (
        CheckConstraint("target_amount_cents > 0", name="ck_savings_goals_positive_target"),
        CheckConstraint("current_amount_cents >= 0", name="ck_savings_goals_non_negative_current"),
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
    linked_account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
    )

    name: Mapped[str] = mapped_column(String(100), nullable=False)
    icon: Mapped[str] = mapped_column(String(50), nullable=False, default="piggy-bank")

    target_amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    current_amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)

    # 0.0 .. 1.0
    progress: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    end_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

    # Annual rate as a fraction (0.05 = 5% p.a.), informational
    interest_rate: Mapped[float] = mapped_column(Float, nullable=False, default=0.05)

    auto_transfer_enabled: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    auto_transfer_amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    auto_transfer_frequency: Mapped[AutoTransferFrequency] = mapped_column(
        Enum(AutoTransferFrequency),
        nullable=False,
        default=AutoTransferFrequency.NONE,
    )

    notes: Mapped[str | None] = mapped_column(Text, nullable=True)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

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

    # selectin so the log is loaded with the goal; lazy loads fail under asyncio
    entries: Mapped[list["SavingsTransaction"]] = relationship(
        lazy="selectin",
        order_by="SavingsTransaction.occurred_at",
        cascade="all, delete-orphan",
    )

    def recompute_progress(self) -> None:
        self.progress = min(self.current_amount_cents / self.target_amount_cents, 1.0)

    def add_entry(self, kind: SavingsEntryKind, amount_cents: int) -> "SavingsTransaction":
        """Append a log entry and apply it to current_amount_cents."""
        if kind == SavingsEntryKind.WITHDRAWAL:
            self.current_amount_cents -= amount_cents
        else:
            self.current_amount_cents += amount_cents
        self.recompute_progress()

        entry = SavingsTransaction(kind=kind, amount_cents=amount_cents)
        self.entries.append(entry)
        return entry


class SavingsTransaction(Base):
    __tablename__ = "savings_transactions"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    goal_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("savings_goals.id"),
        nullable=False,
        index=True,
    )

    kind: Mapped[SavingsEntryKind] = mapped_column(Enum(SavingsEntryKind), nullable=False)
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )
