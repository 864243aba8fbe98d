"""
Loan sub-ledger models: LoanProduct, Loan, LoanPayment.

Lifecycle:
    PENDING ──disburse──> ACTIVE ──payments──> COMPLETED
       │
       └──cancel──> CANCELLED

  APPROVED and REJECTED are part of the status vocabulary for loans moved
  by an operator outside the API; APPROVED loans accept payments like
  ACTIVE ones.

Balances:
  principal_cents is what was borrowed. Loan.apply_payment() is the only
  code that changes paid_cents / remaining_cents / progress_percent /
  status, and it keeps remaining = max(principal - paid, 0) and
  progress = min(paid / principal * 100, 100). The loan completes exactly
  when remaining reaches zero.

  next_payment_cents is the amortized installment
  P * r(1+r)^n / ((1+r)^n - 1) with r the monthly rate, computed in
  Decimal and rounded half-up to whole cents.
"""

import enum
import uuid
from datetime import datetime, timezone
from decimal import Decimal, ROUND_HALF_UP

from sqlalchemy import String, Boolean, BigInteger, Integer, Float, DateTime, Enum, ForeignKey, Text
from sqlalchemy.orm import Mapped, mapped_column

from pitaka.database import Base
from pitaka.models.transaction import OperationStatus


class LoanStatus(str, enum.Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    ACTIVE = "ACTIVE"
    COMPLETED = "COMPLETED"
    REJECTED = "REJECTED"
    CANCELLED = "CANCELLED"


PAYABLE_STATUSES = (LoanStatus.APPROVED, LoanStatus.ACTIVE)


class PaymentFrequency(str, enum.Enum):
    WEEKLY = "WEEKLY"
    BIWEEKLY = "BIWEEKLY"
    MONTHLY = "MONTHLY"
    QUARTERLY = "QUARTERLY"


def amortized_payment_cents(principal_cents: int, annual_rate_bps: int, term_months: int) -> int:
    """
    Monthly installment for an equal-installment loan, in whole cents.

    annual_rate_bps is the nominal annual rate in basis points (1050 = 10.5%).
    A zero rate degrades to principal / term.
    """
    principal = Decimal(principal_cents)
    n = Decimal(term_months)
    monthly_rate = Decimal(annual_rate_bps) / Decimal(10_000) / Decimal(12)

    if monthly_rate == 0:
        payment = principal / n
    else:
        factor = (Decimal(1) + monthly_rate) ** term_months
        payment = principal * (monthly_rate * factor) / (factor - Decimal(1))

    return int(payment.quantize(Decimal(1), rounding=ROUND_HALF_UP))


class LoanProduct(Base):
    __tablename__ = "loan_products"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    title: Mapped[str] = mapped_column(String(100), unique=True, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)

    annual_rate_bps: Mapped[int] = mapped_column(Integer, nullable=False)

    min_amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    max_amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    min_term_months: Mapped[int] = mapped_column(Integer, nullable=False)
    max_term_months: Mapped[int] = mapped_column(Integer, nullable=False)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    @property
    def annual_rate_percent(self) -> float:
        return self.annual_rate_bps / 100


class Loan(Base):
    __tablename__ = "loans"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    owner_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("users.id"),
        nullable=False,
        index=True,
    )
    loan_product_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("loan_products.id"),
        nullable=False,
    )

    # Disbursements land here and payments are taken from here unless the
    # caller names another owned account
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    purpose: Mapped[str | None] = mapped_column(String(255), nullable=True)

    principal_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    paid_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    remaining_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    next_payment_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)

    term_months: Mapped[int] = mapped_column(Integer, nullable=False)
    annual_rate_bps: Mapped[int] = mapped_column(Integer, nullable=False)

    due_date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    progress_percent: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    status: Mapped[LoanStatus] = mapped_column(
        Enum(LoanStatus),
        nullable=False,
        default=LoanStatus.PENDING,
    )
    payment_frequency: Mapped[PaymentFrequency] = mapped_column(
        Enum(PaymentFrequency),
        nullable=False,
        default=PaymentFrequency.MONTHLY,
    )

    approval_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    disbursement_date: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)

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

    @property
    def is_payable(self) -> bool:
        return self.status in PAYABLE_STATUSES

    def apply_payment(self, amount_cents: int) -> None:
        """Record a payment against the outstanding principal."""
        self.paid_cents += amount_cents
        self.remaining_cents = max(self.principal_cents - self.paid_cents, 0)
        self.progress_percent = min(self.paid_cents / self.principal_cents * 100, 100.0)
        if self.remaining_cents == 0:
            self.status = LoanStatus.COMPLETED
        else:
            self.next_payment_cents = min(self.next_payment_cents, self.remaining_cents)


class LoanPayment(Base):
    __tablename__ = "loan_payments"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    loan_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("loans.id"),
        nullable=False,
        index=True,
    )
    account_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("accounts.id"),
        nullable=False,
    )

    reference: Mapped[str] = mapped_column(String(40), unique=True, nullable=False)
    amount_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)

    status: Mapped[OperationStatus] = mapped_column(
        Enum(OperationStatus),
        nullable=False,
        default=OperationStatus.COMPLETED,
    )

    # Public id of the funding ledger row
    transaction_id: Mapped[str] = mapped_column(String(40), nullable=False)

    paid_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
        index=True,
    )
