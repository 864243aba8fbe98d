"""
Investment sub-ledger models: Company (a listed stock) and Investment (an
owner's position in one company).

Prices are simulated. A company's price takes a small random step each
time the catalogue is read (see investment_service.tick_price); it is not
market data.

Position values:
  cost_basis_cents is what the owner paid for the shares still held and
  purchase_price_cents is the average per share. current_value_cents,
  profit_cents and profit_percent are derived from the company's current
  price by update_values(), which the service calls before any position
  is returned, so a stored value is never served stale.
"""

import uuid
from datetime import datetime, timezone

from sqlalchemy import String, Boolean, BigInteger, Integer, Float, DateTime, ForeignKey, CheckConstraint
from sqlalchemy.orm import Mapped, mapped_column

from pitaka.database import Base


class Company(Base):
    __tablename__ = "companies"

    id: Mapped[uuid.UUID] = mapped_column(
        primary_key=True,
        default=uuid.uuid4,
    )

    name: Mapped[str] = mapped_column(String(200), nullable=False)
    symbol: Mapped[str] = mapped_column(String(10), unique=True, nullable=False, index=True)
    sector: Mapped[str | None] = mapped_column(String(100), nullable=True)

    current_price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    previous_close_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    change_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    change_percent: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        onupdate=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    def set_price(self, price_cents: int) -> None:
        """Move the current price and refresh the day's change against previous close."""
        self.current_price_cents = price_cents
        self.change_cents = price_cents - self.previous_close_cents
        if self.previous_close_cents:
            self.change_percent = round(self.change_cents / self.previous_close_cents * 100, 2)
        else:
            self.change_percent = 0.0


class Investment(Base):
    __tablename__ = "investments"

    __table_args__ = (
        CheckConstraint("shares >= 0", name="ck_investments_non_negative_shares"),
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
    company_id: Mapped[uuid.UUID] = mapped_column(
        ForeignKey("companies.id"),
        nullable=False,
        index=True,
    )

    shares: Mapped[int] = mapped_column(Integer, nullable=False)
    cost_basis_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    purchase_price_cents: Mapped[int] = mapped_column(BigInteger, nullable=False)
    purchase_date: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        default=lambda: datetime.now(timezone.utc),
        nullable=False,
    )

    # Derived; see update_values()
    current_value_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    profit_cents: Mapped[int] = mapped_column(BigInteger, nullable=False, default=0)
    profit_percent: Mapped[float] = mapped_column(Float, nullable=False, default=0.0)

    # False once every share has been sold
    is_active: Mapped[bool] = mapped_column(Boolean, default=True, nullable=False)

    def update_values(self, price_cents: int) -> None:
        """Mark the position to market at `price_cents` per share."""
        self.current_value_cents = self.shares * price_cents
        self.profit_cents = self.current_value_cents - self.cost_basis_cents
        if self.cost_basis_cents:
            self.profit_percent = round(self.profit_cents / self.cost_basis_cents * 100, 2)
        else:
            self.profit_percent = 0.0

    def add_shares(self, shares: int, cost_cents: int) -> None:
        """Merge a purchase into the position at a weighted-average price."""
        self.shares += shares
        self.cost_basis_cents += cost_cents
        self.purchase_price_cents = self.cost_basis_cents // self.shares

    def remove_shares(self, shares: int) -> int:
        """
        Take `shares` out of the position and return the cost basis they carried.

        Cost basis leaves in proportion to the shares sold. Selling the last
        share closes the position.
        """
        if shares == self.shares:
            removed_cost = self.cost_basis_cents
            self.shares = 0
            self.cost_basis_cents = 0
            self.is_active = False
            return removed_cost

        removed_cost = self.cost_basis_cents * shares // self.shares
        self.shares -= shares
        self.cost_basis_cents -= removed_cost
        return removed_cost
