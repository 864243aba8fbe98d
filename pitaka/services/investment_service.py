"""
Investment service — company catalogue and cash-settled share trades.

Trades settle against an owned account (the primary MAIN account unless
one is named):

  buy_shares()   debit shares * price, merge into the open position
  sell_shares()  credit shares * price, take proportional cost basis out

Each trade writes one INVESTMENT ledger row linked to the position.
"""

import logging
import random
import uuid
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.dependencies import AuthenticatedPrincipal
from pitaka.exceptions import InsufficientSharesError, ResourceNotFoundError
from pitaka.models.investment import Company, Investment
from pitaka.models.transaction import Direction, Transaction, TransactionKind
from pitaka.services import account_service, ledger

logger = logging.getLogger(__name__)


# Largest fractional move of a simulated price tick
PRICE_TICK = 0.01


@dataclass
class Portfolio:
    positions: list[Investment]
    total_value_cents: int
    total_cost_cents: int
    total_profit_cents: int
    total_profit_percent: float


def tick_price(company: Company) -> None:
    """Random-walk the company's price by up to PRICE_TICK either way."""
    step = round(company.current_price_cents * random.uniform(-PRICE_TICK, PRICE_TICK))
    company.set_price(max(company.current_price_cents + step, 1))


async def list_companies(db: AsyncSession) -> list[Company]:
    """Active companies by symbol, each price ticked once."""
    result = await db.execute(
        select(Company)
        .where(Company.is_active.is_(True))
        .order_by(Company.symbol)
    )
    companies = list(result.scalars().all())
    for company in companies:
        tick_price(company)
    await db.flush()
    return companies


async def _find_company(db: AsyncSession, company_id: uuid.UUID) -> Company:
    company = await db.get(Company, company_id)
    if company is None or not company.is_active:
        raise ResourceNotFoundError("Company", company_id)
    return company


async def get_company(db: AsyncSession, company_id: uuid.UUID) -> Company:
    company = await _find_company(db, company_id)
    tick_price(company)
    await db.flush()
    return company


async def _get_owned_investment(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    investment_id: uuid.UUID,
    *,
    lock: bool = False,
) -> Investment:
    query = select(Investment).where(
        Investment.id == investment_id,
        Investment.owner_id == principal.owner_id,
    )
    if lock:
        query = query.with_for_update()

    result = await db.execute(query)
    investment = result.scalar_one_or_none()
    if investment is None:
        raise ResourceNotFoundError("Investment", investment_id)
    return investment


async def _mark_to_market(db: AsyncSession, investment: Investment) -> Investment:
    company = await db.get(Company, investment.company_id)
    investment.update_values(company.current_price_cents)
    return investment


async def get_portfolio(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
) -> Portfolio:
    """
    Open positions at current prices, with totals across them.

    Reading the portfolio marks positions to the last price but doesn't
    move any price.

    Args:
        db: The async database session.
        principal: The authenticated caller.

    Returns:
        A Portfolio; total_profit_percent is 0.0 when nothing is held.
    """
    result = await db.execute(
        select(Investment)
        .where(
            Investment.owner_id == principal.owner_id,
            Investment.is_active.is_(True),
        )
        .order_by(Investment.purchase_date)
    )
    positions = list(result.scalars().all())
    for investment in positions:
        await _mark_to_market(db, investment)
    await db.flush()

    total_value = sum(p.current_value_cents for p in positions)
    total_cost = sum(p.cost_basis_cents for p in positions)
    total_profit = total_value - total_cost
    return Portfolio(
        positions=positions,
        total_value_cents=total_value,
        total_cost_cents=total_cost,
        total_profit_cents=total_profit,
        total_profit_percent=round(total_profit / total_cost * 100, 2) if total_cost else 0.0,
    )


async def get_investment(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    investment_id: uuid.UUID,
) -> Investment:
    investment = await _get_owned_investment(db, principal, investment_id)
    await _mark_to_market(db, investment)
    await db.flush()
    return investment


async def buy_shares(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    company_id: uuid.UUID,
    shares: int,
    account_id: uuid.UUID | None = None,
) -> Investment:
    """
    Buy shares at the company's current price.

    A second buy of the same company merges into the open position at a
    weighted-average purchase price.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        company_id: UUID of the company.
        shares: Whole number of shares (must be > 0).
        account_id: Owned account to pay from; defaults to the MAIN account.

    Returns:
        The open Investment position.

    Raises:
        AccountNotFoundError: If account_id isn't theirs.
        InvalidAmountError: If shares <= 0.
        ResourceNotFoundError: If the company doesn't exist.
        InsufficientFundsError: If the account can't cover the cost.
    """
    ledger.require_positive(shares, "Shares")
    company = await _find_company(db, company_id)
    cost_cents = shares * company.current_price_cents

    account = await account_service.resolve_funding_account(db, principal, account_id)
    ledger.debit(account, cost_cents)

    result = await db.execute(
        select(Investment)
        .where(
            Investment.owner_id == principal.owner_id,
            Investment.company_id == company.id,
            Investment.is_active.is_(True),
        )
        .with_for_update()
    )
    investment = result.scalar_one_or_none()
    if investment is None:
        investment = Investment(
            owner_id=principal.owner_id,
            company_id=company.id,
            shares=shares,
            cost_basis_cents=cost_cents,
            purchase_price_cents=company.current_price_cents,
        )
        db.add(investment)
    else:
        investment.add_shares(shares, cost_cents)
    investment.update_values(company.current_price_cents)
    await db.flush()

    txn = await ledger.record_transaction(
        db,
        account=account,
        kind=TransactionKind.INVESTMENT,
        direction=Direction.DEBIT,
        amount_cents=cost_cents,
        description=f"Bought {shares} {company.symbol} shares",
        investment_id=investment.id,
    )

    logger.info(
        "Share purchase completed",
        extra={
            "reference": txn.transaction_id,
            "owner_id": str(principal.owner_id),
            "amount_cents": cost_cents,
            "kind": TransactionKind.INVESTMENT.value,
            "symbol": company.symbol,
            "shares": shares,
        },
    )
    return investment


async def sell_shares(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    investment_id: uuid.UUID,
    shares: int,
    account_id: uuid.UUID | None = None,
) -> tuple[Investment, int]:
    """
    Sell shares out of a position at the company's current price.

    The sold shares take their proportional share of the cost basis with
    them; selling every share closes the position.

    Args:
        db: The async database session.
        principal: The authenticated caller.
        investment_id: UUID of the position.
        shares: Whole number of shares (must be > 0).
        account_id: Owned account to credit; defaults to the MAIN account.

    Returns:
        The updated position and the realized profit in cents.

    Raises:
        InvalidAmountError: If shares <= 0.
        ResourceNotFoundError: If the position isn't theirs.
        InsufficientSharesError: If the position holds fewer shares.
    """
    ledger.require_positive(shares, "Shares")
    investment = await _get_owned_investment(db, principal, investment_id, lock=True)
    company = await db.get(Company, investment.company_id)

    if not investment.is_active or investment.shares < shares:
        logger.warning(
            "Share sale rejected: insufficient shares",
            extra={
                "investment_id": str(investment.id),
                "symbol": company.symbol,
                "requested": shares,
                "available": investment.shares,
            },
        )
        raise InsufficientSharesError(company.symbol, shares, investment.shares)

    proceeds_cents = shares * company.current_price_cents
    account = await account_service.resolve_funding_account(db, principal, account_id)

    removed_cost = investment.remove_shares(shares)
    investment.update_values(company.current_price_cents)
    ledger.credit(account, proceeds_cents)

    txn = await ledger.record_transaction(
        db,
        account=account,
        kind=TransactionKind.INVESTMENT,
        direction=Direction.CREDIT,
        amount_cents=proceeds_cents,
        description=f"Sold {shares} {company.symbol} shares",
        investment_id=investment.id,
    )

    realized_profit = proceeds_cents - removed_cost
    logger.info(
        "Share sale completed",
        extra={
            "reference": txn.transaction_id,
            "owner_id": str(principal.owner_id),
            "amount_cents": proceeds_cents,
            "kind": TransactionKind.INVESTMENT.value,
            "symbol": company.symbol,
            "shares": shares,
            "realized_profit_cents": realized_profit,
        },
    )
    return investment, realized_profit


async def get_investment_transactions(
    db: AsyncSession,
    principal: AuthenticatedPrincipal,
    limit: int = 50,
    offset: int = 0,
) -> list[Transaction]:
    """Buy and sell ledger rows across all the principal's accounts, newest first."""
    result = await db.execute(
        select(Transaction)
        .where(
            Transaction.owner_id == principal.owner_id,
            Transaction.kind == TransactionKind.INVESTMENT,
        )
        .order_by(Transaction.occurred_at.desc())
        .limit(limit)
        .offset(offset)
    )
    return list(result.scalars().all())
