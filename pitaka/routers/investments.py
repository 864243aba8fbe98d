"""
Investments router — simulated stock catalogue and share trades.

Endpoints:
  GET  /investments/companies        — Companies (prices tick on each read)
  GET  /investments/companies/{id}   — One company
  GET  /investments                  — My portfolio with totals
  POST /investments/buy              — Buy shares
  POST /investments/sell             — Sell shares
  GET  /investments/transactions     — INVESTMENT ledger entries
  GET  /investments/{id}             — One position

Literal paths are declared before /{investment_id}.
"""

import uuid

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from pitaka.database import get_db
from pitaka.dependencies import AuthenticatedPrincipal, get_current_principal
from pitaka.schemas.common import Envelope, ok
from pitaka.schemas.investment import (
    BuyRequest,
    CompanyResponse,
    InvestmentResponse,
    PortfolioResponse,
    SellRequest,
    SellResponse,
)
from pitaka.schemas.transaction import TransactionResponse
from pitaka.services import investment_service

router = APIRouter()


@router.get("/companies", response_model=Envelope[list[CompanyResponse]], summary="List companies")
async def list_companies(db: AsyncSession = Depends(get_db)):
    return ok(await investment_service.list_companies(db))


@router.get(
    "/companies/{company_id}",
    response_model=Envelope[CompanyResponse],
    summary="Get a company",
)
async def get_company(company_id: uuid.UUID, db: AsyncSession = Depends(get_db)):
    return ok(await investment_service.get_company(db, company_id))


@router.get("", response_model=Envelope[PortfolioResponse], summary="Get my portfolio")
async def get_portfolio(
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """Open positions marked to the current price, with portfolio totals."""
    portfolio = await investment_service.get_portfolio(db, principal)
    return ok(PortfolioResponse.model_validate(portfolio))


@router.post(
    "/buy",
    response_model=Envelope[InvestmentResponse],
    status_code=201,
    summary="Buy shares",
)
async def buy(
    request: BuyRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    """
    Buy at the company's current price, paid from the named account or
    my main account. An existing position is merged at a weighted
    average price.
    """
    investment = await investment_service.buy_shares(
        db, principal, request.company_id, request.shares, account_id=request.account_id,
    )
    return ok(investment, "Purchase successful")


@router.post("/sell", response_model=Envelope[SellResponse], summary="Sell shares")
async def sell(
    request: SellRequest,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    investment, realized = await investment_service.sell_shares(
        db, principal, request.investment_id, request.shares, account_id=request.account_id,
    )
    return ok({"investment": investment, "realized_profit_cents": realized}, "Sale successful")


@router.get(
    "/transactions",
    response_model=Envelope[list[TransactionResponse]],
    summary="List my investment transactions",
)
async def list_investment_transactions(
    limit: int = Query(50, ge=1, le=200),
    offset: int = Query(0, ge=0),
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    txns = await investment_service.get_investment_transactions(
        db, principal, limit=limit, offset=offset,
    )
    return ok(txns)


@router.get("/{investment_id}", response_model=Envelope[InvestmentResponse], summary="Get a position")
async def get_investment(
    investment_id: uuid.UUID,
    principal: AuthenticatedPrincipal = Depends(get_current_principal),
    db: AsyncSession = Depends(get_db),
):
    return ok(await investment_service.get_investment(db, principal, investment_id))
