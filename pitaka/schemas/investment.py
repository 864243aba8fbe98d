"""
Pydantic schemas for Investment endpoints.

Prices and values are in cents per share / cents.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class CompanyResponse(BaseModel):
    id: uuid.UUID
    name: str
    symbol: str
    sector: str | None
    current_price_cents: int
    previous_close_cents: int
    change_cents: int
    change_percent: float
    updated_at: datetime

    model_config = {"from_attributes": True}


class InvestmentResponse(BaseModel):
    id: uuid.UUID
    company_id: uuid.UUID
    shares: int
    cost_basis_cents: int
    purchase_price_cents: int
    purchase_date: datetime
    current_value_cents: int
    profit_cents: int
    profit_percent: float
    is_active: bool

    model_config = {"from_attributes": True}


class PortfolioResponse(BaseModel):
    positions: list[InvestmentResponse]
    total_value_cents: int
    total_cost_cents: int
    total_profit_cents: int
    total_profit_percent: float

    model_config = {"from_attributes": True}


class BuyRequest(BaseModel):
    """Request body for POST /investments/buy."""
    company_id: uuid.UUID
    shares: int = Field(gt=0)
    account_id: uuid.UUID | None = Field(
        None, description="Account to settle against; defaults to the main account"
    )


class SellRequest(BaseModel):
    """Request body for POST /investments/sell."""
    investment_id: uuid.UUID
    shares: int = Field(gt=0)
    account_id: uuid.UUID | None = Field(
        None, description="Account to settle against; defaults to the main account"
    )


class SellResponse(BaseModel):
    investment: InvestmentResponse
    realized_profit_cents: int
