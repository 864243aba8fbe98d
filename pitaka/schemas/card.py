"""
Pydantic schemas for Card endpoints.

Card numbers and CVVs are NEVER returned in API responses. Only the
masked number and last four digits are exposed.
"""

import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class CardCreateRequest(BaseModel):
    """Request body for POST /cards. Format rules are checked by the card service."""
    card_number: str = Field(min_length=1, max_length=32)
    cardholder_name: str = Field(min_length=1, max_length=200)
    expiry_month: str = Field(min_length=1, max_length=2)
    expiry_year: str = Field(min_length=2, max_length=2)
    cvv: str = Field(min_length=3, max_length=4)
    is_default: bool = False


class CardUpdateRequest(BaseModel):
    """Request body for PATCH /cards/{id}."""
    cardholder_name: str | None = Field(None, max_length=200)
    expiry_month: str | None = Field(None, max_length=2)
    expiry_year: str | None = Field(None, max_length=2)
    is_default: bool | None = None


class CardResponse(BaseModel):
    """Public representation of a card (masked, no full number or CVV)."""
    id: uuid.UUID
    network: str
    masked_number: str
    last_four: str
    cardholder_name: str
    expiry_month: int
    expiry_year: int
    is_default: bool
    created_at: datetime

    model_config = {"from_attributes": True}
