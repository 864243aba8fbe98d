import uuid
from datetime import datetime

from pydantic import BaseModel, Field


class UserResponse(BaseModel):
    id: uuid.UUID
    email: str
    first_name: str
    last_name: str
    full_name: str
    phone: str | None
    created_at: datetime

    model_config = {"from_attributes": True}


class UserUpdateRequest(BaseModel):
    """Request body for PATCH /users/me. Omitted fields are left as they are."""
    first_name: str | None = Field(None, max_length=100)
    last_name: str | None = Field(None, max_length=100)
    phone: str | None = Field(None, max_length=20)


class UserSettingsResponse(BaseModel):
    notifications_enabled: bool
    dark_mode_enabled: bool
    biometrics_enabled: bool
    language: str

    model_config = {"from_attributes": True}


class UserSettingsUpdateRequest(BaseModel):
    """Request body for PATCH /users/me/settings. Omitted fields are left as they are."""
    notifications_enabled: bool | None = None
    dark_mode_enabled: bool | None = None
    biometrics_enabled: bool | None = None
    language: str | None = Field(None, min_length=2, max_length=10)


class UserSummary(BaseModel):
    """
    What one user may see of another: enough to pick a transfer recipient.

    No email, phone or balance.
    """
    id: uuid.UUID
    full_name: str
    account_number: str | None

    model_config = {"from_attributes": True}
