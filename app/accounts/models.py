"""API models for accounts."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.clock import to_utc


class AccountResponse(BaseModel):
    """Account as returned by the API."""

    model_config = ConfigDict(from_attributes=True)

    id: UUID
    name: str
    currency_code: str
    balance: Decimal
    created_at: datetime

    @field_validator("created_at")
    @classmethod
    def _normalize_created_at(cls, value: datetime) -> datetime:
        return to_utc(value)


class CreateAccountRequest(BaseModel):
    """Body of POST /api/accounts."""

    name: str = Field(..., min_length=1, max_length=255)
    currency_code: str = Field(..., pattern=r"^[A-Z]{3}$")
    initial_balance: Decimal = Field(
        default=Decimal("0.00"), max_digits=19, decimal_places=2
    )
