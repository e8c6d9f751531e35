"""API and streaming models for ledger entries."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field, field_validator

from app.core.clock import to_utc
from app.db.models.transaction import TransactionType


class LedgerEntry(BaseModel):
    """Read-only view of a ledger entry, as streamed and listed."""

    model_config = ConfigDict(from_attributes=True, frozen=True)

    id: UUID = Field(..., description="Entry identifier")
    account_id: UUID = Field(..., description="Owning account")
    type: TransactionType = Field(..., description="income or expense")
    amount: Decimal = Field(..., description="Entry amount")
    currency_code: str = Field(..., description="Currency code (ISO 4217)")
    description: Optional[str] = Field(default=None, description="Free-text memo")
    occurred_at: datetime = Field(..., description="When the activity happened")
    created_at: datetime = Field(..., description="When the entry was recorded")

    @field_validator("occurred_at", "created_at")
    @classmethod
    def _normalize_timestamps(cls, value: datetime) -> datetime:
        return to_utc(value)


class CreateTransactionRequest(BaseModel):
    """Body of POST /api/accounts/{account_id}/transactions."""

    type: TransactionType
    amount: Decimal = Field(..., gt=0, max_digits=19, decimal_places=2)
    currency_code: str = Field(..., pattern=r"^[A-Z]{3}$")
    description: Optional[str] = Field(default=None, max_length=2000)
    occurred_at: Optional[datetime] = Field(
        default=None, description="Defaults to the time of the request"
    )

    @field_validator("occurred_at")
    @classmethod
    def _occurred_at_in_utc(cls, value: Optional[datetime]) -> Optional[datetime]:
        # SQLite keeps wall-clock time only, so offsets are resolved here
        return to_utc(value) if value is not None else None
