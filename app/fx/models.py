"""Data models for currency conversion."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Union

from pydantic import BaseModel, ConfigDict, Field


class RateQuote(BaseModel):
    """Result of a conversion request. Built per request, never persisted."""

    model_config = ConfigDict(frozen=True)

    from_currency: str = Field(..., description="Source currency code")
    to_currency: str = Field(..., description="Target currency code")
    requested_amount: Decimal = Field(..., description="Amount in source currency")
    rate: Optional[Decimal] = Field(
        default=None, description="Target units per one source unit"
    )
    converted: Optional[Decimal] = Field(
        default=None, description="Requested amount in target currency"
    )
    fetched_at: datetime = Field(..., description="Provider quote date or receipt time")


class ProviderQuery(BaseModel):
    """Echo of the request parameters in the provider payload."""

    model_config = ConfigDict(extra="ignore")

    from_: Optional[str] = Field(default=None, alias="from")
    to: Optional[str] = None
    amount: Optional[Decimal] = None


class ProviderError(BaseModel):
    """Provider error description."""

    model_config = ConfigDict(extra="allow")

    code: Optional[Union[int, str]] = None
    type: Optional[str] = None
    info: Optional[str] = None


class ProviderInfo(BaseModel):
    """Extra quote details; only the unit rate is used."""

    model_config = ConfigDict(extra="allow")

    rate: Optional[Decimal] = None


class ConvertResponse(BaseModel):
    """Shape of the provider's /convert JSON payload."""

    model_config = ConfigDict(extra="ignore")

    success: bool = False
    query: Optional[ProviderQuery] = None
    info: Optional[ProviderInfo] = None
    result: Optional[Decimal] = None
    quote_date: Optional[date] = Field(default=None, alias="date")
    error: Optional[Union[ProviderError, str]] = None

    def declared_rate(self) -> Optional[Decimal]:
        """``info.rate`` when the provider supplied one."""
        return self.info.rate if self.info is not None else None
