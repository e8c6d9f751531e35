"""Currency conversion API routes."""

from decimal import Decimal

from fastapi import APIRouter, Depends, Query

from app.fx.models import RateQuote
from app.fx.service import FxService, get_fx_service

router = APIRouter(tags=["fx"])

CURRENCY_PATTERN = r"^[A-Z]{3}$"


@router.get("/conversion-quote", response_model=RateQuote)
async def conversion_quote(
    from_currency: str = Query(..., alias="from", pattern=CURRENCY_PATTERN),
    to_currency: str = Query(..., alias="to", pattern=CURRENCY_PATTERN),
    amount: Decimal = Query(..., gt=0),
    service: FxService = Depends(get_fx_service),
):
    """
    Convert ``amount`` from one currency to another.

    Example: ``/conversion-quote?from=EUR&to=USD&amount=123.45``. Invalid
    parameters are rejected with 400 before the provider is called.
    """
    return await service.convert(from_currency, to_currency, amount)
