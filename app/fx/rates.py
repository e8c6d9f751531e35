"""Exchange rate arithmetic."""

from decimal import Decimal, ROUND_DOWN, ROUND_HALF_UP, localcontext
from typing import Optional

RATE_PLACES = 8
RATE_QUANTUM = Decimal(1).scaleb(-RATE_PLACES)


def derive_rate(
    requested_amount: Optional[Decimal],
    converted: Optional[Decimal],
    rate: Optional[Decimal] = None,
) -> Optional[Decimal]:
    """
    Unit rate for a conversion.

    A rate supplied by the provider is returned unchanged. Otherwise the rate
    is ``converted / requested_amount`` rounded half-up to 8 places. Returns
    None when there is nothing to divide (no converted amount, or a missing
    or zero requested amount).
    """
    if rate is not None:
        return rate
    if converted is None or requested_amount is None or requested_amount == 0:
        return None

    with localcontext() as ctx:
        # Truncate the quotient well past the 8th place so the final
        # half-up rounding sees the exact digits that matter.
        ctx.prec = 40 + max(converted.adjusted() - requested_amount.adjusted(), 0)
        ctx.rounding = ROUND_DOWN
        quotient = converted / requested_amount
        return quotient.quantize(RATE_QUANTUM, rounding=ROUND_HALF_UP)
