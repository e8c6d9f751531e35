"""
Demo ledger entry generator.

Produces realistic-looking income and expense entries for an account so the
ledger stream has something to show. Pure data generation, no I/O; the
service layer persists the result.
"""

import random
from datetime import datetime, timedelta, timezone
from decimal import Decimal, ROUND_HALF_UP
from typing import Any, Dict, List, Optional
from uuid import UUID, uuid4

from app.db.models.transaction import TransactionType

DESCRIPTIONS = [
    "Coffee",
    "Groceries",
    "Salary",
    "Rent",
    "Subscription",
    "Taxi",
    "Restaurant",
    "Book",
]

# (low, high) bounds per entry type
AMOUNT_RANGES = {
    TransactionType.EXPENSE: (3.0, 120.0),
    TransactionType.INCOME: (200.0, 5000.0),
}

# Entries are spread over the last ~30 days
MAX_AGE_HOURS = 24 * 30


class DemoTransactionGenerator:
    """Generates ledger entry rows for an account."""

    def __init__(self, rng: Optional[random.Random] = None):
        """
        Args:
            rng: Random source (seed it for reproducible data)
        """
        self.rng = rng or random.Random()

    def generate(
        self,
        account_id: UUID,
        currency_code: str,
        count: int,
        now: Optional[datetime] = None,
    ) -> List[Dict[str, Any]]:
        """
        Build ``count`` entry rows for the account.

        Args:
            account_id: Owning account
            currency_code: Currency of every generated entry
            count: Number of entries
            now: Reference time for occurred_at/created_at

        Returns:
            Field dicts ready for TransactionRepository.create_many
        """
        now = now or datetime.now(timezone.utc)
        rows = []
        for _ in range(count):
            tx_type = (
                TransactionType.EXPENSE
                if self.rng.random() < 0.5
                else TransactionType.INCOME
            )
            rows.append(
                {
                    "id": uuid4(),
                    "account_id": account_id,
                    "type": tx_type,
                    "amount": self._amount(tx_type),
                    "currency_code": currency_code,
                    "description": self.rng.choice(DESCRIPTIONS),
                    "occurred_at": now
                    - timedelta(hours=self.rng.randint(1, MAX_AGE_HOURS - 1)),
                    "created_at": now,
                }
            )
        return rows

    def _amount(self, tx_type: TransactionType) -> Decimal:
        low, high = AMOUNT_RANGES[tx_type]
        raw = self.rng.uniform(low, high)
        return Decimal(str(raw)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
