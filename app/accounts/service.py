"""Account use cases."""

from decimal import Decimal
from typing import List, Optional
from uuid import uuid4

import structlog

from app.accounts.models import AccountResponse
from app.core.clock import Clock, SYSTEM_CLOCK, to_utc
from app.db.unit_of_work import UnitOfWork

logger = structlog.get_logger()


class AccountService:
    """Creates and lists accounts."""

    def __init__(self, clock: Optional[Clock] = None):
        self.clock = clock or SYSTEM_CLOCK

    async def list_accounts(
        self, currency_code: Optional[str] = None
    ) -> List[AccountResponse]:
        """All accounts, or only those held in ``currency_code``."""
        async with UnitOfWork() as uow:
            if currency_code:
                rows = await uow.accounts.get_by_currency(currency_code)
            else:
                rows = await uow.accounts.get_all()
            return [AccountResponse.model_validate(row) for row in rows]

    async def create_account(
        self, name: str, currency_code: str, initial_balance: Decimal
    ) -> AccountResponse:
        """Create an account with a fresh id and creation time."""
        async with UnitOfWork() as uow:
            row = await uow.accounts.create(
                id=uuid4(),
                name=name,
                currency_code=currency_code,
                balance=initial_balance,
                created_at=to_utc(self.clock.now()),
            )
            account = AccountResponse.model_validate(row)

        logger.info(
            "account.created",
            account_id=str(account.id),
            currency_code=account.currency_code,
        )
        return account


_service_instance: Optional[AccountService] = None


def get_account_service() -> AccountService:
    """Get or create the global account service."""
    global _service_instance
    if _service_instance is None:
        _service_instance = AccountService()
    return _service_instance
