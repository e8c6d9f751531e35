"""
Ledger use cases.

Keeps account existence checks and entry defaults in one place so the
routers never talk to repositories directly.
"""

from datetime import datetime
from decimal import Decimal
from typing import List, Optional
from uuid import UUID, uuid4

import structlog

from app.core.clock import Clock, SYSTEM_CLOCK, to_utc
from app.core.errors import AccountNotFoundError, ValidationError
from app.db.models.transaction import TransactionType
from app.db.unit_of_work import UnitOfWork
from app.transactions.feed import LedgerFeed, LedgerFeedPoller
from app.transactions.generator import DemoTransactionGenerator
from app.transactions.models import LedgerEntry

logger = structlog.get_logger()


class TransactionService:
    """Reads, writes and streams an account's ledger."""

    def __init__(
        self,
        poller: Optional[LedgerFeedPoller] = None,
        generator: Optional[DemoTransactionGenerator] = None,
        clock: Optional[Clock] = None,
    ):
        self.poller = poller or LedgerFeedPoller()
        self.generator = generator or DemoTransactionGenerator()
        self.clock = clock or SYSTEM_CLOCK

    async def list_for_account(self, account_id: UUID) -> List[LedgerEntry]:
        """All entries of an account, most recent first."""
        async with UnitOfWork() as uow:
            if not await uow.accounts.exists_by_id(account_id):
                raise AccountNotFoundError(account_id)
            rows = await uow.transactions.get_for_account(account_id)
            return [LedgerEntry.model_validate(row) for row in rows]

    async def create(
        self,
        account_id: UUID,
        type: TransactionType,
        amount: Decimal,
        currency_code: str,
        description: Optional[str] = None,
        occurred_at: Optional[datetime] = None,
    ) -> LedgerEntry:
        """Record a new entry; occurred_at defaults to now."""
        now = to_utc(self.clock.now())
        async with UnitOfWork() as uow:
            if not await uow.accounts.exists_by_id(account_id):
                raise AccountNotFoundError(account_id)
            row = await uow.transactions.create(
                id=uuid4(),
                account_id=account_id,
                type=type,
                amount=amount,
                currency_code=currency_code,
                description=description,
                occurred_at=to_utc(occurred_at) if occurred_at else now,
                created_at=now,
            )
            entry = LedgerEntry.model_validate(row)

        logger.info(
            "transaction.created",
            account_id=str(account_id),
            transaction_id=str(entry.id),
            type=entry.type.value,
            amount=str(entry.amount),
        )
        return entry

    async def generate(self, account_id: UUID, count: int) -> List[LedgerEntry]:
        """Generate and persist ``count`` demo entries in the account's currency."""
        if count <= 0:
            raise ValidationError("count must be > 0")

        async with UnitOfWork() as uow:
            account = await uow.accounts.get_by_id(account_id)
            if account is None:
                raise AccountNotFoundError(account_id)
            rows = self.generator.generate(
                account_id,
                account.currency_code,
                count,
                now=to_utc(self.clock.now()),
            )
            created = await uow.transactions.create_many(rows)
            entries = [LedgerEntry.model_validate(row) for row in created]

        logger.info(
            "transaction.generated", account_id=str(account_id), count=len(entries)
        )
        return entries

    async def open_stream(self, account_id: UUID) -> LedgerFeed:
        """Open a live feed; raises AccountNotFoundError before any poll."""
        return await self.poller.open(account_id)


# Global service instance
_service_instance: Optional[TransactionService] = None


def get_transaction_service() -> TransactionService:
    """
    Get or create the global transaction service.

    Returns:
        TransactionService singleton
    """
    global _service_instance
    if _service_instance is None:
        _service_instance = TransactionService()
    return _service_instance
