"""Transaction repository with ledger-specific queries."""

from typing import Optional, List
from uuid import UUID

from sqlalchemy import select

from app.db.models.transaction import Transaction
from app.db.repository import BaseRepository


class TransactionRepository(BaseRepository[Transaction]):
    """Repository for ledger entries."""

    async def get_for_account(
        self, account_id: UUID, limit: Optional[int] = None
    ) -> List[Transaction]:
        """
        Get an account's entries, most recent first.

        Args:
            account_id: Owning account
            limit: Maximum number of entries to return (None = all)

        Returns:
            Entries ordered by occurred_at descending
        """
        query = (
            select(self.model)
            .where(self.model.account_id == account_id)
            .order_by(self.model.occurred_at.desc(), self.model.created_at.desc())
        )
        if limit:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    async def count_for_account(self, account_id: UUID) -> int:
        """Get count of entries owned by an account."""
        return await self.count(account_id=account_id)
