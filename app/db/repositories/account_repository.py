"""Account repository."""

from typing import List
from uuid import UUID

from sqlalchemy import select

from app.db.models.account import Account
from app.db.repository import BaseRepository


class AccountRepository(BaseRepository[Account]):
    """Repository for Account model."""

    async def exists_by_id(self, account_id: UUID) -> bool:
        """Check whether an account with this id exists."""
        return await self.exists(id=account_id)

    async def get_by_currency(self, currency_code: str) -> List[Account]:
        """
        Get accounts held in a currency.

        Args:
            currency_code: ISO 4217 code

        Returns:
            Accounts ordered by creation time
        """
        query = (
            select(self.model)
            .where(self.model.currency_code == currency_code.upper())
            .order_by(self.model.created_at)
        )
        result = await self.session.execute(query)
        return list(result.scalars().all())
