"""Transaction boundary around the ledger repositories."""

from typing import Optional

from sqlalchemy.ext.asyncio import AsyncSession

from app.db import base
from app.db.models import Account, Transaction
from app.db.repositories import AccountRepository, TransactionRepository


class UnitOfWork:
    """
    One database session shared by the account and transaction repositories.

    Leaving the block commits; an exception rolls back and propagates. The
    session factory is looked up on ``app.db.base`` at entry so a test can
    swap in its own engine.

        async with UnitOfWork() as uow:
            if await uow.accounts.exists_by_id(account_id):
                rows = await uow.transactions.get_for_account(account_id, limit=20)
    """

    accounts: AccountRepository
    transactions: TransactionRepository

    def __init__(self, session: Optional[AsyncSession] = None):
        """
        Args:
            session: Caller-managed session; it is neither committed nor
                closed here
        """
        self._session = session
        self._owns_session = session is None

    async def __aenter__(self) -> "UnitOfWork":
        if self._session is None:
            self._session = base.AsyncSessionLocal()

        self.accounts = AccountRepository(Account, self._session)
        self.transactions = TransactionRepository(Transaction, self._session)
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        try:
            if exc_type is not None:
                await self.rollback()
            elif self._owns_session:
                await self.commit()
        finally:
            if self._owns_session and self._session is not None:
                await self._session.close()
                self._session = None

    async def commit(self) -> None:
        if self._session is not None:
            await self._session.commit()

    async def rollback(self) -> None:
        if self._session is not None:
            await self._session.rollback()
