"""Generic async repository shared by the ledger tables."""

from typing import Any, Generic, List, Optional, Sequence, Type, TypeVar
from uuid import UUID

from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.db.base import Base

ModelType = TypeVar("ModelType", bound=Base)


class BaseRepository(Generic[ModelType]):
    """
    Table access bound to one session.

    Repositories never commit; the surrounding UnitOfWork decides whether
    the session's work is kept or rolled back.
    """

    def __init__(self, model: Type[ModelType], session: AsyncSession):
        self.model = model
        self.session = session

    async def create(self, **values: Any) -> ModelType:
        """
        Insert one row and return it with server defaults loaded.

        Args:
            **values: Column values for the new row
        """
        row = self.model(**values)
        self.session.add(row)
        await self.session.flush()
        await self.session.refresh(row)
        return row

    async def create_many(self, rows: Sequence[dict[str, Any]]) -> List[ModelType]:
        """Insert several rows in a single flush, preserving input order."""
        instances = [self.model(**values) for values in rows]
        self.session.add_all(instances)
        await self.session.flush()
        return instances

    async def get_by_id(self, id: UUID) -> Optional[ModelType]:
        result = await self.session.execute(
            select(self.model).where(self.model.id == id)  # type: ignore[attr-defined]
        )
        return result.scalar_one_or_none()

    async def get_all(self, limit: Optional[int] = None) -> List[ModelType]:
        """Every row, oldest first when the table records a creation time."""
        query = select(self.model)
        created_at = getattr(self.model, "created_at", None)
        if created_at is not None:
            query = query.order_by(created_at)
        if limit is not None:
            query = query.limit(limit)

        result = await self.session.execute(query)
        return list(result.scalars().all())

    def _where(self, query, filters: dict):
        # Equality only: {"account_id": ...} -> WHERE account_id = ...
        for column, value in filters.items():
            query = query.where(getattr(self.model, column) == value)
        return query

    async def count(self, **filters: Any) -> int:
        """Number of rows whose columns equal the given values."""
        query = self._where(select(func.count()).select_from(self.model), filters)
        result = await self.session.execute(query)
        return result.scalar() or 0

    async def exists(self, **filters: Any) -> bool:
        """Whether any row matches; stops at the first hit."""
        subquery = self._where(select(self.model), filters)
        result = await self.session.execute(select(subquery.exists()))
        return bool(result.scalar())
