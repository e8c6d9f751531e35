import asyncio
import os
import sys
from datetime import datetime, timedelta, timezone
from decimal import Decimal
from pathlib import Path
from typing import List, Optional, Sequence, Union
from uuid import NAMESPACE_URL, UUID, uuid5

import pytest
import pytest_asyncio

# Ensure project root is on sys.path so `import app` works when running pytest from root.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

# Force test configuration before any app imports
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ.setdefault("ENV", "development")

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import app.db.models  # noqa: E402,F401
from app.db import base  # noqa: E402
from app.db.models.transaction import TransactionType  # noqa: E402
from app.transactions.models import LedgerEntry  # noqa: E402

ACCOUNT_ID = UUID("aaaaaaaa-bbbb-cccc-dddd-eeeeeeeeeeee")
BASE_TIME = datetime(2025, 1, 7, 12, 0, tzinfo=timezone.utc)


class FakeClock:
    """Clock whose sleeps return immediately and are recorded."""

    def __init__(self, now: datetime = BASE_TIME):
        self._now = now
        self.sleeps: List[float] = []

    def now(self) -> datetime:
        return self._now

    async def sleep(self, seconds: float) -> None:
        self.sleeps.append(seconds)
        self._now = self._now + timedelta(seconds=seconds)
        await asyncio.sleep(0)


class ScriptedStore:
    """
    LedgerStore returning one scripted snapshot per query.

    The last snapshot repeats once the script runs out. An Exception in the
    script is raised instead of returned.
    """

    def __init__(
        self,
        snapshots: Sequence[Union[Sequence[LedgerEntry], Exception]] = (),
        exists: bool = True,
    ):
        self.snapshots = list(snapshots) or [[]]
        self.exists = exists
        self.exists_calls = 0
        self.queries = 0
        self.limits: List[int] = []

    async def account_exists(self, account_id: UUID) -> bool:
        self.exists_calls += 1
        return self.exists

    async def entries_for_account(
        self, account_id: UUID, limit: int
    ) -> List[LedgerEntry]:
        self.queries += 1
        self.limits.append(limit)
        snapshot = self.snapshots[min(self.queries, len(self.snapshots)) - 1]
        if isinstance(snapshot, Exception):
            raise snapshot
        return list(snapshot)[:limit]


def make_entry(
    label: str,
    minutes_ago: int = 0,
    amount: str = "10.00",
    account_id: UUID = ACCOUNT_ID,
    description: Optional[str] = None,
) -> LedgerEntry:
    """Ledger entry with an id derived from ``label`` so tests can compare by name."""
    occurred = BASE_TIME - timedelta(minutes=minutes_ago)
    return LedgerEntry(
        id=uuid5(NAMESPACE_URL, f"entry:{label}"),
        account_id=account_id,
        type=TransactionType.EXPENSE,
        amount=Decimal(amount),
        currency_code="EUR",
        description=description or label,
        occurred_at=occurred,
        created_at=occurred,
    )


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest_asyncio.fixture
async def db():
    """
    Fresh in-memory database per test.

    Swaps the engine and session factory in app.db.base so UnitOfWork and
    the services use it.
    """
    engine = create_async_engine(
        "sqlite+aiosqlite:///:memory:",
        poolclass=StaticPool,
        connect_args={"check_same_thread": False},
    )
    async with engine.begin() as conn:
        await conn.run_sync(base.Base.metadata.create_all)

    session_factory = async_sessionmaker(
        engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
    )

    original = (base.engine, base.AsyncSessionLocal)
    base.engine, base.AsyncSessionLocal = engine, session_factory
    try:
        yield session_factory
    finally:
        base.engine, base.AsyncSessionLocal = original
        await engine.dispose()
