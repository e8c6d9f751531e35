"""
Ledger feed poller.

Turns the account's stored ledger into a continuous event stream. The
database has no tailable cursor, so the feed approximates one: every
interval it reads the newest entries for the account and forwards the
ones that differ from what it emitted just before.
"""

import asyncio
from collections import deque
from enum import Enum
from typing import Deque, List, Optional, Protocol, Sequence
from uuid import UUID

import structlog

from app.core.clock import Clock, SYSTEM_CLOCK
from app.core.errors import AccountNotFoundError
from app.db.unit_of_work import UnitOfWork
from app.transactions.config import DedupMode, FeedConfig, get_feed_config
from app.transactions.models import LedgerEntry

logger = structlog.get_logger()


class LedgerStore(Protocol):
    """Read side of the ledger consumed by the feed."""

    async def account_exists(self, account_id: UUID) -> bool: ...

    async def entries_for_account(
        self, account_id: UUID, limit: int
    ) -> Sequence[LedgerEntry]: ...


class SqlLedgerStore:
    """LedgerStore backed by the SQLAlchemy repositories.

    Opens a short-lived unit of work per call so that a long-running
    subscription never pins a database connection between ticks.
    """

    async def account_exists(self, account_id: UUID) -> bool:
        async with UnitOfWork() as uow:
            return await uow.accounts.exists_by_id(account_id)

    async def entries_for_account(
        self, account_id: UUID, limit: int
    ) -> List[LedgerEntry]:
        async with UnitOfWork() as uow:
            rows = await uow.transactions.get_for_account(account_id, limit=limit)
            return [LedgerEntry.model_validate(row) for row in rows]


class FeedState(str, Enum):
    """Lifecycle of a single feed subscription."""

    NOT_STARTED = "not_started"
    POLLING = "polling"
    CANCELLED = "cancelled"
    FAILED = "failed"


class SnapshotDeduplicator:
    """
    Distinct-until-changed filter over successive store snapshots.

    Only the key of the immediately preceding emission is remembered, never
    a full history: an entry that reappears after something else was emitted
    in between is forwarded again.

    In ``tick`` mode the key is the head (newest) entry of a snapshot and a
    snapshot whose head matches the previous forwarded head is dropped
    whole. In ``entry`` mode each entry is compared with the single entry
    emitted before it.
    """

    def __init__(self, mode: DedupMode = DedupMode.TICK):
        self.mode = mode
        self._last_id: Optional[UUID] = None

    @property
    def last_id(self) -> Optional[UUID]:
        return self._last_id

    def filter(self, snapshot: Sequence[LedgerEntry]) -> List[LedgerEntry]:
        if self.mode == DedupMode.TICK:
            if not snapshot or snapshot[0].id == self._last_id:
                return []
            self._last_id = snapshot[0].id
            return list(snapshot)

        forwarded: List[LedgerEntry] = []
        for entry in snapshot:
            if entry.id != self._last_id:
                forwarded.append(entry)
                self._last_id = entry.id
        return forwarded


class LedgerFeed:
    """
    One subscription to an account's ledger.

    Async iterator that never completes on its own: it ends when the
    subscriber cancels (``cancel()``/``aclose()`` or cancelling the
    consuming task) or fails with the store's error.
    """

    def __init__(
        self,
        account_id: UUID,
        store: LedgerStore,
        config: FeedConfig,
        clock: Clock = SYSTEM_CLOCK,
    ):
        self.account_id = account_id
        self.store = store
        self.config = config
        self.clock = clock

        self.state = FeedState.NOT_STARTED
        self.ticks = 0
        self._dedup = SnapshotDeduplicator(config.dedup_mode)
        self._pending: Deque[LedgerEntry] = deque()
        self._timer: Optional[asyncio.Future] = None
        self._cancel_requested = False

    def __aiter__(self) -> "LedgerFeed":
        return self

    async def __anext__(self) -> LedgerEntry:
        if self.state == FeedState.NOT_STARTED:
            self.state = FeedState.POLLING
            logger.info(
                "feed.started",
                account_id=str(self.account_id),
                interval_seconds=self.config.interval_seconds,
                batch_size=self.config.batch_size,
                dedup_mode=self.config.dedup_mode.value,
            )

        while not self._pending:
            if self.state != FeedState.POLLING:
                raise StopAsyncIteration
            await self._wait_for_tick()
            if self._cancel_requested:
                continue
            await self._poll()

        return self._pending.popleft()

    async def _wait_for_tick(self) -> None:
        self._timer = asyncio.ensure_future(
            self.clock.sleep(self.config.interval_seconds)
        )
        try:
            await self._timer
        except asyncio.CancelledError:
            if self._cancel_requested:
                # cancel() interrupted the timer; end the stream quietly
                return
            self._mark_cancelled()
            raise
        finally:
            self._timer = None

    async def _poll(self) -> None:
        self.ticks += 1
        try:
            snapshot = await self.store.entries_for_account(
                self.account_id, self.config.batch_size
            )
        except asyncio.CancelledError:
            self._mark_cancelled()
            raise
        except Exception as e:
            self.state = FeedState.FAILED
            logger.error(
                "feed.failed",
                account_id=str(self.account_id),
                tick=self.ticks,
                error=str(e),
                error_type=type(e).__name__,
            )
            raise

        if self._cancel_requested:
            return

        forwarded = self._dedup.filter(snapshot)
        self._pending.extend(forwarded)

        logger.debug(
            "feed.tick",
            account_id=str(self.account_id),
            tick=self.ticks,
            fetched=len(snapshot),
            forwarded=len(forwarded),
        )

    def cancel(self) -> None:
        """Stop the feed; no store query is issued afterwards."""
        if self.state in (FeedState.CANCELLED, FeedState.FAILED):
            return
        self._cancel_requested = True
        self._pending.clear()
        if self._timer is not None and not self._timer.done():
            self._timer.cancel()
        self._mark_cancelled()

    async def aclose(self) -> None:
        self.cancel()

    def _mark_cancelled(self) -> None:
        if self.state == FeedState.CANCELLED:
            return
        self.state = FeedState.CANCELLED
        logger.info(
            "feed.cancelled", account_id=str(self.account_id), ticks=self.ticks
        )


class LedgerFeedPoller:
    """
    Opens ledger feeds for accounts.

    Each feed owns its own dedup key and timer; the poller itself holds no
    per-subscription state, so concurrent subscribers never interact.
    """

    def __init__(
        self,
        store: Optional[LedgerStore] = None,
        config: Optional[FeedConfig] = None,
        clock: Optional[Clock] = None,
    ):
        """
        Initialize the poller.

        Args:
            store: Ledger read side (defaults to SqlLedgerStore)
            config: Feed configuration (defaults to loaded settings)
            clock: Time source for the polling timer
        """
        self.store = store or SqlLedgerStore()
        self.config = config or get_feed_config()
        self.clock = clock or SYSTEM_CLOCK

    async def open(self, account_id: UUID) -> LedgerFeed:
        """
        Verify the account and return a feed that has not polled yet.

        Raises:
            AccountNotFoundError: If the account does not exist
        """
        if not await self.store.account_exists(account_id):
            logger.info("feed.account_not_found", account_id=str(account_id))
            raise AccountNotFoundError(account_id)
        return LedgerFeed(account_id, self.store, self.config, self.clock)
