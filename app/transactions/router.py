"""
Ledger API routes.

Lists and records an account's entries, generates demo data, and exposes
the live ledger stream as Server-Sent Events.
"""

from typing import AsyncIterator, List
from uuid import UUID

import structlog
from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse

from app.transactions.feed import LedgerFeed
from app.transactions.models import CreateTransactionRequest, LedgerEntry
from app.transactions.service import TransactionService, get_transaction_service

logger = structlog.get_logger()

router = APIRouter(tags=["transactions"])


@router.get(
    "/api/accounts/{account_id}/transactions", response_model=List[LedgerEntry]
)
async def list_transactions(
    account_id: UUID,
    service: TransactionService = Depends(get_transaction_service),
):
    """All entries of the account, most recent first. 404 if it does not exist."""
    return await service.list_for_account(account_id)


@router.post(
    "/api/accounts/{account_id}/transactions",
    response_model=LedgerEntry,
    status_code=status.HTTP_201_CREATED,
)
async def create_transaction(
    account_id: UUID,
    request: CreateTransactionRequest,
    service: TransactionService = Depends(get_transaction_service),
):
    """Record a new income or expense entry."""
    return await service.create(
        account_id,
        type=request.type,
        amount=request.amount,
        currency_code=request.currency_code,
        description=request.description,
        occurred_at=request.occurred_at,
    )


@router.post(
    "/api/accounts/{account_id}/transactions/generate",
    response_model=List[LedgerEntry],
    status_code=status.HTTP_201_CREATED,
)
async def generate_transactions(
    account_id: UUID,
    count: int = Query(default=50, description="Number of entries to generate"),
    service: TransactionService = Depends(get_transaction_service),
):
    """Generate and store demo entries. ``count`` must be positive."""
    return await service.generate(account_id, count)


async def _event_stream(feed: LedgerFeed) -> AsyncIterator[str]:
    try:
        async for entry in feed:
            yield f"data: {entry.model_dump_json()}\n\n"
    finally:
        # Client disconnects surface here as cancellation or generator close
        await feed.aclose()


@router.get("/ledger-stream/{account_id}")
async def stream_ledger(
    account_id: UUID,
    service: TransactionService = Depends(get_transaction_service),
):
    """
    Live ledger feed for an account as ``text/event-stream``.

    The account is checked before the response starts, so an unknown
    account gets a plain 404 instead of an empty stream.
    """
    feed = await service.open_stream(account_id)
    logger.info("ledger_stream.opened", account_id=str(account_id))
    return StreamingResponse(
        _event_stream(feed),
        media_type="text/event-stream",
        headers={"Cache-Control": "no-cache", "X-Accel-Buffering": "no"},
    )
