"""
Account ledger module.

Stores and lists ledger entries and turns an account's ledger into a
polled, deduplicated live feed.
"""

from app.transactions.feed import LedgerFeed, LedgerFeedPoller, SqlLedgerStore
from app.transactions.models import LedgerEntry
from app.transactions.service import TransactionService

__all__ = [
    "LedgerEntry",
    "LedgerFeed",
    "LedgerFeedPoller",
    "SqlLedgerStore",
    "TransactionService",
]
