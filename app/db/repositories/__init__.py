"""Repository exports."""

from .account_repository import AccountRepository
from .transaction_repository import TransactionRepository

__all__ = [
    "AccountRepository",
    "TransactionRepository",
]
