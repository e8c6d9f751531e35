"""Database models for the ledger service."""

from .account import Account
from .transaction import Transaction, TransactionType

__all__ = ["Account", "Transaction", "TransactionType"]
