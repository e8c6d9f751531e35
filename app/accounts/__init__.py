"""Account management module."""

from app.accounts.service import AccountService

__all__ = ["AccountService"]
