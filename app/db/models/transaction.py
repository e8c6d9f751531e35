"""Ledger entry model for account income and expenses."""

import enum
from datetime import datetime, timezone
from decimal import Decimal
from typing import Optional
from uuid import UUID, uuid4

from sqlalchemy import (
    String,
    Text,
    DateTime,
    Numeric,
    Uuid,
    Enum,
    ForeignKey,
    Index,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class TransactionType(str, enum.Enum):
    """Business direction of a ledger entry."""

    INCOME = "income"
    EXPENSE = "expense"


class Transaction(Base):
    """
    Ledger entry tied to an account.

    Stores the owning account, the business type, amount and currency, an
    optional memo, and two timestamps: when the activity happened and when
    it was recorded.
    """

    __tablename__ = "account_transaction"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    account_id: Mapped[UUID] = mapped_column(
        Uuid,
        ForeignKey("account.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    type: Mapped[TransactionType] = mapped_column(
        Enum(
            TransactionType,
            name="transaction_type",
            values_callable=lambda e: [m.value for m in e],
        ),
        nullable=False,
    )

    amount: Mapped[Decimal] = mapped_column(
        Numeric(precision=19, scale=2),
        nullable=False,
        comment="Entry amount, always positive; type carries the direction",
    )
    currency_code: Mapped[str] = mapped_column(
        String(3), nullable=False, comment="Currency code (ISO 4217)"
    )
    description: Mapped[Optional[str]] = mapped_column(
        Text, nullable=True, comment="Free-text memo"
    )

    occurred_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        comment="When the activity happened",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
        comment="When the entry was recorded",
    )

    __table_args__ = (
        Index("idx_transaction_account_occurred", "account_id", "occurred_at"),
    )

    def __repr__(self) -> str:
        return (
            f"<Transaction(id={self.id}, account_id={self.account_id}, "
            f"type={self.type.value if self.type else None}, amount={self.amount}, "
            f"currency_code={self.currency_code})>"
        )
