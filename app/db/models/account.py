"""Account model: a wallet, card or savings goal that owns ledger entries."""

from datetime import datetime, timezone
from decimal import Decimal
from uuid import UUID, uuid4

from sqlalchemy import String, DateTime, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.db.base import Base


class Account(Base):
    """
    Budgeting account.

    Tracks the display name, home currency, a balance snapshot and the
    creation time. Ledger entries reference ``account_id``.
    """

    __tablename__ = "account"

    id: Mapped[UUID] = mapped_column(Uuid, primary_key=True, default=uuid4)

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    currency_code: Mapped[str] = mapped_column(
        String(3), nullable=False, comment="Currency code (ISO 4217)"
    )
    balance: Mapped[Decimal] = mapped_column(
        Numeric(precision=19, scale=2),
        nullable=False,
        default=Decimal("0.00"),
        comment="Balance snapshot",
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        nullable=False,
        default=lambda: datetime.now(timezone.utc),
    )

    def __repr__(self) -> str:
        return (
            f"<Account(id={self.id}, name={self.name}, "
            f"currency_code={self.currency_code}, balance={self.balance})>"
        )
