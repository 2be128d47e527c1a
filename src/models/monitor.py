from datetime import datetime
from decimal import Decimal

from sqlalchemy import Boolean, DateTime, Index, Integer, Numeric, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base


class TokenMonitor(Base):
    """Operator-controlled monitoring flag for a token."""

    __tablename__ = "token_monitors"

    id: Mapped[int] = mapped_column(primary_key=True)
    token_address: Mapped[str] = mapped_column(String(64), unique=True)
    is_monitoring: Mapped[bool] = mapped_column(Boolean, default=False)
    created_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    updated_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())
    last_checked_at: Mapped[datetime | None] = mapped_column(DateTime)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "tokenAddress": self.token_address,
            "isMonitoring": self.is_monitoring,
            "createdAt": self.created_at.isoformat() if self.created_at else None,
            "updatedAt": self.updated_at.isoformat() if self.updated_at else None,
            "lastCheckedAt": (
                self.last_checked_at.isoformat() if self.last_checked_at else None
            ),
        }


class TokenSwap(Base):
    """Swap observed for a monitored token."""

    __tablename__ = "token_swaps"

    id: Mapped[int] = mapped_column(primary_key=True)
    transaction_hash: Mapped[str] = mapped_column(String(128), unique=True)
    token_address: Mapped[str] = mapped_column(String(64))
    transaction_type: Mapped[str] = mapped_column(String(4))  # BUY / SELL
    block_timestamp: Mapped[datetime] = mapped_column(DateTime)
    block_number: Mapped[int | None] = mapped_column(Integer)
    wallet_address: Mapped[str | None] = mapped_column(String(64))
    pair_address: Mapped[str | None] = mapped_column(String(64))
    exchange_name: Mapped[str | None] = mapped_column(String(100))
    base_token: Mapped[str | None] = mapped_column(String(64))
    quote_token: Mapped[str | None] = mapped_column(String(64))
    base_amount: Mapped[Decimal | None] = mapped_column(Numeric)
    base_amount_usd: Mapped[Decimal | None] = mapped_column(Numeric)
    quote_amount: Mapped[Decimal | None] = mapped_column(Numeric)
    quote_amount_usd: Mapped[Decimal | None] = mapped_column(Numeric)

    __table_args__ = (
        Index("idx_token_swaps_token_time", "token_address", "block_timestamp"),
    )
