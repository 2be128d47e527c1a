from datetime import datetime

from sqlalchemy import Boolean, DateTime, Index, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.models.base import Base


class CandidateToken(Base):
    """Graduated token discovered by intake, waiting for a risk score."""

    __tablename__ = "recent_tokens"

    id: Mapped[int] = mapped_column(primary_key=True)
    token_address: Mapped[str] = mapped_column(String(64), unique=True)
    creation_time: Mapped[datetime] = mapped_column(DateTime)
    is_processed: Mapped[bool] = mapped_column(Boolean, default=False)
    discovered_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("idx_recent_tokens_due", "is_processed", "creation_time"),
    )


class ScoredToken(Base):
    """One row per scoring event. Append-only; latest row wins on read."""

    __tablename__ = "checked_tokens"

    id: Mapped[int] = mapped_column(primary_key=True)
    token_address: Mapped[str] = mapped_column(String(64))
    score: Mapped[int] = mapped_column(Integer)
    checked_at: Mapped[datetime] = mapped_column(DateTime, server_default=func.now())

    __table_args__ = (
        Index("idx_checked_tokens_address", "token_address"),
    )
