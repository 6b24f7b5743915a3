"""participants table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import BigInteger, CheckConstraint, DateTime, Float, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class ParticipantRow(Base):
    """Registered participant with current and baseline rating."""

    __tablename__ = "participants"
    __table_args__ = (
        CheckConstraint("rating >= 0.0", name="ck_participants_rating"),
        CheckConstraint("base_rating >= 0.0", name="ck_participants_base_rating"),
        CheckConstraint("wins >= 0 AND games >= 0", name="ck_participants_counters"),
    )

    id: Mapped[int] = mapped_column(BigInteger, primary_key=True, autoincrement=False)
    username: Mapped[str] = mapped_column(String(128), nullable=False, default="")
    rating: Mapped[float] = mapped_column(Float, nullable=False)
    base_rating: Mapped[float] = mapped_column(Float, nullable=False)
    wins: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    games: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=False),
        nullable=False,
        server_default=func.now(),
    )
