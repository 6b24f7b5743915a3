"""matches table model."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import JSON, DateTime, Index, Integer
from sqlalchemy.orm import Mapped, mapped_column

from models.base import Base


class MatchRow(Base):
    """One stored match: rosters by participant id and winning team indices."""

    __tablename__ = "matches"
    __table_args__ = (
        Index("idx_matches_played_at", "played_at", "position"),
    )

    id: Mapped[int] = mapped_column(primary_key=True, autoincrement=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, unique=True)
    played_at: Mapped[datetime] = mapped_column(DateTime(timezone=False), nullable=False)
    teams_json: Mapped[list[list[int]]] = mapped_column(JSON, nullable=False)
    winning_teams_json: Mapped[list[int]] = mapped_column(JSON, nullable=False, default=list)
