"""Schema bootstrap for league tables."""

from __future__ import annotations

from sqlalchemy.engine import Engine

from models import Base, MatchRow, ParticipantRow


def ensure_league_schema(engine: Engine) -> None:
    """Create the participants and matches tables if they do not exist."""
    Base.metadata.create_all(bind=engine, tables=[ParticipantRow.__table__, MatchRow.__table__])
