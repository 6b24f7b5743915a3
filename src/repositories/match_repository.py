"""Persistence helpers for the match history."""

from __future__ import annotations

from collections.abc import Sequence
from datetime import datetime

from sqlalchemy import delete, insert, select
from sqlalchemy.orm import Session

from domain.common import MatchRecord
from models import MatchRow


def fetch_match_records(session: Session) -> list[MatchRecord]:
    """Fetch matches in stored history order."""
    rows = session.execute(select(MatchRow).order_by(MatchRow.position)).scalars().all()

    records: list[MatchRecord] = []
    for row in rows:
        if not isinstance(row.played_at, datetime):
            raise ValueError(f"match id={row.id} has invalid played_at={row.played_at!r}")
        records.append(
            MatchRecord(
                played_at=row.played_at,
                teams=tuple(tuple(int(member) for member in team) for team in row.teams_json),
                winning_teams=tuple(int(index) for index in row.winning_teams_json or ()),
            )
        )
    return records


def replace_match_records(session: Session, records: Sequence[MatchRecord]) -> int:
    """Overwrite the stored history, keeping list order as ``position``."""
    payload = [
        {
            "position": position,
            "played_at": record.played_at,
            "teams_json": [list(team) for team in record.teams],
            "winning_teams_json": list(record.winning_teams),
        }
        for position, record in enumerate(records)
    ]
    session.execute(delete(MatchRow))
    if payload:
        session.execute(insert(MatchRow), payload)
    return len(payload)
