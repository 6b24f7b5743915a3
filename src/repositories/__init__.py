"""Database repository helpers."""

from repositories.match_repository import fetch_match_records, replace_match_records
from repositories.participant_repository import (
    count_participants,
    fetch_participants,
    replace_participants,
)
from repositories.schema import ensure_league_schema

__all__ = [
    "count_participants",
    "ensure_league_schema",
    "fetch_match_records",
    "fetch_participants",
    "replace_match_records",
    "replace_participants",
]
