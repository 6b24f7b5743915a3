"""Load, replay and persist the league state."""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from dataclasses import dataclass

from sqlalchemy.orm import Session, sessionmaker

from domain.balancing.partitioner import PartitionParameters
from domain.league import League
from domain.ratings.calculator import RatingCalculator
from repositories import (
    fetch_match_records,
    fetch_participants,
    replace_match_records,
    replace_participants,
)


@dataclass(frozen=True)
class RebuildSummary:
    """Outcome of one full rating rebuild."""

    processed_matches: int
    tracked_participants: int
    dry_run: bool


def load_league(
    session: Session,
    *,
    calculator: RatingCalculator | None = None,
    partition_params: PartitionParameters | None = None,
) -> League:
    """Build an in-memory league from the stored registry and history."""
    return League(
        fetch_participants(session),
        fetch_match_records(session),
        calculator=calculator,
        partition_params=partition_params,
    )


def save_league(session: Session, league: League) -> None:
    """Write the registry and history back; the caller owns the transaction."""
    replace_participants(session, league.participants.values())
    replace_match_records(session, league.matches)


@contextmanager
def league_session(
    session_factory: sessionmaker[Session],
    *,
    calculator: RatingCalculator | None = None,
    partition_params: PartitionParameters | None = None,
    persist: bool = True,
) -> Iterator[League]:
    """Yield a loaded league and save it on clean exit, rolling back otherwise."""
    with session_factory() as session:
        league = load_league(session, calculator=calculator, partition_params=partition_params)
        try:
            yield league
            if persist:
                save_league(session, league)
                session.commit()
        except Exception:
            session.rollback()
            raise


def rebuild_ratings(
    *,
    session_factory: sessionmaker[Session],
    calculator: RatingCalculator,
    dry_run: bool = False,
    echo: Callable[[str], None] | None = None,
) -> RebuildSummary:
    """Replay the whole stored history from baseline ratings."""
    with league_session(session_factory, calculator=calculator, persist=not dry_run) as league:
        processed = league.recompute_ratings()
        tracked = len(league.participants)

    if echo is not None:
        prefix = "[dry-run] " if dry_run else "completed "
        echo(f"{prefix}processed_matches={processed} tracked_participants={tracked}")

    return RebuildSummary(
        processed_matches=processed,
        tracked_participants=tracked,
        dry_run=dry_run,
    )


__all__ = [
    "RebuildSummary",
    "league_session",
    "load_league",
    "rebuild_ratings",
    "save_league",
]
