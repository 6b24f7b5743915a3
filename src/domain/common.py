"""Shared types for team balancing and rating updates."""

from __future__ import annotations

import math
from collections.abc import Iterable, Sequence
from dataclasses import dataclass, field
from datetime import UTC, datetime

from domain.errors import InvalidWinnerIndexError


def utc_now() -> datetime:
    """Return the current time as a naive UTC datetime."""
    return datetime.now(UTC).replace(tzinfo=None)


@dataclass
class Participant:
    """One registered player and their mutable rating state.

    ``base_rating`` defaults to the initial ``rating``.
    """

    participant_id: int
    rating: float
    base_rating: float = field(default=math.nan)
    username: str = ""
    wins: int = 0
    games: int = 0

    def __post_init__(self) -> None:
        if math.isnan(self.base_rating):
            self.base_rating = self.rating

    @property
    def win_rate(self) -> float:
        return self.wins / self.games if self.games > 0 else 0.0

    def reset(self) -> None:
        """Restore the registration-time rating and clear match counters."""
        self.rating = self.base_rating
        self.wins = 0
        self.games = 0


@dataclass(frozen=True)
class Team:
    """A group of participants formed by one partition call.

    Members are live references, so ``total`` tracks rating changes made after
    the team was formed.
    """

    members: tuple[Participant, ...] = ()

    @property
    def total(self) -> float:
        return sum(member.rating for member in self.members)

    @property
    def participant_ids(self) -> tuple[int, ...]:
        return tuple(member.participant_id for member in self.members)

    def __len__(self) -> int:
        return len(self.members)


@dataclass(frozen=True)
class MatchRecord:
    """Snapshot of one played match: team rosters by id plus winning team indices."""

    played_at: datetime
    teams: tuple[tuple[int, ...], ...]
    winning_teams: tuple[int, ...] = field(default=())

    def __post_init__(self) -> None:
        object.__setattr__(self, "teams", tuple(tuple(team) for team in self.teams))
        object.__setattr__(self, "winning_teams", tuple(self.winning_teams))
        validate_winners(len(self.teams), self.winning_teams)

    @classmethod
    def from_teams(
        cls,
        teams: Iterable[Team],
        played_at: datetime | None = None,
        winning_teams: Sequence[int] = (),
    ) -> MatchRecord:
        return cls(
            played_at=played_at or utc_now(),
            teams=tuple(team.participant_ids for team in teams),
            winning_teams=tuple(winning_teams),
        )

    def is_winner(self, team_index: int) -> bool:
        return team_index in self.winning_teams


def validate_winners(team_count: int, winners: Iterable[int]) -> None:
    for winner in winners:
        if isinstance(winner, bool) or not isinstance(winner, int):
            raise InvalidWinnerIndexError(f"winning team index must be an integer, got {winner!r}")
        if winner < 0 or winner >= team_count:
            raise InvalidWinnerIndexError(
                f"winning team index {winner} is out of range for {team_count} teams"
            )


__all__ = ["MatchRecord", "Participant", "Team", "utc_now", "validate_winners"]
