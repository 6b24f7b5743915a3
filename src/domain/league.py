"""Participant registry and match history with replay-on-edit semantics."""

from __future__ import annotations

import logging
import math
from collections.abc import Iterable, Sequence
from dataclasses import replace
from datetime import datetime

from domain.balancing.partitioner import PartitionParameters, partition
from domain.common import MatchRecord, Participant, Team, validate_winners
from domain.errors import (
    InvalidRatingError,
    MatchNotFoundError,
    NoTeamsError,
    ParticipantNotFoundError,
    TooManyParticipantsError,
)
from domain.ratings.calculator import RatingCalculator
from domain.ratings.replay import replay_history

logger = logging.getLogger(__name__)


class League:
    """In-memory registry of participants and their match history.

    Not synchronized: callers must serialize mutations of one instance.
    """

    def __init__(
        self,
        participants: Iterable[Participant] | None = None,
        matches: Iterable[MatchRecord] | None = None,
        *,
        calculator: RatingCalculator | None = None,
        partition_params: PartitionParameters | None = None,
    ) -> None:
        self.calculator = calculator or RatingCalculator()
        self.partition_params = partition_params or PartitionParameters()
        self.participants: dict[int, Participant] = {
            participant.participant_id: participant for participant in participants or ()
        }
        self.matches: list[MatchRecord] = list(matches or ())

    def find_participant(self, participant_id: int) -> Participant | None:
        return self.participants.get(participant_id)

    def get_participant(self, participant_id: int) -> Participant:
        participant = self.participants.get(participant_id)
        if participant is None:
            raise ParticipantNotFoundError(f"participant {participant_id} is not registered")
        return participant

    def upsert_participant(self, participant_id: int, username: str, rating: float) -> Participant:
        """Register a participant, or re-register one with a new baseline rating."""
        rating = float(rating)
        if not math.isfinite(rating) or rating < 0.0:
            raise InvalidRatingError(f"rating must be a finite value >= 0, got {rating!r}")

        participant = self.participants.get(participant_id)
        if participant is None:
            participant = Participant(participant_id=participant_id, rating=rating, username=username)
            self.participants[participant_id] = participant
        else:
            participant.username = username
            participant.rating = rating
            participant.base_rating = rating
        return participant

    def remove_participant(self, participant_id: int) -> Participant:
        participant = self.participants.pop(participant_id, None)
        if participant is None:
            raise ParticipantNotFoundError(f"participant {participant_id} is not registered")
        return participant

    def list_participants(self, *, sort_by_rating: bool = True) -> list[Participant]:
        if sort_by_rating:
            return sorted(self.participants.values(), key=lambda participant: participant.rating, reverse=True)
        return sorted(self.participants.values(), key=lambda participant: participant.username)

    def form_teams(
        self,
        participant_ids: Sequence[int],
        num_teams: int,
        seed: int | None = None,
    ) -> list[Team]:
        """Balance the given registered participants into ``num_teams`` teams."""
        pool = [self.get_participant(participant_id) for participant_id in dict.fromkeys(participant_ids)]
        cap = self.partition_params.max_participants
        if cap > 0 and len(pool) > cap:
            raise TooManyParticipantsError(
                f"{len(pool)} participants exceed the search cap of {cap}"
            )
        return partition(pool, num_teams, seed, params=self.partition_params)

    def add_match(self, teams: Sequence[Team], played_at: datetime | None = None) -> int:
        """Store a match with no winners yet and return its history index."""
        if not teams:
            raise NoTeamsError("a match needs at least one team")
        self.matches.append(MatchRecord.from_teams(teams, played_at))
        return len(self.matches) - 1

    def match_by_index(self, index: int) -> MatchRecord | None:
        if index < 0 or index >= len(self.matches):
            return None
        return self.matches[index]

    def _require_match(self, index: int) -> MatchRecord:
        match = self.match_by_index(index)
        if match is None:
            raise MatchNotFoundError(f"match index {index} is out of range ({len(self.matches)} stored)")
        return match

    def set_match_winner(self, index: int, winners: Sequence[int]) -> None:
        """Replace a match's winners and rebuild every rating from baseline."""
        previous = self._require_match(index)
        validate_winners(len(previous.teams), winners)

        self.matches[index] = replace(previous, winning_teams=tuple(winners))
        try:
            self.recompute_ratings()
        except Exception:
            self.matches[index] = previous
            raise
        logger.info("match %d winners set to %s", index, list(winners))

    def delete_match(self, index: int) -> MatchRecord:
        removed = self._require_match(index)
        del self.matches[index]
        try:
            self.recompute_ratings()
        except Exception:
            self.matches.insert(index, removed)
            raise
        logger.info("match %d deleted", index)
        return removed

    def recent_matches(self, count: int) -> list[tuple[int, MatchRecord]]:
        """Return up to ``count`` ``(index, match)`` pairs, newest first."""
        if count <= 0:
            return []
        indexed = list(enumerate(self.matches))
        return indexed[::-1][:count]

    def match_teams(self, match: MatchRecord) -> list[Team]:
        """Resolve a match snapshot to live teams, skipping removed participants."""
        return [
            Team(
                members=tuple(
                    self.participants[participant_id]
                    for participant_id in team
                    if participant_id in self.participants
                )
            )
            for team in match.teams
        ]

    def recompute_ratings(self) -> int:
        return replay_history(self.participants, self.matches, self.calculator)


__all__ = ["League"]
