"""Deterministic rating rebuild from baseline over the full match history."""

from __future__ import annotations

import logging
from collections.abc import MutableMapping, Sequence
from dataclasses import replace

from domain.common import MatchRecord, Participant
from domain.ratings.calculator import RatingCalculator

logger = logging.getLogger(__name__)


def chronological(matches: Sequence[MatchRecord]) -> list[MatchRecord]:
    """Stable sort by play time; matches with equal timestamps keep list order."""
    return sorted(matches, key=lambda match: match.played_at)


def replay_history(
    registry: MutableMapping[int, Participant],
    matches: Sequence[MatchRecord],
    calculator: RatingCalculator,
) -> int:
    """Reset every participant to baseline and re-apply all matches in time order.

    The replay runs against copies; the registry is only updated once every
    match has applied cleanly. Returns the number of matches applied.
    """
    scratch = {participant_id: replace(participant) for participant_id, participant in registry.items()}
    for participant in scratch.values():
        participant.reset()

    applied = 0
    for match in chronological(matches):
        calculator.apply_match(scratch, match.teams, match.winning_teams)
        applied += 1

    for participant_id, replayed in scratch.items():
        participant = registry[participant_id]
        participant.rating = replayed.rating
        participant.wins = replayed.wins
        participant.games = replayed.games

    logger.info("replayed matches=%d participants=%d", applied, len(registry))
    return applied


__all__ = ["chronological", "replay_history"]
