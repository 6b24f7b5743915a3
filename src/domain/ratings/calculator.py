"""Multi-team pairwise Elo with weighted per-member distribution."""

from __future__ import annotations

import logging
import math
from collections.abc import Mapping, Sequence
from dataclasses import dataclass

from domain.common import Participant, validate_winners
from domain.errors import NoTeamsError, NumericInstabilityError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RatingParameters:
    k_factor: float = 4.0
    scale_factor: float = 400.0
    distribution_alpha: float = 0.6
    weight_floor: float = 1e-6
    min_rating: float = 0.0


@dataclass(frozen=True)
class MemberRatingEvent:
    participant_id: int
    team_index: int
    won: bool
    team_rating: float
    team_delta: float
    share: float
    pre_rating: float
    rating_delta: float
    post_rating: float


def calculate_expected_score(rating: float, opponent_rating: float, scale_factor: float) -> float:
    """Compute the Elo expected score for one side."""
    return 1.0 / (1.0 + 10.0 ** ((opponent_rating - rating) / scale_factor))


def pairwise_actual_scores(team_won: bool, opponent_won: bool) -> tuple[float, float]:
    """Score a pair of teams; two winners or two non-winners count as a draw."""
    if team_won and not opponent_won:
        return 1.0, 0.0
    if opponent_won and not team_won:
        return 0.0, 1.0
    return 0.5, 0.5


def compute_team_deltas(
    team_ratings: Sequence[float],
    winners: Sequence[int],
    params: RatingParameters,
) -> list[float]:
    """Sum the pairwise Elo deltas of every team against every other team.

    Each pair contributes ``d`` and ``-d``, so the result sums to zero.
    """
    winner_set = set(winners)
    deltas = [0.0] * len(team_ratings)
    for i in range(len(team_ratings)):
        for j in range(i + 1, len(team_ratings)):
            expected_i = calculate_expected_score(
                rating=team_ratings[i],
                opponent_rating=team_ratings[j],
                scale_factor=params.scale_factor,
            )
            actual_i, _ = pairwise_actual_scores(i in winner_set, j in winner_set)
            delta_i = params.k_factor * (actual_i - expected_i)
            deltas[i] += delta_i
            deltas[j] -= delta_i
    return deltas


def distribution_weights(
    ratings: Sequence[float],
    gaining: bool,
    params: RatingParameters,
) -> list[float]:
    """Per-member weights: weaker members take more of a gain, stronger more of a loss."""
    exponent = -params.distribution_alpha if gaining else params.distribution_alpha
    return [max(rating, params.weight_floor) ** exponent for rating in ratings]


def _require_finite(value: float, label: str) -> float:
    if not math.isfinite(value):
        raise NumericInstabilityError(f"{label} is not finite ({value!r})")
    return value


class RatingCalculator:
    """Applies finished matches to a participant registry."""

    def __init__(self, params: RatingParameters | None = None) -> None:
        self.params = params or RatingParameters()

    def apply_match(
        self,
        registry: Mapping[int, Participant],
        teams: Sequence[Sequence[int]],
        winners: Sequence[int],
    ) -> list[MemberRatingEvent]:
        """Update ratings and win/game counters for one match.

        Every new rating is staged and checked before anything is written, so a
        ``NumericInstabilityError`` leaves the registry exactly as it was.
        Ids missing from the registry are skipped, and a team with no registered
        members left is dropped from the pairwise comparison.
        """
        if not teams:
            raise NoTeamsError("a match needs at least one team")
        validate_winners(len(teams), winners)

        rosters = [
            [registry[participant_id] for participant_id in team if participant_id in registry]
            for team in teams
        ]

        try:
            staged = self._stage(rosters, winners)
        except (OverflowError, ZeroDivisionError) as exc:
            raise NumericInstabilityError(f"rating update overflowed: {exc}") from exc

        winner_set = set(winners)
        for event in staged:
            participant = registry[event.participant_id]
            participant.rating = event.post_rating
        for team_index, roster in enumerate(rosters):
            for participant in roster:
                participant.games += 1
                if team_index in winner_set:
                    participant.wins += 1

        logger.debug(
            "applied match teams=%d winners=%s members=%d",
            len(teams),
            sorted(winner_set),
            len(staged),
        )
        return staged

    def _stage(
        self,
        rosters: Sequence[Sequence[Participant]],
        winners: Sequence[int],
    ) -> list[MemberRatingEvent]:
        params = self.params
        winner_set = set(winners)
        # Teams left with no registered members take no part in the update.
        active = [index for index, roster in enumerate(rosters) if roster]
        active_winners = [position for position, index in enumerate(active) if index in winner_set]

        team_ratings = [
            _require_finite(sum(member.rating for member in rosters[index]), f"team {index} rating")
            for index in active
        ]
        team_deltas = [
            _require_finite(delta, f"team {index} delta")
            for index, delta in zip(active, compute_team_deltas(team_ratings, active_winners, params))
        ]

        staged_ratings: dict[int, float] = {}
        events: list[MemberRatingEvent] = []

        for team_index, team_rating, team_delta in zip(active, team_ratings, team_deltas):
            roster = rosters[team_index]

            if team_delta == 0.0:
                shares = [0.0] * len(roster)
            elif team_rating <= 0.0:
                shares = [1.0 / len(roster)] * len(roster)
            else:
                weights = distribution_weights(
                    [member.rating for member in roster],
                    gaining=team_delta > 0.0,
                    params=params,
                )
                for weight in weights:
                    _require_finite(weight, f"team {team_index} member weight")
                weight_sum = sum(weights)
                if not weight_sum > 0.0 or not math.isfinite(weight_sum):
                    raise NumericInstabilityError(
                        f"team {team_index} weight sum is degenerate ({weight_sum!r})"
                    )
                shares = [weight / weight_sum for weight in weights]

            for member, share in zip(roster, shares):
                pre_rating = staged_ratings.get(member.participant_id, member.rating)
                raw_rating = _require_finite(
                    pre_rating + team_delta * share,
                    f"participant {member.participant_id} rating",
                )
                post_rating = max(params.min_rating, raw_rating)
                staged_ratings[member.participant_id] = post_rating
                events.append(
                    MemberRatingEvent(
                        participant_id=member.participant_id,
                        team_index=team_index,
                        won=team_index in winner_set,
                        team_rating=team_rating,
                        team_delta=team_delta,
                        share=share,
                        pre_rating=pre_rating,
                        rating_delta=post_rating - pre_rating,
                        post_rating=post_rating,
                    )
                )

        return events


__all__ = [
    "MemberRatingEvent",
    "RatingCalculator",
    "RatingParameters",
    "calculate_expected_score",
    "compute_team_deltas",
    "distribution_weights",
    "pairwise_actual_scores",
]
