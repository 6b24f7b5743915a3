"""Tests for rebuilding ratings from the match history."""

from __future__ import annotations

from datetime import datetime, timedelta

import pytest

from domain.common import MatchRecord, Participant
from domain.errors import NumericInstabilityError
from domain.ratings.calculator import RatingCalculator, RatingParameters
from domain.ratings.replay import chronological, replay_history

T0 = datetime(2026, 1, 1, 12, 0, 0)


def _registry() -> dict[int, Participant]:
    return {
        1: Participant(participant_id=1, rating=100.0),
        2: Participant(participant_id=2, rating=80.0),
        3: Participant(participant_id=3, rating=60.0),
        4: Participant(participant_id=4, rating=40.0),
    }


def _history() -> list[MatchRecord]:
    return [
        MatchRecord(played_at=T0, teams=((1, 4), (2, 3)), winning_teams=(1,)),
        MatchRecord(played_at=T0 + timedelta(hours=1), teams=((1, 3), (2, 4)), winning_teams=(0,)),
        MatchRecord(played_at=T0 + timedelta(hours=2), teams=((1,), (2,), (3, 4)), winning_teams=(2,)),
    ]


def _ratings(registry: dict[int, Participant]) -> dict[int, tuple[float, int, int]]:
    return {pid: (p.rating, p.wins, p.games) for pid, p in registry.items()}


def test_replay_is_idempotent() -> None:
    registry = _registry()
    calculator = RatingCalculator()

    replay_history(registry, _history(), calculator)
    first = _ratings(registry)
    replay_history(registry, _history(), calculator)

    assert _ratings(registry) == first


def test_replay_matches_sequential_application() -> None:
    replayed = _registry()
    applied = _registry()
    calculator = RatingCalculator()

    count = replay_history(replayed, _history(), calculator)
    for match in _history():
        calculator.apply_match(applied, match.teams, match.winning_teams)

    assert count == 3
    assert _ratings(replayed) == _ratings(applied)


def test_replay_starts_from_base_rating() -> None:
    registry = _registry()
    registry[1].rating = 5000.0
    registry[1].wins = 40
    registry[1].games = 50

    replay_history(registry, [], RatingCalculator())

    assert registry[1].rating == pytest.approx(100.0)
    assert (registry[1].wins, registry[1].games) == (0, 0)


def test_replay_orders_matches_by_time() -> None:
    history = _history()
    in_order = _registry()
    reversed_order = _registry()
    calculator = RatingCalculator()

    replay_history(in_order, history, calculator)
    replay_history(reversed_order, history[::-1], calculator)

    assert _ratings(in_order) == _ratings(reversed_order)


def test_chronological_sort_is_stable_for_equal_timestamps() -> None:
    first = MatchRecord(played_at=T0, teams=((1,), (2,)), winning_teams=(0,))
    second = MatchRecord(played_at=T0, teams=((1,), (2,)), winning_teams=(1,))
    earlier = MatchRecord(played_at=T0 - timedelta(days=1), teams=((3,), (4,)))

    assert chronological([first, second, earlier]) == [earlier, first, second]


def test_failed_replay_leaves_registry_untouched() -> None:
    registry = _registry()
    calculator = RatingCalculator()
    replay_history(registry, _history()[:1], calculator)
    before = _ratings(registry)

    unstable = RatingCalculator(RatingParameters(distribution_alpha=500.0))
    with pytest.raises(NumericInstabilityError):
        replay_history(registry, _history(), unstable)

    assert _ratings(registry) == before


def test_base_rating_defaults_to_initial_rating() -> None:
    participant = Participant(participant_id=7, rating=12.5)
    participant.rating = 40.0
    participant.wins = 2
    participant.games = 3

    participant.reset()

    assert isinstance(participant.base_rating, float)
    assert participant.base_rating == 12.5
    assert (participant.rating, participant.wins, participant.games) == (12.5, 0, 0)
    assert Participant(participant_id=8, rating=5.0, base_rating=9.0).base_rating == 9.0
