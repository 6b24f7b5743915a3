"""Rating engine and history replay."""

from domain.ratings.calculator import MemberRatingEvent, RatingCalculator, RatingParameters
from domain.ratings.replay import chronological, replay_history

__all__ = [
    "MemberRatingEvent",
    "RatingCalculator",
    "RatingParameters",
    "chronological",
    "replay_history",
]
