"""Exception taxonomy for team balancing and rating updates."""

from __future__ import annotations


class TeamBalanceError(ValueError):
    """Base class for every recoverable engine failure."""


class InvalidTeamCountError(TeamBalanceError):
    """Requested team count is below one."""


class InfeasibleTeamCountError(TeamBalanceError):
    """Fewer participants than requested teams."""


class TooManyParticipantsError(TeamBalanceError):
    """Participant pool exceeds the configured search cap."""


class NoTeamsError(TeamBalanceError):
    """A match was submitted without any teams."""


class InvalidWinnerIndexError(TeamBalanceError):
    """A winning-team index does not refer to a team of the match."""


class NumericInstabilityError(TeamBalanceError):
    """A rating update produced a non-finite or degenerate intermediate value."""


class InvalidRatingError(TeamBalanceError):
    """A participant rating is negative or not finite."""


class ParticipantNotFoundError(TeamBalanceError):
    """No participant is registered under the given id."""


class MatchNotFoundError(TeamBalanceError):
    """No match is stored at the given history index."""


__all__ = [
    "InfeasibleTeamCountError",
    "InvalidRatingError",
    "InvalidTeamCountError",
    "InvalidWinnerIndexError",
    "MatchNotFoundError",
    "NoTeamsError",
    "NumericInstabilityError",
    "ParticipantNotFoundError",
    "TeamBalanceError",
    "TooManyParticipantsError",
]
