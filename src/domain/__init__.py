"""Team balancing and rating domain modules."""

from domain.common import MatchRecord, Participant, Team
from domain.errors import TeamBalanceError

__all__ = ["MatchRecord", "Participant", "Team", "TeamBalanceError"]
