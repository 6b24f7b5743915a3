"""ORM models."""

from models.base import Base
from models.match import MatchRow
from models.participant import ParticipantRow

__all__ = ["Base", "MatchRow", "ParticipantRow"]
