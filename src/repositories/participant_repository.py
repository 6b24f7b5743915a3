"""Persistence helpers for the participant registry."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import delete, func, select
from sqlalchemy.orm import Session

from domain.common import Participant, utc_now
from models import ParticipantRow


def fetch_participants(session: Session) -> list[Participant]:
    """Fetch every registered participant ordered by id."""
    rows = session.execute(select(ParticipantRow).order_by(ParticipantRow.id)).scalars().all()
    return [
        Participant(
            participant_id=int(row.id),
            username=row.username,
            rating=float(row.rating),
            base_rating=float(row.base_rating),
            wins=int(row.wins),
            games=int(row.games),
        )
        for row in rows
    ]


def replace_participants(session: Session, participants: Iterable[Participant]) -> int:
    """Make the stored registry match ``participants``.

    Rows for removed participants are deleted, changed rows are updated in place
    (keeping ``created_at`` and bumping ``updated_at``) and new rows are added.
    """
    participants = list(participants)
    keep_ids = [participant.participant_id for participant in participants]
    session.execute(
        delete(ParticipantRow).where(ParticipantRow.id.not_in(keep_ids)),
        execution_options={"synchronize_session": "fetch"},
    )

    existing = {
        row.id: row
        for row in session.execute(
            select(ParticipantRow).where(ParticipantRow.id.in_(keep_ids))
        ).scalars()
    }
    now = utc_now()
    for participant in participants:
        values = {
            "username": participant.username,
            "rating": participant.rating,
            "base_rating": participant.base_rating,
            "wins": participant.wins,
            "games": participant.games,
        }
        row = existing.get(participant.participant_id)
        if row is None:
            session.add(ParticipantRow(id=participant.participant_id, **values))
            continue
        if any(getattr(row, key) != value for key, value in values.items()):
            for key, value in values.items():
                setattr(row, key, value)
            row.updated_at = now
    session.flush()
    return len(participants)


def count_participants(session: Session) -> int:
    result = session.scalar(select(func.count(ParticipantRow.id)))
    return int(result or 0)
