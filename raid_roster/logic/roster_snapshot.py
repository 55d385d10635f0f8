# raid_roster/logic/roster_snapshot.py
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List, Tuple

from sqlalchemy.orm import Session

from .. import models
from .auto_fill import (
    AutoFillResult,
    Candidate,
    CharacterSummary,
    ExistingAssignment,
    NewAssignment,
    compute_auto_fill,
)
from .roster_roles import SlotConfig, capacity_resolver, is_generic_config, open_seats, role_catalog


@dataclass(frozen=True)
class EventBoard:
    """Signups (signup order) and their seats for one event."""

    signups: List[models.Signup]
    assignments: Dict[int, models.RosterAssignment]  # keyed by signup_id

    def pool(self) -> List[models.Signup]:
        return [s for s in self.signups if s.id not in self.assignments]

    def seated(self) -> List[models.Signup]:
        return [s for s in self.signups if s.id in self.assignments]


def slot_counts(event: models.Event) -> Dict[str, int]:
    if event.slot_config is None:
        return SlotConfig.default().counts()
    return SlotConfig(**event.slot_config).counts()


def load_board(db: Session, event_id: int) -> EventBoard:
    signups = (
        db.query(models.Signup)
        .filter(models.Signup.event_id == event_id)
        .order_by(models.Signup.signed_up_at.asc(), models.Signup.id.asc())
        .all()
    )
    rows = (
        db.query(models.RosterAssignment)
        .filter(models.RosterAssignment.event_id == event_id)
        .all()
    )
    return EventBoard(signups=signups, assignments={r.signup_id: r for r in rows})


def to_candidate(signup: models.Signup) -> Candidate:
    character = None
    if signup.character is not None:
        character = CharacterSummary(
            id=signup.character.id,
            name=signup.character.name,
            role=signup.character.role,
        )
    return Candidate(
        signup_id=signup.id,
        character=character,
        preferred_roles=tuple(signup.preferred_roles) if signup.preferred_roles else None,
        signup_status=signup.status,
    )


def to_existing(row: models.RosterAssignment) -> ExistingAssignment:
    return ExistingAssignment(
        signup_id=row.signup_id,
        slot=row.role,
        position=row.position,
        is_override=bool(row.is_override),
    )


def occupancy(rows: List[models.RosterAssignment]) -> Dict[str, int]:
    out: Dict[str, int] = {}
    for r in rows:
        out[r.role] = out.get(r.role, 0) + 1
    return out


def auto_fill_event(db: Session, event: models.Event) -> Tuple[AutoFillResult, int]:
    """
    Snapshot the event and run the auto-fill engine over it.
    Returns (engine result, free catalog seats before the run). Nothing is written.
    """
    board = load_board(db, event.id)
    counts = slot_counts(event)
    catalog = role_catalog(counts)
    capacity_of = capacity_resolver(counts)
    existing_rows = list(board.assignments.values())

    result = compute_auto_fill(
        pool=[to_candidate(s) for s in board.pool()],
        existing_assignments=[to_existing(r) for r in existing_rows],
        role_slots=catalog,
        capacity_of=capacity_of,
        is_generic=is_generic_config(counts),
    )
    return result, open_seats(catalog, capacity_of, occupancy(existing_rows))


def stage_assignments(db: Session, event_id: int, assignments: List[NewAssignment]) -> None:
    """Add engine output to the session; the caller commits."""
    for a in assignments:
        db.add(
            models.RosterAssignment(
                event_id=event_id,
                signup_id=a.signup_id,
                role=a.slot,
                position=a.position,
                is_override=a.is_override,
            )
        )
