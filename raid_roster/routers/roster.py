# raid_roster/routers/roster.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Path, Query, Request
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from ..logic.roster_roles import board_roles, capacity_resolver, is_generic_config
from ..logic.roster_snapshot import auto_fill_event, load_board, slot_counts, stage_assignments
from ..utils.idempotency import with_idempotency
from .events import get_event_or_404

router = APIRouter(prefix="/events/{event_id}/roster", tags=["roster"])

logger = logging.getLogger("raid_roster.roster")


def _entry(signup: models.Signup, row: models.RosterAssignment | None) -> schemas.RosterEntryOut:
    character = None
    if signup.character is not None:
        character = schemas.CharacterOut.model_validate(signup.character)
    return schemas.RosterEntryOut(
        signup_id=signup.id,
        username=signup.username,
        character=character,
        preferred_roles=signup.preferred_roles,
        signup_status=signup.status,
        slot=row.role if row else None,
        position=row.position if row else 0,
        is_override=bool(row.is_override) if row else False,
    )


def _commit_or_conflict(db: Session, detail: str) -> None:
    try:
        db.commit()
    except IntegrityError:
        # Someone else took the seat (or seated the signup) since our snapshot
        db.rollback()
        raise HTTPException(status_code=409, detail=detail)


@router.get("", response_model=schemas.RosterOut)
def read_roster(event_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    """
    Roster board for an event:
      - pool: signups without a seat, in signup order
      - assignments: seated signups, ordered by role (board order) then position
    """
    event = get_event_or_404(db, event_id)
    counts = slot_counts(event)
    roles = board_roles(counts)
    capacity_of = capacity_resolver(counts)
    board = load_board(db, event.id)

    rank = {r.role: i for i, r in enumerate(roles)}
    seated = sorted(
        board.seated(),
        key=lambda s: (
            rank.get(board.assignments[s.id].role, len(rank)),
            board.assignments[s.id].position,
        ),
    )
    return schemas.RosterOut(
        event_id=event.id,
        generic=is_generic_config(counts),
        slots=counts,
        roles=[schemas.RoleSlotOut(role=r.role, label=r.label, count=capacity_of(r.role)) for r in roles],
        pool=[_entry(s, None) for s in board.pool()],
        assignments=[_entry(s, board.assignments[s.id]) for s in seated],
    )


@router.post("/assign", response_model=schemas.AssignmentOut)
def assign_seat(
    body: schemas.ManualAssignBody,
    event_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
):
    """Seat one signup by hand. The seat must be on the board, in range and free."""
    event = get_event_or_404(db, event_id)
    counts = slot_counts(event)
    role = body.slot.value

    if role not in {r.role for r in board_roles(counts)}:
        raise HTTPException(status_code=400, detail=f"Role '{role}' is not on this event's roster")
    capacity = capacity_resolver(counts)(role)
    if body.position > capacity:
        raise HTTPException(
            status_code=400,
            detail={"position_out_of_range": True, "role": role, "capacity": capacity, "got": body.position},
        )

    signup = db.get(models.Signup, body.signup_id)
    if not signup or signup.event_id != event.id:
        raise HTTPException(status_code=404, detail="Signup not found for this event")

    board = load_board(db, event.id)
    if signup.id in board.assignments:
        raise HTTPException(status_code=409, detail="Signup is already seated")
    if any(a.role == role and a.position == body.position for a in board.assignments.values()):
        raise HTTPException(status_code=409, detail="Seat is already taken")

    row = models.RosterAssignment(
        event_id=event.id,
        signup_id=signup.id,
        role=role,
        position=body.position,
        is_override=signup.character is not None and signup.character.role != role,
    )
    db.add(row)
    _commit_or_conflict(db, "Seat was taken concurrently; reload the roster")
    db.refresh(row)

    logger.info("manual seat event=%s signup=%s role=%s position=%s", event.id, signup.id, role, row.position)
    return schemas.AssignmentOut(
        signup_id=row.signup_id, slot=row.role, position=row.position, is_override=row.is_override
    )


@router.delete("/{signup_id}")
def unseat(
    event_id: int = Path(..., ge=1),
    signup_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
):
    event = get_event_or_404(db, event_id)
    row = (
        db.query(models.RosterAssignment)
        .filter(
            models.RosterAssignment.event_id == event.id,
            models.RosterAssignment.signup_id == signup_id,
        )
        .first()
    )
    if not row:
        raise HTTPException(status_code=404, detail="Signup is not seated")

    db.delete(row)
    db.commit()
    logger.info("unseat event=%s signup=%s", event.id, signup_id)
    return {"ok": True, "event_id": event.id, "signup_id": signup_id}


@router.post("/auto-fill", response_model=schemas.AutoFillOut)
@with_idempotency("auto_fill_v1")
def auto_fill(
    request: Request,
    event_id: int = Path(..., ge=1),
    dry_run: bool = Query(False, description="Compute seats without saving them"),
    db: Session = Depends(get_db),
):
    """
    Seat every unseated signup the engine can place.
    Existing seats are never moved. Use dry_run=true to preview.
    """
    event = get_event_or_404(db, event_id)
    result, free_before = auto_fill_event(db, event)

    if not dry_run and result.new_assignments:
        stage_assignments(db, event.id, result.new_assignments)
        _commit_or_conflict(db, "Roster changed during auto-fill; reload and retry")

    logger.info(
        "auto-fill event=%s filled=%s open=%s unseated=%s dry_run=%s",
        event.id,
        result.total_filled,
        free_before,
        len(result.unseated),
        dry_run,
    )
    return schemas.AutoFillOut(
        event_id=event.id,
        dry_run=dry_run,
        total_filled=result.total_filled,
        open_seats=free_before,
        summary=[schemas.RoleFillOut(role=s.role, label=s.label, count=s.count) for s in result.summary],
        assignments=[
            schemas.AssignmentOut(
                signup_id=a.signup_id, slot=a.slot, position=a.position, is_override=a.is_override
            )
            for a in result.new_assignments
        ],
        unseated=[c.signup_id for c in result.unseated],
    )
