from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from ..logic.roster_roles import SlotConfig, is_generic_config
from ..logic.roster_snapshot import slot_counts

route = APIRouter(prefix="/events", tags=["events"])


def event_out(event: models.Event) -> schemas.EventOut:
    slots = slot_counts(event)
    return schemas.EventOut(
        id=event.id,
        title=event.title,
        game=event.game,
        slots=slots,
        generic=is_generic_config(slots),
        created_at=event.created_at,
    )


def get_event_or_404(db: Session, event_id: int) -> models.Event:
    event = db.get(models.Event, event_id)
    if not event:
        raise HTTPException(status_code=404, detail="Event not found")
    return event


# ---------------- routes ----------------


@route.post("/", response_model=schemas.EventOut)
def create_event(body: schemas.EventCreate, db: Session = Depends(get_db)):
    config = body.slots or SlotConfig.default(generic=body.generic)
    counts = config.counts()
    if not any(v > 0 for v in counts.values()):
        raise HTTPException(status_code=400, detail="Event needs at least one seat")

    event = models.Event(
        title=body.title.strip(),
        game=(body.game or "").strip() or None,
        slot_config=counts,
    )
    db.add(event)
    db.commit()
    db.refresh(event)
    return event_out(event)


@route.get("/", response_model=list[schemas.EventOut])
def list_events(db: Session = Depends(get_db)):
    events = db.query(models.Event).order_by(models.Event.id.asc()).all()
    return [event_out(e) for e in events]


@route.get("/{event_id}", response_model=schemas.EventOut)
def get_event(event_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    return event_out(get_event_or_404(db, event_id))
