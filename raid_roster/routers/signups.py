from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db
from .events import get_event_or_404

# NOTE: no prefix, routes hang off /events/{event_id}
router = APIRouter(tags=["signups"])


@router.post("/events/{event_id}/signups", response_model=schemas.SignupOut)
def create_signup(
    body: schemas.SignupCreate,
    event_id: int = Path(..., ge=1),
    db: Session = Depends(get_db),
):
    event = get_event_or_404(db, event_id)

    if body.character_id is not None and not db.get(models.Character, body.character_id):
        raise HTTPException(status_code=404, detail="Character not found")

    signup = models.Signup(
        event_id=event.id,
        username=body.username.strip(),
        character_id=body.character_id,
        preferred_roles=[r.value for r in body.preferred_roles] if body.preferred_roles else None,
        status="signed_up",
    )
    db.add(signup)
    try:
        db.commit()
    except IntegrityError:
        db.rollback()
        raise HTTPException(status_code=400, detail="User is already signed up for this event.")

    db.refresh(signup)
    return schemas.SignupOut.model_validate(signup)


@router.get("/events/{event_id}/signups", response_model=list[schemas.SignupOut])
def list_signups(event_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    event = get_event_or_404(db, event_id)
    rows = (
        db.query(models.Signup)
        .filter(models.Signup.event_id == event.id)
        .order_by(models.Signup.signed_up_at.asc(), models.Signup.id.asc())
        .all()
    )
    return [schemas.SignupOut.model_validate(r) for r in rows]
