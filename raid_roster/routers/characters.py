from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Path
from sqlalchemy.orm import Session

from .. import models, schemas
from ..db import get_db

router = APIRouter(prefix="/characters", tags=["characters"])


@router.post("/", response_model=schemas.CharacterOut)
def create_character(body: schemas.CharacterCreate, db: Session = Depends(get_db)):
    character = models.Character(
        owner=body.owner.strip(),
        name=body.name.strip(),
        class_name=body.class_name,
        role=body.role.value if body.role else None,
    )
    db.add(character)
    db.commit()
    db.refresh(character)
    return schemas.CharacterOut.model_validate(character)


@router.get("/{character_id}", response_model=schemas.CharacterOut)
def get_character(character_id: int = Path(..., ge=1), db: Session = Depends(get_db)):
    character = db.get(models.Character, character_id)
    if not character:
        raise HTTPException(status_code=404, detail="Character not found")
    return schemas.CharacterOut.model_validate(character)
