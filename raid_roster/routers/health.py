from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from ..db import get_db

route = APIRouter(prefix="/health", tags=["health"])


@route.get("/ping")
def ping():
    return {"ok": True, "ping": "pong"}


@route.get("/db")
def db_ready(db: Session = Depends(get_db)):
    """Readiness: the roster store answers a trivial query."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        raise HTTPException(status_code=503, detail="Database unavailable") from exc
    return {"ok": True, "db": "up"}
