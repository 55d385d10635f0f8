# raid_roster/models.py
from datetime import datetime

from sqlalchemy import (
    JSON,
    Boolean,
    DateTime,
    ForeignKey,
    Integer,
    String,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .db import Base


class Event(Base):
    __tablename__ = "events"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    game: Mapped[str | None] = mapped_column(String(120), nullable=True)

    # Seat counts per role, e.g. {"tank": 2, "healer": 4, "dps": 14, "flex": 5}
    slot_config: Mapped[dict[str, int] | None] = mapped_column(JSON, nullable=True)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    signups = relationship("Signup", back_populates="event", cascade="all, delete-orphan")
    assignments = relationship("RosterAssignment", back_populates="event", cascade="all, delete-orphan")


class Character(Base):
    __tablename__ = "characters"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    owner: Mapped[str] = mapped_column(String(120), nullable=False, index=True)
    name: Mapped[str] = mapped_column(String(120), nullable=False)
    class_name: Mapped[str | None] = mapped_column(String(60), nullable=True)
    role: Mapped[str | None] = mapped_column(String(16), nullable=True)  # innate role

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)


class Signup(Base):
    __tablename__ = "event_signups"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    event_id: Mapped[int] = mapped_column(Integer, ForeignKey("events.id", ondelete="CASCADE"), index=True)
    username: Mapped[str] = mapped_column(String(120), nullable=False)
    character_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("characters.id", ondelete="SET NULL"), nullable=True
    )

    # Ordered list of roles the player is willing to play; null = no explicit preference
    preferred_roles: Mapped[list[str] | None] = mapped_column(JSON, nullable=True)
    status: Mapped[str] = mapped_column(String(20), nullable=False, default="signed_up")

    signed_up_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    event = relationship("Event", back_populates="signups")
    character = relationship("Character")

    __table_args__ = (UniqueConstraint("event_id", "username", name="uq_signup_event_username"),)


class RosterAssignment(Base):
    __tablename__ = "roster_assignments"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, index=True)
    event_id: Mapped[int] = mapped_column(Integer, ForeignKey("events.id", ondelete="CASCADE"), index=True)
    signup_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("event_signups.id", ondelete="CASCADE"), index=True
    )
    role: Mapped[str] = mapped_column(String(16), nullable=False)
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    is_override: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)

    created_at: Mapped[datetime] = mapped_column(DateTime, default=datetime.utcnow, nullable=False)

    event = relationship("Event", back_populates="assignments")
    signup = relationship("Signup")

    __table_args__ = (
        UniqueConstraint("event_id", "signup_id", name="uq_assignment_event_signup"),
        UniqueConstraint("event_id", "role", "position", name="uq_assignment_event_seat"),
    )
