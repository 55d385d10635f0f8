# raid_roster/schemas.py
from __future__ import annotations

from datetime import datetime
from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .logic.roster_roles import SlotConfig


# -----------------------
# Shared / Enums
# -----------------------
class PreferableRole(str, Enum):
    TANK = "tank"
    HEALER = "healer"
    DPS = "dps"


class RosterRole(str, Enum):
    TANK = "tank"
    HEALER = "healer"
    DPS = "dps"
    FLEX = "flex"
    PLAYER = "player"
    BENCH = "bench"


# -----------------------
# Event
# -----------------------
class EventCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=200)
    game: str | None = None
    # When omitted the default layout for the event type is stored
    slots: SlotConfig | None = None
    generic: bool = False


class EventOut(BaseModel):
    id: int
    title: str
    game: str | None = None
    slots: dict[str, int]
    generic: bool
    created_at: datetime


class RoleSlotOut(BaseModel):
    role: str
    label: str
    count: int


# -----------------------
# Characters
# -----------------------
class CharacterCreate(BaseModel):
    owner: str = Field(..., min_length=1, max_length=120)
    name: str = Field(..., min_length=1, max_length=120)
    class_name: str | None = None
    role: PreferableRole | None = None


class CharacterOut(BaseModel):
    id: int
    owner: str
    name: str
    class_name: str | None = None
    role: str | None = None

    model_config = ConfigDict(from_attributes=True)


# -----------------------
# Signups
# -----------------------
class SignupCreate(BaseModel):
    username: str = Field(..., min_length=1, max_length=120)
    character_id: int | None = Field(None, ge=1)
    preferred_roles: list[PreferableRole] | None = Field(None, min_length=1, max_length=3)

    @field_validator("preferred_roles")
    @classmethod
    def unique_roles(cls, value: list[PreferableRole] | None) -> list[PreferableRole] | None:
        if value is None:
            return None
        if len(set(value)) != len(value):
            raise ValueError("preferred_roles must not repeat a role")
        return value


class SignupOut(BaseModel):
    id: int
    event_id: int
    username: str
    character_id: int | None = None
    preferred_roles: list[str] | None = None
    status: str
    signed_up_at: datetime

    model_config = ConfigDict(from_attributes=True)


# -----------------------
# Roster
# -----------------------
class RosterEntryOut(BaseModel):
    signup_id: int
    username: str
    character: CharacterOut | None = None
    preferred_roles: list[str] | None = None
    signup_status: str
    slot: str | None = None  # null = in the pool
    position: int = 0
    is_override: bool = False


class RosterOut(BaseModel):
    event_id: int
    generic: bool
    slots: dict[str, int]
    roles: list[RoleSlotOut]
    pool: list[RosterEntryOut]
    assignments: list[RosterEntryOut]


class ManualAssignBody(BaseModel):
    signup_id: int = Field(..., ge=1)
    slot: RosterRole
    position: int = Field(..., ge=1)


class AssignmentOut(BaseModel):
    signup_id: int
    slot: str
    position: int
    is_override: bool


class RoleFillOut(BaseModel):
    role: str
    label: str
    count: int


class AutoFillOut(BaseModel):
    event_id: int
    dry_run: bool
    total_filled: int
    open_seats: int
    summary: list[RoleFillOut]
    assignments: list[AssignmentOut]
    unseated: list[int] = Field(default_factory=list, description="Signup IDs left in the pool.")
