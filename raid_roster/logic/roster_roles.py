# raid_roster/logic/roster_roles.py
from __future__ import annotations

from typing import Callable, Dict, List, Optional

from pydantic import BaseModel, Field

from .auto_fill import RoleSlot

# ---- Roles ----
ROLE_TANK = "tank"
ROLE_HEALER = "healer"
ROLE_DPS = "dps"
ROLE_FLEX = "flex"
ROLE_PLAYER = "player"
ROLE_BENCH = "bench"

# ---- Catalogs (priority order: earlier rows win) ----
MMO_ROLE_SLOTS: list[RoleSlot] = [
    RoleSlot(ROLE_TANK, "Tank"),
    RoleSlot(ROLE_HEALER, "Healer"),
    RoleSlot(ROLE_DPS, "DPS"),
]

GENERIC_ROLE_SLOTS: list[RoleSlot] = [
    RoleSlot(ROLE_PLAYER, "Player"),
]

# Manual-only seats: shown on the board, never auto-filled.
FLEX_SLOT = RoleSlot(ROLE_FLEX, "Flex")
BENCH_SLOT = RoleSlot(ROLE_BENCH, "Bench")

# ---- Default seat counts ----
DEFAULT_MMO_SLOTS: dict[str, int] = {
    ROLE_TANK: 2,
    ROLE_HEALER: 4,
    ROLE_DPS: 14,
    ROLE_FLEX: 5,
}

DEFAULT_GENERIC_SLOTS: dict[str, int] = {
    ROLE_PLAYER: 10,
    ROLE_BENCH: 5,
}


class SlotConfig(BaseModel):
    tank: Optional[int] = Field(None, ge=0)
    healer: Optional[int] = Field(None, ge=0)
    dps: Optional[int] = Field(None, ge=0)
    flex: Optional[int] = Field(None, ge=0)
    player: Optional[int] = Field(None, ge=0, description="Generic (non role-based) seats.")
    bench: Optional[int] = Field(None, ge=0, description="Overflow seats, filled manually only.")

    @classmethod
    def default(cls, generic: bool = False) -> "SlotConfig":
        return cls(**(DEFAULT_GENERIC_SLOTS if generic else DEFAULT_MMO_SLOTS))

    def counts(self) -> Dict[str, int]:
        """Non-null counts keyed by role."""
        return {k: v for k, v in self.model_dump().items() if v is not None}


def _count(config: SlotConfig | Dict[str, int] | None, role: str) -> int:
    if config is None:
        return 0
    counts = config.counts() if isinstance(config, SlotConfig) else config
    value = counts.get(role)
    if value is None:
        return 0
    try:
        return max(0, int(value))
    except (TypeError, ValueError):
        return 0


def is_generic_config(config: SlotConfig | Dict[str, int] | None) -> bool:
    """Generic events have player seats and no role-based seats at all."""
    has_player_slots = _count(config, ROLE_PLAYER) > 0
    has_mmo_roles = any(_count(config, r) > 0 for r in (ROLE_TANK, ROLE_HEALER, ROLE_DPS, ROLE_FLEX))
    return has_player_slots and not has_mmo_roles


def role_catalog(config: SlotConfig | Dict[str, int] | None) -> List[RoleSlot]:
    """Catalog handed to the auto-fill engine. Flex and bench are never auto-filled."""
    if is_generic_config(config):
        return list(GENERIC_ROLE_SLOTS)
    return list(MMO_ROLE_SLOTS)


def board_roles(config: SlotConfig | Dict[str, int] | None) -> List[RoleSlot]:
    """Every role that can hold a seat on the roster board (catalog + flex + bench)."""
    roles = role_catalog(config)
    if not is_generic_config(config) and _count(config, ROLE_FLEX) > 0:
        roles.append(FLEX_SLOT)
    if _count(config, ROLE_BENCH) > 0:
        roles.append(BENCH_SLOT)
    return roles


def capacity_resolver(config: SlotConfig | Dict[str, int] | None) -> Callable[[str], int]:
    """Return capacity_of(role); missing or negative counts resolve to 0."""
    snapshot = dict(config.counts() if isinstance(config, SlotConfig) else (config or {}))

    def capacity_of(role: str) -> int:
        return _count(snapshot, role)

    return capacity_of


def open_seats(
    catalog: List[RoleSlot],
    capacity_of: Callable[[str], int],
    occupied: Dict[str, int],
) -> int:
    """Free seats across a catalog given per-role occupancy."""
    return sum(max(0, capacity_of(s.role) - occupied.get(s.role, 0)) for s in catalog)
