# raid_roster/logic/auto_fill.py
"""
Auto-fill engine: seats every unseated signup it can into the event's role slots.

Role-based events:
  1. Classify each candidate as rigid (one viable role) or flexible (two or more).
  2. Process rigid candidates first, then flexible ones, each group in pool order.
  3. For each candidate, walk the role catalog in priority order and take the
     first preferred role that still has a free seat (lowest free position).

Generic events fill the catalog roles sequentially in pool order.

The engine is a pure function of its arguments: no I/O, no mutation of inputs.
"""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Dict, List, Optional, Sequence, Set, Tuple, Union


# -----------------------
# Inputs
# -----------------------
@dataclass(frozen=True)
class CharacterSummary:
    id: int
    name: str = ""
    role: Optional[str] = None  # innate role; None when unknown


@dataclass(frozen=True)
class Candidate:
    signup_id: int
    character: Optional[CharacterSummary] = None
    preferred_roles: Optional[Tuple[str, ...]] = None
    signup_status: str = "signed_up"


@dataclass(frozen=True)
class RoleSlot:
    role: str
    label: str


@dataclass(frozen=True)
class ExistingAssignment:
    signup_id: int
    slot: Optional[str]  # None = unassigned / bench
    position: int
    is_override: bool = False


# -----------------------
# Preference variant
# -----------------------
@dataclass(frozen=True)
class NoPreference:
    pass


@dataclass(frozen=True)
class SinglePreference:
    role: str

    @property
    def roles(self) -> Tuple[str, ...]:
        return (self.role,)


@dataclass(frozen=True)
class MultiplePreference:
    roles: Tuple[str, ...]


Preference = Union[NoPreference, SinglePreference, MultiplePreference]


# -----------------------
# Outputs
# -----------------------
@dataclass(frozen=True)
class NewAssignment:
    signup_id: int
    slot: str
    position: int
    is_override: bool


@dataclass(frozen=True)
class RoleFillSummary:
    role: str
    label: str
    count: int


@dataclass(frozen=True)
class AutoFillResult:
    new_assignments: List[NewAssignment]
    total_filled: int
    summary: List[RoleFillSummary] = field(default_factory=list)
    unseated: List[Candidate] = field(default_factory=list)


CapacityFn = Callable[[str], Optional[int]]


def resolve_preference(candidate: Candidate) -> Preference:
    """
    Effective preference set of a candidate:
      - explicit preferred roles (deduplicated, first-seen order) win
      - otherwise the attached character's innate role stands in as a single preference
      - otherwise no preference
    """
    roles: List[str] = []
    for r in candidate.preferred_roles or ():
        if r and r not in roles:
            roles.append(r)

    if not roles and candidate.character is not None and candidate.character.role:
        roles = [candidate.character.role]

    if not roles:
        return NoPreference()
    if len(roles) == 1:
        return SinglePreference(roles[0])
    return MultiplePreference(tuple(roles))


def is_rigid(pref: Preference) -> bool:
    return isinstance(pref, SinglePreference)


def is_flexible(pref: Preference) -> bool:
    return isinstance(pref, MultiplePreference)


def _safe_capacity(capacity_of: CapacityFn, role: str) -> int:
    try:
        value = capacity_of(role)
    except KeyError:
        return 0
    if value is None:
        return 0
    return max(0, int(value))


class _SeatBook:
    """Tracks taken positions per role for one invocation."""

    def __init__(self, existing: Sequence[ExistingAssignment], capacity_of: CapacityFn) -> None:
        self._capacity_of = capacity_of
        self._capacity: Dict[str, int] = {}
        self._taken: Dict[str, Set[int]] = {}
        for a in existing:
            if a.slot is None:
                continue
            self._taken.setdefault(a.slot, set()).add(a.position)

    def capacity(self, role: str) -> int:
        if role not in self._capacity:
            self._capacity[role] = _safe_capacity(self._capacity_of, role)
        return self._capacity[role]

    def next_free(self, role: str) -> Optional[int]:
        taken = self._taken.get(role, set())
        for pos in range(1, self.capacity(role) + 1):
            if pos not in taken:
                return pos
        return None

    def take(self, role: str, position: int) -> None:
        self._taken.setdefault(role, set()).add(position)


def _override(candidate: Candidate, role: str) -> bool:
    # Any attached character counts, even one without an innate role.
    character = candidate.character
    if character is None:
        return False
    return character.role != role


def _ordered_for_allocation(
    pool: Sequence[Candidate],
) -> List[Tuple[Candidate, Preference]]:
    # Stable two-pass partition: rigid first, flexible second, pool order kept.
    resolved = [(c, resolve_preference(c)) for c in pool]
    rigid = [(c, p) for c, p in resolved if is_rigid(p)]
    flexible = [(c, p) for c, p in resolved if is_flexible(p)]
    return rigid + flexible


def _fill_role_based(
    pool: Sequence[Candidate],
    role_slots: Sequence[RoleSlot],
    seats: _SeatBook,
) -> List[NewAssignment]:
    out: List[NewAssignment] = []
    for candidate, pref in _ordered_for_allocation(pool):
        wanted = set(pref.roles)
        for slot in role_slots:
            if slot.role not in wanted:
                continue
            pos = seats.next_free(slot.role)
            if pos is None:
                continue
            seats.take(slot.role, pos)
            out.append(
                NewAssignment(
                    signup_id=candidate.signup_id,
                    slot=slot.role,
                    position=pos,
                    is_override=_override(candidate, slot.role),
                )
            )
            break
    return out


def _fill_generic(
    pool: Sequence[Candidate],
    role_slots: Sequence[RoleSlot],
    seats: _SeatBook,
) -> List[NewAssignment]:
    out: List[NewAssignment] = []
    queue = list(pool)
    idx = 0
    for slot in role_slots:
        pos = seats.next_free(slot.role)
        while pos is not None and idx < len(queue):
            seats.take(slot.role, pos)
            out.append(
                NewAssignment(
                    signup_id=queue[idx].signup_id,
                    slot=slot.role,
                    position=pos,
                    is_override=False,
                )
            )
            idx += 1
            pos = seats.next_free(slot.role)
    return out


def _summarize(
    assignments: Sequence[NewAssignment], role_slots: Sequence[RoleSlot]
) -> List[RoleFillSummary]:
    counts: Dict[str, int] = {}
    for a in assignments:
        counts[a.slot] = counts.get(a.slot, 0) + 1
    return [
        RoleFillSummary(role=s.role, label=s.label, count=counts[s.role])
        for s in role_slots
        if counts.get(s.role, 0) > 0
    ]


def compute_auto_fill(
    pool: Sequence[Candidate],
    existing_assignments: Sequence[ExistingAssignment],
    role_slots: Sequence[RoleSlot],
    capacity_of: CapacityFn,
    is_generic: bool = False,
) -> AutoFillResult:
    """
    Seat unseated candidates into open role slots.

    - pool: unseated candidates, in signup order (this order is the tie-break)
    - existing_assignments: seats already taken; never moved or reduced
    - role_slots: role catalog in priority order (earlier = higher priority)
    - capacity_of: seats per role; None/negative/unknown count as 0
    - is_generic: fill sequentially by pool order, ignoring preferences

    Returns the new assignments (in allocation order), their count, a per-role
    summary in catalog order, and the candidates left unseated (pool order).
    """
    # De-duplicate catalog rows; the first occurrence keeps its priority.
    catalog: List[RoleSlot] = []
    seen: Set[str] = set()
    for s in role_slots:
        if s.role not in seen:
            seen.add(s.role)
            catalog.append(s)

    seats = _SeatBook(existing_assignments, capacity_of)
    if is_generic:
        new_assignments = _fill_generic(pool, catalog, seats)
    else:
        new_assignments = _fill_role_based(pool, catalog, seats)

    seated_ids = {a.signup_id for a in new_assignments}
    unseated = [c for c in pool if c.signup_id not in seated_ids]

    return AutoFillResult(
        new_assignments=new_assignments,
        total_filled=len(new_assignments),
        summary=_summarize(new_assignments, catalog),
        unseated=unseated,
    )
