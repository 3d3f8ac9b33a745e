"""
Plan mutation reducer.

``reduce(state, action)`` is a pure transition function over immutable
PlanState values. Every edit to slots, name or description pushes the prior
snapshot onto the undo stack and clears the redo stack.

Actions that reference something that no longer exists (a removed slot id,
an out-of-range index, a day outside 1-7) return the input state unchanged.
The reducer never raises for such actions: UI dispatches can race with
saves and reloads.

Slots are kept as a flat tuple in arena order; day groupings and display
order are derived from ``day_index`` / ``sort_order`` on demand, and every
structural edit renumbers the affected days to 0..n-1.
"""

import math
import uuid
from dataclasses import dataclass, replace
from typing import Callable, Iterable, Union

from .config import DAYS_PER_WEEK, DEFAULT_SETS, clamp_reps, clamp_rir, clamp_rpe, clamp_sets
from .models import MuscleSlot, PlanSnapshot, PlanState

SlotIdFactory = Callable[[], str]


def new_slot_id() -> str:
    """Generate a fresh unique slot id."""
    return str(uuid.uuid4())


class _Unset:
    """Marker for "field not provided" in partial updates (None means clear)."""

    def __repr__(self) -> str:
        return "UNSET"


UNSET = _Unset()


# =============================================================================
# ACTIONS
# =============================================================================


@dataclass(frozen=True)
class AddSlot:
    """Place a muscle on a day. Callers check for duplicates beforehand."""

    day_index: int
    muscle_id: str
    sets: int | None = None


@dataclass(frozen=True)
class RemoveSlot:
    slot_id: str


@dataclass(frozen=True)
class SetSets:
    slot_id: str
    sets: int


@dataclass(frozen=True)
class SetSlotDetail:
    """
    Merge detail fields into one slot.

    Fields left as UNSET are kept; None clears an optional field.
    """

    slot_id: str
    sets: int | _Unset = UNSET
    rep_min: int | None | _Unset = UNSET
    rep_max: int | None | _Unset = UNSET
    tempo: str | None | _Unset = UNSET
    rir: int | None | _Unset = UNSET
    rpe: float | None | _Unset = UNSET


@dataclass(frozen=True)
class SetAllSetsForMuscle:
    """Set ``sets`` on every slot whose muscle id equals ``muscle_id`` exactly."""

    muscle_id: str
    sets: int


@dataclass(frozen=True)
class Reorder:
    day_index: int
    from_index: int
    to_index: int


@dataclass(frozen=True)
class MoveSlot:
    slot_id: str
    to_day: int
    to_index: int


@dataclass(frozen=True)
class PasteDay:
    from_day: int
    to_day: int


@dataclass(frozen=True)
class LoadPreset:
    """Replace all slots with a preset (an edit: marks the plan dirty)."""

    slots: tuple[MuscleSlot, ...]
    name: str | None = None


@dataclass(frozen=True)
class LoadTemplate:
    """Hydrate from a persisted plan: clean state, empty history."""

    plan_id: str | None
    name: str
    description: str
    slots: tuple[MuscleSlot, ...]


@dataclass(frozen=True)
class ClearAll:
    pass


@dataclass(frozen=True)
class SetName:
    name: str


@dataclass(frozen=True)
class SetDescription:
    description: str


@dataclass(frozen=True)
class SelectDay:
    day_index: int


@dataclass(frozen=True)
class MarkSaved:
    plan_id: str


@dataclass(frozen=True)
class Saving:
    pass


@dataclass(frozen=True)
class SaveError:
    pass


@dataclass(frozen=True)
class Undo:
    pass


@dataclass(frozen=True)
class Redo:
    pass


Action = Union[
    AddSlot,
    RemoveSlot,
    SetSets,
    SetSlotDetail,
    SetAllSetsForMuscle,
    Reorder,
    MoveSlot,
    PasteDay,
    LoadPreset,
    LoadTemplate,
    ClearAll,
    SetName,
    SetDescription,
    SelectDay,
    MarkSaved,
    Saving,
    SaveError,
    Undo,
    Redo,
]


# =============================================================================
# HELPERS
# =============================================================================


def _valid_day(day_index: int) -> bool:
    return isinstance(day_index, int) and 1 <= day_index <= DAYS_PER_WEEK


def max_sort_order(slots: Iterable[MuscleSlot], day_index: int) -> int:
    """Highest sort_order on a day, or -1 if the day is empty."""
    return max((s.sort_order for s in slots if s.day_index == day_index), default=-1)


def _day_sequence(slots: Iterable[MuscleSlot], day_index: int) -> list[MuscleSlot]:
    # sorted() is stable: equal sort_orders keep arena order
    return sorted((s for s in slots if s.day_index == day_index), key=lambda s: s.sort_order)


def _apply_order(slots: tuple[MuscleSlot, ...], ordered: dict[str, tuple[int, int]]) -> tuple[MuscleSlot, ...]:
    """Rewrite (day_index, sort_order) for the slot ids in ``ordered``, keeping arena order."""
    out = []
    for s in slots:
        target = ordered.get(s.id)
        if target is not None and (s.day_index, s.sort_order) != target:
            s = replace(s, day_index=target[0], sort_order=target[1])
        out.append(s)
    return tuple(out)


def normalize_sort_orders(slots: Iterable[MuscleSlot]) -> tuple[MuscleSlot, ...]:
    """Renumber every day's slots to a contiguous 0..n-1 sequence."""
    slots = tuple(slots)
    ordered: dict[str, tuple[int, int]] = {}
    for day in {s.day_index for s in slots}:
        for i, s in enumerate(_day_sequence(slots, day)):
            ordered[s.id] = (day, i)
    return _apply_order(slots, ordered)


def hydrate_slot_ids(
    slots: Iterable[MuscleSlot],
    new_id: SlotIdFactory = new_slot_id,
) -> tuple[MuscleSlot, ...]:
    """Give every slot a unique id (legacy saved data may lack ids or repeat them)."""
    seen: set[str] = set()
    out = []
    for s in slots:
        if not s.id or s.id in seen:
            s = replace(s, id=new_id())
        seen.add(s.id)
        out.append(s)
    return tuple(out)


def clamp_slot(slot: MuscleSlot) -> MuscleSlot:
    """
    Bring a slot's numbers back into range.

    Applied to every slot that enters the plan wholesale (presets, loaded
    plans). A non-finite RPE is dropped; an inverted rep range is closed
    by raising rep_max to rep_min.
    """
    rpe = slot.rpe
    if rpe is not None:
        rpe = clamp_rpe(rpe) if math.isfinite(rpe) else None
    clamped = replace(
        slot,
        sets=clamp_sets(slot.sets),
        rep_min=clamp_reps(slot.rep_min) if slot.rep_min is not None else None,
        rep_max=clamp_reps(slot.rep_max) if slot.rep_max is not None else None,
        rir=clamp_rir(slot.rir) if slot.rir is not None else None,
        rpe=rpe,
    )
    if clamped.effective_rep_min > clamped.effective_rep_max:
        clamped = replace(clamped, rep_max=clamped.effective_rep_min)
    return clamped


def _incoming_slots(slots: Iterable[MuscleSlot], new_id: SlotIdFactory) -> tuple[MuscleSlot, ...]:
    return normalize_sort_orders(clamp_slot(s) for s in hydrate_slot_ids(slots, new_id))


def _commit(state: PlanState, **changes) -> PlanState:
    """Apply an undoable edit: push history, clear redo, mark dirty."""
    candidate = replace(state, **changes)
    if candidate.snapshot() == state.snapshot():
        return state
    return replace(
        candidate,
        past=state.past + (state.snapshot(),),
        future=(),
        is_dirty=True,
    )


def _restore(state: PlanState, snap: PlanSnapshot, past: tuple, future: tuple) -> PlanState:
    return replace(
        state,
        name=snap.name,
        description=snap.description,
        slots=snap.slots,
        past=past,
        future=future,
        is_dirty=True,
    )


def _merge_detail(slot: MuscleSlot, action: SetSlotDetail) -> MuscleSlot:
    changes: dict = {}
    if not isinstance(action.sets, _Unset):
        changes["sets"] = clamp_sets(action.sets)
    if not isinstance(action.rep_min, _Unset):
        changes["rep_min"] = clamp_reps(action.rep_min) if action.rep_min is not None else None
    if not isinstance(action.rep_max, _Unset):
        changes["rep_max"] = clamp_reps(action.rep_max) if action.rep_max is not None else None
    if not isinstance(action.tempo, _Unset):
        tempo = str(action.tempo).strip() if action.tempo is not None else None
        changes["tempo"] = tempo or None
    if not isinstance(action.rir, _Unset):
        changes["rir"] = clamp_rir(action.rir) if action.rir is not None else None
    if not isinstance(action.rpe, _Unset):
        if action.rpe is None:
            changes["rpe"] = None
        elif math.isfinite(action.rpe):
            changes["rpe"] = clamp_rpe(action.rpe)

    merged = replace(slot, **changes)
    if merged.effective_rep_min > merged.effective_rep_max:
        # The bound that was just edited wins; the other follows it.
        if "rep_min" in changes:
            merged = replace(merged, rep_max=merged.effective_rep_min)
        else:
            merged = replace(merged, rep_min=merged.effective_rep_max)
    return merged


# =============================================================================
# REDUCER
# =============================================================================


def reduce(state: PlanState, action: Action, new_id: SlotIdFactory = new_slot_id) -> PlanState:
    """
    Apply one action to a plan state.

    Args:
        state: Current plan state (never mutated)
        action: One of the action dataclasses in this module
        new_id: Slot id factory, injectable for deterministic tests

    Returns:
        The next plan state (the same object for no-op actions)
    """
    if isinstance(action, AddSlot):
        if not _valid_day(action.day_index) or not action.muscle_id:
            return state
        slot = MuscleSlot(
            id=new_id(),
            day_index=action.day_index,
            muscle_id=action.muscle_id,
            sets=clamp_sets(action.sets if action.sets is not None else DEFAULT_SETS),
            sort_order=max_sort_order(state.slots, action.day_index) + 1,
        )
        return _commit(state, slots=state.slots + (slot,))

    if isinstance(action, RemoveSlot):
        target = state.find_slot(action.slot_id)
        if target is None:
            return state
        remaining = tuple(s for s in state.slots if s.id != action.slot_id)
        day = _day_sequence(remaining, target.day_index)
        return _commit(
            state,
            slots=_apply_order(remaining, {s.id: (target.day_index, i) for i, s in enumerate(day)}),
        )

    if isinstance(action, SetSets):
        return reduce(state, SetSlotDetail(slot_id=action.slot_id, sets=action.sets), new_id)

    if isinstance(action, SetSlotDetail):
        target = state.find_slot(action.slot_id)
        if target is None:
            return state
        updated = _merge_detail(target, action)
        return _commit(
            state,
            slots=tuple(updated if s.id == action.slot_id else s for s in state.slots),
        )

    if isinstance(action, SetAllSetsForMuscle):
        sets = clamp_sets(action.sets)
        return _commit(
            state,
            slots=tuple(
                replace(s, sets=sets) if s.muscle_id == action.muscle_id else s
                for s in state.slots
            ),
        )

    if isinstance(action, Reorder):
        day = _day_sequence(state.slots, action.day_index)
        n = len(day)
        if not (0 <= action.from_index < n and 0 <= action.to_index < n):
            return state
        moved = day.pop(action.from_index)
        day.insert(action.to_index, moved)
        return _commit(
            state,
            slots=_apply_order(state.slots, {s.id: (action.day_index, i) for i, s in enumerate(day)}),
        )

    if isinstance(action, MoveSlot):
        slot = state.find_slot(action.slot_id)
        if slot is None or not _valid_day(action.to_day):
            return state
        others = tuple(s for s in state.slots if s.id != action.slot_id)
        target_day = _day_sequence(others, action.to_day)
        if not 0 <= action.to_index <= len(target_day):
            return state
        target_day.insert(action.to_index, slot)
        ordered = {s.id: (action.to_day, i) for i, s in enumerate(target_day)}
        if slot.day_index != action.to_day:
            source_day = _day_sequence(others, slot.day_index)
            ordered.update({s.id: (slot.day_index, i) for i, s in enumerate(source_day)})
        return _commit(state, slots=_apply_order(state.slots, ordered))

    if isinstance(action, PasteDay):
        if not _valid_day(action.from_day) or not _valid_day(action.to_day):
            return state
        source = _day_sequence(state.slots, action.from_day)
        if not source:
            return state
        start = max_sort_order(state.slots, action.to_day) + 1
        copies = tuple(
            replace(s, id=new_id(), day_index=action.to_day, sort_order=start + i)
            for i, s in enumerate(source)
        )
        return _commit(state, slots=state.slots + copies)

    if isinstance(action, LoadPreset):
        slots = _incoming_slots(action.slots, new_id)
        name = action.name if action.name is not None else state.name
        candidate = _commit(state, slots=slots, name=name)
        if candidate is state and not state.is_dirty:
            return replace(state, is_dirty=True)
        return candidate

    if isinstance(action, LoadTemplate):
        return replace(
            state,
            plan_id=action.plan_id,
            name=action.name,
            description=action.description,
            slots=_incoming_slots(action.slots, new_id),
            is_dirty=False,
            is_saving=False,
            past=(),
            future=(),
        )

    if isinstance(action, ClearAll):
        if not state.slots:
            return state
        return _commit(state, slots=())

    if isinstance(action, SetName):
        return _commit(state, name=action.name)

    if isinstance(action, SetDescription):
        return _commit(state, description=action.description)

    if isinstance(action, SelectDay):
        if not _valid_day(action.day_index):
            return state
        return replace(state, selected_day=action.day_index)

    if isinstance(action, MarkSaved):
        return replace(state, plan_id=action.plan_id, is_dirty=False, is_saving=False)

    if isinstance(action, Saving):
        return replace(state, is_saving=True)

    if isinstance(action, SaveError):
        return replace(state, is_saving=False)

    if isinstance(action, Undo):
        if not state.past:
            return state
        return _restore(
            state,
            state.past[-1],
            past=state.past[:-1],
            future=state.future + (state.snapshot(),),
        )

    if isinstance(action, Redo):
        if not state.future:
            return state
        return _restore(
            state,
            state.future[-1],
            past=state.past + (state.snapshot(),),
            future=state.future[:-1],
        )

    return state


def reduce_all(
    state: PlanState,
    actions: Iterable[Action],
    new_id: SlotIdFactory = new_slot_id,
) -> PlanState:
    """Apply actions strictly in order."""
    for action in actions:
        state = reduce(state, action, new_id)
    return state
