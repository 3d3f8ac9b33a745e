"""
Data models for muscle-planner.

MuscleSlot is the core entity: one muscle (or subdivision) placed on one
day of the week with a set count and optional rep-range/tempo/intensity
detail. PlanState is the immutable value the reducer transitions between.
"""

from dataclasses import dataclass, field
from typing import Literal

from .config import DAYS_PER_WEEK, DEFAULT_PLAN_NAME, DEFAULT_REP_MAX, DEFAULT_REP_MIN, DEFAULT_SELECTED_DAY, DEFAULT_SETS

LandmarkZone = Literal[
    "below_mv",
    "maintenance",
    "productive",
    "approaching_mrv",
    "over_mrv",
]


@dataclass(frozen=True)
class MuscleSlot:
    """
    A muscle placed on one training day.

    ``muscle_id`` is either a parent muscle-group id or a subdivision id.
    ``sort_order`` orders slots within their day; the reducer keeps it
    contiguous (0..n-1) after structural mutations.
    ``tempo`` is a 4-digit string (eccentric, bottom pause, concentric,
    top pause); anything else means "no tempo data".
    """

    id: str
    day_index: int  # 1-7 (Mon-Sun)
    muscle_id: str
    sets: int = DEFAULT_SETS
    sort_order: int = 0
    rep_min: int | None = None
    rep_max: int | None = None
    tempo: str | None = None
    rir: int | None = None  # reps in reserve, 0-10
    rpe: float | None = None  # rate of perceived exertion, 1-10 in half steps

    def __post_init__(self) -> None:
        """Validate slot data."""
        if not 1 <= self.day_index <= DAYS_PER_WEEK:
            raise ValueError(f"day_index must be 1-{DAYS_PER_WEEK}, got {self.day_index}")
        if not self.muscle_id:
            raise ValueError("muscle_id must be non-empty")
        if self.sets < 1:
            raise ValueError("sets must be positive")

    @property
    def effective_rep_min(self) -> int:
        """Lower rep bound, falling back to the default range."""
        return self.rep_min if self.rep_min is not None else DEFAULT_REP_MIN

    @property
    def effective_rep_max(self) -> int:
        """Upper rep bound, falling back to the default range."""
        return self.rep_max if self.rep_max is not None else DEFAULT_REP_MAX


@dataclass(frozen=True)
class PlanSnapshot:
    """
    The undoable part of a plan: metadata plus the full slot collection.
    """

    name: str
    description: str
    slots: tuple[MuscleSlot, ...]


@dataclass(frozen=True)
class PlanState:
    """
    Complete editor state for one weekly muscle plan.

    ``past`` / ``future`` are the undo and redo stacks (most recent last).
    ``plan_id`` references the persisted record, None until first save.
    """

    plan_id: str | None = None
    name: str = DEFAULT_PLAN_NAME
    description: str = ""
    slots: tuple[MuscleSlot, ...] = ()
    selected_day: int = DEFAULT_SELECTED_DAY
    is_dirty: bool = False
    is_saving: bool = False
    past: tuple[PlanSnapshot, ...] = field(default=(), repr=False)
    future: tuple[PlanSnapshot, ...] = field(default=(), repr=False)

    def snapshot(self) -> PlanSnapshot:
        """Capture the undoable part of this state."""
        return PlanSnapshot(name=self.name, description=self.description, slots=self.slots)

    @property
    def can_undo(self) -> bool:
        return bool(self.past)

    @property
    def can_redo(self) -> bool:
        return bool(self.future)

    def find_slot(self, slot_id: str) -> MuscleSlot | None:
        """Return the slot with the given id, or None."""
        return next((s for s in self.slots if s.id == slot_id), None)

    def slots_for_day(self, day_index: int) -> list[MuscleSlot]:
        """Slots on one day in display order (sort_order ascending)."""
        return sorted(
            (s for s in self.slots if s.day_index == day_index),
            key=lambda s: s.sort_order,
        )

    @property
    def training_days(self) -> list[int]:
        """Distinct day indices that hold at least one slot, ascending."""
        return sorted({s.day_index for s in self.slots})
