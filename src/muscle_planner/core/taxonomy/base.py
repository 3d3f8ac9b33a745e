"""
Base types for the muscle taxonomy.

MuscleGroupDef describes one trainable muscle group with its volume
landmarks. SubdivisionDef is a finer target that rolls up to exactly one
parent group. Taxonomy bundles both tables with the lookup and resolution
functions the rest of the engine uses.
"""

from dataclasses import dataclass, field
from typing import Literal

BodyRegion = Literal["push", "pull", "legs", "core"]

BODY_REGIONS: tuple[BodyRegion, ...] = ("push", "pull", "legs", "core")

BODY_REGION_LABELS: dict[str, str] = {
    "push": "Push",
    "pull": "Pull",
    "legs": "Legs",
    "core": "Core",
}


@dataclass(frozen=True)
class MuscleLandmarks:
    """Weekly hard-set thresholds, strictly ascending."""

    mv: int   # Maintenance Volume
    mev: int  # Minimum Effective Volume
    mav: int  # Maximum Adaptive Volume
    mrv: int  # Maximum Recoverable Volume

    def __post_init__(self) -> None:
        if not (0 < self.mv < self.mev < self.mav < self.mrv):
            raise ValueError(
                f"landmarks must satisfy 0 < MV < MEV < MAV < MRV, got "
                f"{self.mv}/{self.mev}/{self.mav}/{self.mrv}"
            )


@dataclass(frozen=True)
class MuscleGroupDef:
    """One muscle group on the palette."""

    id: str                # e.g. "pecs"
    label: str             # e.g. "Pecs"
    body_region: BodyRegion
    color_class: str       # e.g. "bg-rose-500"
    color_hex: str         # e.g. "#f43f5e"
    landmarks: MuscleLandmarks
    exercise_filters: tuple[str, ...] = ()  # exercise-library primary_muscle values


@dataclass(frozen=True)
class SubdivisionDef:
    """An anatomically specific target inside a parent group."""

    id: str         # e.g. "pecs_clavicular"
    label: str      # e.g. "Clavicular (Upper)"
    parent_id: str  # e.g. "pecs"
    exercise_filters: tuple[str, ...] = ()


@dataclass(frozen=True)
class MuscleDisplay:
    """Visual identity of a muscle or subdivision (subdivisions use parent colours)."""

    label: str
    color_class: str
    color_hex: str


@dataclass(frozen=True)
class Taxonomy:
    """
    Immutable muscle reference data plus lookup tables.

    Built once at import time by the registry and passed by reference.
    The order of ``muscle_groups`` is the canonical enumeration order.
    """

    muscle_groups: tuple[MuscleGroupDef, ...]
    subdivisions: tuple[SubdivisionDef, ...] = ()
    _muscles: dict[str, MuscleGroupDef] = field(init=False, repr=False, compare=False)
    _subs: dict[str, SubdivisionDef] = field(init=False, repr=False, compare=False)
    _order: dict[str, int] = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        muscles = {m.id: m for m in self.muscle_groups}
        if len(muscles) != len(self.muscle_groups):
            raise ValueError("duplicate muscle group id in taxonomy")
        subs: dict[str, SubdivisionDef] = {}
        for sub in self.subdivisions:
            if sub.parent_id not in muscles:
                raise ValueError(
                    f"subdivision {sub.id!r} references unknown parent {sub.parent_id!r}"
                )
            if sub.id in muscles or sub.id in subs:
                raise ValueError(f"duplicate taxonomy id {sub.id!r}")
            subs[sub.id] = sub
        object.__setattr__(self, "_muscles", muscles)
        object.__setattr__(self, "_subs", subs)
        object.__setattr__(
            self, "_order", {m.id: i for i, m in enumerate(self.muscle_groups)}
        )

    # ------------------------------------------------------------------
    # Lookup
    # ------------------------------------------------------------------

    def get_muscle(self, muscle_id: str) -> MuscleGroupDef | None:
        return self._muscles.get(muscle_id)

    def get_subdivision(self, muscle_id: str) -> SubdivisionDef | None:
        return self._subs.get(muscle_id)

    def is_known(self, muscle_id: str) -> bool:
        return muscle_id in self._muscles or muscle_id in self._subs

    def is_subdivision(self, muscle_id: str) -> bool:
        return muscle_id in self._subs

    def order_of(self, muscle_id: str) -> int:
        """Canonical position of a parent muscle id (unknown ids sort last)."""
        return self._order.get(muscle_id, len(self._order))

    def subdivisions_of(self, parent_id: str) -> list[SubdivisionDef]:
        """Subdivisions registered under a parent, in table order."""
        return [s for s in self.subdivisions if s.parent_id == parent_id]

    def muscles_in_region(self, region: str) -> list[MuscleGroupDef]:
        return [m for m in self.muscle_groups if m.body_region == region]

    # ------------------------------------------------------------------
    # Resolution
    # ------------------------------------------------------------------

    def resolve_parent_muscle_id(self, muscle_id: str) -> str | None:
        """
        Map a muscle or subdivision id to its parent muscle-group id.

        A parent id resolves to itself; a subdivision id resolves to its
        registered parent. Unknown ids (e.g. stale ids from removed muscles
        in persisted plans) resolve to None so callers can skip them.
        """
        if muscle_id in self._muscles:
            return muscle_id
        sub = self._subs.get(muscle_id)
        return sub.parent_id if sub is not None else None

    def get_muscle_display(self, muscle_id: str) -> MuscleDisplay | None:
        """Label and colours for a muscle or subdivision, or None if unknown."""
        parent = self._muscles.get(muscle_id)
        if parent is not None:
            return MuscleDisplay(parent.label, parent.color_class, parent.color_hex)
        sub = self._subs.get(muscle_id)
        if sub is None:
            return None
        parent = self._muscles[sub.parent_id]
        return MuscleDisplay(sub.label, parent.color_class, parent.color_hex)

    def label_for(self, muscle_id: str) -> str:
        """Display label, falling back to the raw id for unknown muscles."""
        display = self.get_muscle_display(muscle_id)
        return display.label if display is not None else muscle_id

    def exercise_filters_for(self, muscle_id: str) -> tuple[str, ...]:
        """Exercise-library muscle names used to pre-filter exercise pickers."""
        parent = self._muscles.get(muscle_id)
        if parent is not None:
            return parent.exercise_filters
        sub = self._subs.get(muscle_id)
        return sub.exercise_filters if sub is not None else ()
