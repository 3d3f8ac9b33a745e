"""
Conversion of a muscle plan into program-template records.

The projection is a pure, order-preserving mapping: one day record per
distinct training day, one module record per slot (nothing dropped or
merged), plus a single program record describing the whole plan. Persisting
the records is the receiving system's job.
"""

from dataclasses import dataclass
from typing import Iterable

from .config import (
    DEFAULT_MODULE_STATUS,
    MODULE_SESSION_TIMING,
    MODULE_SESSION_TYPE,
    MODULE_TYPE,
    PROGRAM_VISIBILITY,
    day_label,
)
from .models import MuscleSlot
from .taxonomy import Taxonomy, get_default_taxonomy
from .volume import compute_plan_volume


@dataclass(frozen=True)
class ProgramRecord:
    title: str
    description: str
    owner_id: str | None
    visibility: str = PROGRAM_VISIBILITY


@dataclass(frozen=True)
class DayRecord:
    day_index: int
    title: str


@dataclass(frozen=True)
class ModuleRecord:
    """One exercise module; ``day_index`` references its DayRecord."""

    day_index: int
    title: str
    sort_order: int
    source_muscle_id: str
    sets: int
    owner_id: str | None
    status: str = DEFAULT_MODULE_STATUS
    module_type: str = MODULE_TYPE
    session_type: str = MODULE_SESSION_TYPE
    session_timing: str = MODULE_SESSION_TIMING


@dataclass(frozen=True)
class ProgramProjection:
    program: ProgramRecord
    days: tuple[DayRecord, ...]
    modules: tuple[ModuleRecord, ...]

    def modules_for_day(self, day_index: int) -> list[ModuleRecord]:
        return [m for m in self.modules if m.day_index == day_index]

    def day_title(self, day_index: int) -> str | None:
        return next((d.title for d in self.days if d.day_index == day_index), None)


def day_title(day_index: int, labels: Iterable[str]) -> str:
    """Day title such as "Mon \u2014 Pecs, Triceps"."""
    return f"{day_label(day_index)} \u2014 {', '.join(labels)}"


def module_title(label: str, sets: int) -> str:
    return f"{label} \u2014 {sets} sets"


def program_description(muscle_count: int, total_sets: int) -> str:
    return f"Converted from muscle plan. {muscle_count} muscles, {total_sets} total sets."


def project_program(
    slots: Iterable[MuscleSlot],
    name: str,
    owner_id: str | None = None,
    description: str | None = None,
    taxonomy: Taxonomy | None = None,
) -> ProgramProjection:
    """
    Project a plan's slots onto program / day / module records.

    Days are emitted in ascending day order and modules in (day, sort_order)
    order. Labels come from the taxonomy; ids unknown to it keep their raw
    id as label so that every slot still maps to a module.

    Args:
        slots: The plan's slots
        name: Plan name, used as the program title
        owner_id: Owner recorded on the program and every module
        description: Program description; defaults to a generated summary
        taxonomy: Reference data; defaults to the bundled taxonomy

    Returns:
        ProgramProjection
    """
    tax = taxonomy if taxonomy is not None else get_default_taxonomy()
    ordered = sorted(slots, key=lambda s: (s.day_index, s.sort_order))

    days: list[DayRecord] = []
    modules: list[ModuleRecord] = []
    for day in sorted({s.day_index for s in ordered}):
        day_slots = [s for s in ordered if s.day_index == day]
        days.append(DayRecord(day, day_title(day, (tax.label_for(s.muscle_id) for s in day_slots))))
        for s in day_slots:
            modules.append(
                ModuleRecord(
                    day_index=day,
                    title=module_title(tax.label_for(s.muscle_id), s.sets),
                    sort_order=s.sort_order,
                    source_muscle_id=s.muscle_id,
                    sets=s.sets,
                    owner_id=owner_id,
                )
            )

    if description is None:
        summary = compute_plan_volume(ordered, tax).summary
        description = program_description(summary.muscles_targeted, summary.total_sets)

    return ProgramProjection(
        program=ProgramRecord(title=name, description=description, owner_id=owner_id),
        days=tuple(days),
        modules=tuple(modules),
    )
