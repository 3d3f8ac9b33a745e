"""
Scheduling conflict checks for the planning board.

- consecutive_day_warnings: muscles trained on back-to-back days (computed
  from the volume engine's parent-muscle grouping, no second pass over slots)
- has_muscle_on_day / duplicate_placements: the one-muscle-per-day rule that
  callers check before dispatching add/move actions
"""

from typing import Iterable, Mapping

from .models import MuscleSlot
from .taxonomy import Taxonomy


def consecutive_day_warnings(
    days_by_muscle: Mapping[str, Iterable[int]],
    taxonomy: Taxonomy,
) -> tuple[str, ...]:
    """
    Warn about each pair of adjacent training days per muscle.

    For every parent muscle, its distinct days are sorted and each
    neighbouring pair that differs by exactly 1 yields one warning.
    Days 7 and 1 are not adjacent (the week does not wrap).

    Args:
        days_by_muscle: parent muscle id → days it appears on
        taxonomy: Used for labels and canonical muscle order

    Returns:
        Warnings in canonical muscle order, then day order, e.g.
        "Lats on consecutive days (2 & 3)"
    """
    found: list[str] = []
    for muscle_id in sorted(days_by_muscle, key=taxonomy.order_of):
        muscle = taxonomy.get_muscle(muscle_id)
        if muscle is None:
            continue
        days = sorted(set(days_by_muscle[muscle_id]))
        for a, b in zip(days, days[1:]):
            if b - a == 1:
                found.append(f"{muscle.label} on consecutive days ({a} & {b})")
    return tuple(found)


def has_muscle_on_day(
    slots: Iterable[MuscleSlot],
    day_index: int,
    muscle_id: str,
    exclude_slot_id: str | None = None,
) -> bool:
    """
    True if ``muscle_id`` is already placed on ``day_index``.

    Matching is by exact id, so a subdivision may share a day with its parent.
    ``exclude_slot_id`` ignores one slot (the one being moved).
    """
    return any(
        s.day_index == day_index and s.muscle_id == muscle_id and s.id != exclude_slot_id
        for s in slots
    )


def duplicate_placements(slots: Iterable[MuscleSlot]) -> list[tuple[int, str]]:
    """(day, muscle_id) pairs that appear more than once, e.g. after pasting a day."""
    seen: set[tuple[int, str]] = set()
    dupes: list[tuple[int, str]] = []
    for s in sorted(slots, key=lambda s: (s.day_index, s.sort_order)):
        key = (s.day_index, s.muscle_id)
        if key in seen and key not in dupes:
            dupes.append(key)
        seen.add(key)
    return dupes
