"""
Built-in plan presets.

Presets are loaded from the bundled ``src/muscle_planner/presets.yaml`` and
``~/.muscle-planner/presets.yaml`` (user presets are appended; a user preset
with the same name replaces the bundled one).

Each call to ``SystemPreset.build_slots`` hands out fresh slot ids so a
preset can be loaded into several plans without id collisions.
"""

import warnings
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .config import DAYS_PER_WEEK, clamp_sets
from .models import MuscleSlot
from .reducer import SlotIdFactory, new_slot_id
from .taxonomy.loader import _load_yaml_file, get_bundled_yaml_path, get_user_yaml_path

PRESETS_FILENAME = "presets.yaml"


@dataclass(frozen=True)
class PresetEntry:
    day_index: int
    muscle_id: str
    sets: int


@dataclass(frozen=True)
class SystemPreset:
    """A named weekly template: an ordered list of (day, muscle, sets)."""

    name: str
    description: str
    entries: tuple[PresetEntry, ...]

    def build_slots(self, new_id: SlotIdFactory = new_slot_id) -> tuple[MuscleSlot, ...]:
        """Materialize the preset as slots with fresh ids and 0..n-1 orders per day."""
        next_order: dict[int, int] = {}
        slots = []
        for e in self.entries:
            order = next_order.get(e.day_index, 0)
            next_order[e.day_index] = order + 1
            slots.append(
                MuscleSlot(
                    id=new_id(),
                    day_index=e.day_index,
                    muscle_id=e.muscle_id,
                    sets=e.sets,
                    sort_order=order,
                )
            )
        return tuple(slots)

    @property
    def total_sets(self) -> int:
        return sum(e.sets for e in self.entries)

    @property
    def training_days(self) -> int:
        return len({e.day_index for e in self.entries})


def preset_from_dict(d: dict) -> SystemPreset:
    """
    Convert a raw preset record to a SystemPreset.

    Raises:
        ValueError: If the name is missing, a day is outside 1-7 or an
            entry is not a [muscle_id, sets] pair
    """
    name = d.get("name")
    if not name:
        raise ValueError("preset missing name")
    days = d.get("days") or {}
    if not isinstance(days, dict):
        raise ValueError(f"preset {name!r}: days must be a mapping")

    entries: list[PresetEntry] = []
    for day_key in sorted(days, key=int):
        day = int(day_key)
        if not 1 <= day <= DAYS_PER_WEEK:
            raise ValueError(f"preset {name!r}: day {day} outside 1-{DAYS_PER_WEEK}")
        for pair in days[day_key] or []:
            if not isinstance(pair, (list, tuple)) or len(pair) != 2:
                raise ValueError(f"preset {name!r}: bad entry {pair!r} on day {day}")
            muscle_id, sets = pair
            entries.append(PresetEntry(day, str(muscle_id), clamp_sets(sets)))

    return SystemPreset(
        name=str(name),
        description=str(d.get("description") or ""),
        entries=tuple(entries),
    )


def presets_from_dict(raw: dict[str, Any]) -> list[SystemPreset]:
    presets: list[SystemPreset] = []
    for rec in raw.get("presets") or []:
        if not isinstance(rec, dict):
            warnings.warn(f"muscle-planner: skipping malformed preset {rec!r}", stacklevel=2)
            continue
        try:
            presets.append(preset_from_dict(rec))
        except (ValueError, TypeError) as exc:
            warnings.warn(f"muscle-planner: skipping preset {rec.get('name')!r}: {exc}", stacklevel=2)
    return presets


def load_presets(
    bundled_path: Path | None = None,
    user_path: Path | None = None,
) -> list[SystemPreset]:
    """Load bundled presets followed by user presets (same name replaces)."""
    if bundled_path is None:
        bundled_path = get_bundled_yaml_path(PRESETS_FILENAME)
    if user_path is None:
        user_path = get_user_yaml_path(PRESETS_FILENAME)

    presets: list[SystemPreset] = []
    if bundled_path is not None:
        presets = presets_from_dict(_load_yaml_file(bundled_path))
    if user_path is not None:
        for p in presets_from_dict(_load_yaml_file(user_path)):
            presets = [q for q in presets if q.name != p.name]
            presets.append(p)
    return presets


def get_preset(name: str, presets: list[SystemPreset] | None = None) -> SystemPreset:
    """
    Look up a preset by name (case-insensitive).

    Raises:
        ValueError: If no preset has that name
    """
    presets = presets if presets is not None else load_presets()
    for p in presets:
        if p.name.lower() == name.strip().lower():
            return p
    valid = ", ".join(p.name for p in presets)
    raise ValueError(f"Unknown preset '{name}'. Available: {valid}")
