"""
JSON serialization for plan data.

Handles conversion between the dataclasses and JSON-compatible dicts.
Persisted slot records use the camelCase keys the planning board has always
written (``dayIndex``, ``muscleId``, ``sortOrder``, ...); legacy records may
lack ``id``, which is back-filled when the plan is loaded into the reducer.
"""

import json
import math
from typing import Any

from ..core.config import DAYS_PER_WEEK, DEFAULT_PLAN_NAME, DEFAULT_SETS, clamp_reps, clamp_rir, clamp_rpe, clamp_sets
from ..core.models import MuscleSlot, PlanState
from ..core.projector import ProgramProjection
from ..core.volume import PlanVolume, format_tust


class ValidationError(Exception):
    """Raised when data validation fails."""

    pass


def validate_day_index(value: Any) -> int:
    """
    Validate a persisted day index.

    Raises:
        ValidationError: If the value is not an integer in 1-7
    """
    if isinstance(value, bool):
        raise ValidationError(f"Invalid dayIndex: {value!r}")
    try:
        day = int(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid dayIndex: {value!r}") from e
    if not 1 <= day <= DAYS_PER_WEEK:
        raise ValidationError(f"dayIndex must be 1-{DAYS_PER_WEEK}, got {day}")
    return day


def _optional_int(value: Any, name: str) -> int | None:
    if value is None or value == "":
        return None
    try:
        return int(value)
    except (TypeError, ValueError, OverflowError) as e:
        raise ValidationError(f"Invalid {name}: {value!r}") from e


def _optional_float(value: Any, name: str) -> float | None:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError) as e:
        raise ValidationError(f"Invalid {name}: {value!r}") from e
    if not math.isfinite(number):
        raise ValidationError(f"Invalid {name}: {value!r}")
    return number


# =============================================================================
# Slots
# =============================================================================


def slot_to_dict(slot: MuscleSlot) -> dict[str, Any]:
    """
    Convert MuscleSlot to a persisted record.

    Optional detail fields are only written when set.
    """
    result: dict[str, Any] = {
        "id": slot.id,
        "dayIndex": slot.day_index,
        "muscleId": slot.muscle_id,
        "sets": slot.sets,
        "sortOrder": slot.sort_order,
    }
    if slot.rep_min is not None:
        result["repMin"] = slot.rep_min
    if slot.rep_max is not None:
        result["repMax"] = slot.rep_max
    if slot.tempo is not None:
        result["tempo"] = slot.tempo
    if slot.rir is not None:
        result["rir"] = slot.rir
    if slot.rpe is not None:
        result["rpe"] = slot.rpe
    return result


def dict_to_slot(data: dict[str, Any]) -> MuscleSlot:
    """
    Convert a persisted record to MuscleSlot.

    Numeric detail is clamped into range rather than rejected; a missing id
    becomes "" and is replaced when the plan is hydrated.

    Raises:
        ValidationError: If the record is not a mapping, the day is invalid
            or the muscle id is missing
    """
    if not isinstance(data, dict):
        raise ValidationError(f"Slot record must be an object, got {type(data).__name__}")

    muscle_id = data.get("muscleId")
    if not isinstance(muscle_id, str) or not muscle_id:
        raise ValidationError(f"Slot record missing muscleId: {data!r}")

    sets = _optional_int(data.get("sets"), "sets")
    rep_min = _optional_int(data.get("repMin"), "repMin")
    rep_max = _optional_int(data.get("repMax"), "repMax")
    rir = _optional_int(data.get("rir"), "rir")
    rpe = _optional_float(data.get("rpe"), "rpe")
    tempo = data.get("tempo")

    return MuscleSlot(
        id=str(data.get("id") or ""),
        day_index=validate_day_index(data.get("dayIndex")),
        muscle_id=muscle_id,
        sets=clamp_sets(sets) if sets is not None else DEFAULT_SETS,
        sort_order=_optional_int(data.get("sortOrder"), "sortOrder") or 0,
        rep_min=clamp_reps(rep_min) if rep_min is not None else None,
        rep_max=clamp_reps(rep_max) if rep_max is not None else None,
        tempo=str(tempo) if tempo else None,
        rir=clamp_rir(rir) if rir is not None else None,
        rpe=clamp_rpe(rpe) if rpe is not None else None,
    )


# =============================================================================
# Plans
# =============================================================================


def plan_record(name: str, description: str, slots: tuple[MuscleSlot, ...] | list[MuscleSlot]) -> dict[str, Any]:
    """The {name, description, slots[]} payload handed to the persistence store."""
    return {
        "name": name,
        "description": description,
        "slots": [slot_to_dict(s) for s in slots],
    }


def state_to_record(state: PlanState) -> dict[str, Any]:
    return plan_record(state.name, state.description, state.slots)


def record_to_plan(data: dict[str, Any]) -> tuple[str, str, tuple[MuscleSlot, ...]]:
    """
    Parse a stored plan record into (name, description, slots).

    Raises:
        ValidationError: If the record or any slot record is malformed
    """
    if not isinstance(data, dict):
        raise ValidationError("Plan record must be an object")
    raw_slots = data.get("slots") or []
    if not isinstance(raw_slots, list):
        raise ValidationError("Plan record 'slots' must be a list")
    slots = tuple(dict_to_slot(s) for s in raw_slots)
    return (
        str(data.get("name") or DEFAULT_PLAN_NAME),
        str(data.get("description") or ""),
        slots,
    )


# =============================================================================
# Derived views (JSON output)
# =============================================================================


def plan_volume_to_dict(volume: PlanVolume) -> dict[str, Any]:
    """Convert the aggregation result to a JSON-compatible dict."""
    s = volume.summary
    return {
        "summary": {
            "totalSets": s.total_sets,
            "musclesTargeted": s.muscles_targeted,
            "trainingDays": s.training_days,
            "avgSetsPerMuscle": s.avg_sets_per_muscle,
            "totalTustSecondsMin": s.total_tust_seconds_min,
            "totalTustSecondsMax": s.total_tust_seconds_max,
            "totalWorkingSets": s.total_working_sets,
        },
        "entries": [
            {
                "muscleId": e.muscle.id,
                "label": e.muscle.label,
                "totalSets": e.total_sets,
                "totalRepsMin": e.total_reps_min,
                "totalRepsMax": e.total_reps_max,
                "tustSecondsMin": e.tust_seconds_min,
                "tustSecondsMax": e.tust_seconds_max,
                "tust": f"{format_tust(e.tust_seconds_min)}-{format_tust(e.tust_seconds_max)}",
                "workingSets": e.working_sets,
                "hasTempo": e.has_tempo,
                "frequency": e.frequency,
                "zone": e.zone,
                "dayBreakdown": [{"dayIndex": d.day_index, "sets": d.sets} for d in e.day_breakdown],
                "subdivisionBreakdown": [
                    {"muscleId": sub.muscle_id, "label": sub.label, "sets": sub.sets}
                    for sub in e.subdivision_breakdown
                ],
            }
            for e in volume.entries_by_volume
        ],
        # JSON object keys must be strings
        "frequencyMatrix": {
            m: {str(d): sets for d, sets in days.items()} for m, days in volume.frequency_matrix.items()
        },
        "placementCounts": dict(volume.placement_counts),
        "dayTotals": {str(d): sets for d, sets in volume.day_totals.items()},
        "consecutiveDayWarnings": list(volume.consecutive_day_warnings),
        "intensityAdvisories": list(volume.intensity_advisories),
    }


def projection_to_dict(projection: ProgramProjection) -> dict[str, Any]:
    """Convert a program projection to the records handed to the program system."""
    p = projection.program
    return {
        "program": {
            "title": p.title,
            "description": p.description,
            "visibility": p.visibility,
            "ownerId": p.owner_id,
        },
        "days": [{"dayIndex": d.day_index, "title": d.title} for d in projection.days],
        "modules": [
            {
                "dayIndex": m.day_index,
                "dayTitle": projection.day_title(m.day_index),
                "title": m.title,
                "sortOrder": m.sort_order,
                "sourceMuscleId": m.source_muscle_id,
                "sets": m.sets,
                "ownerId": m.owner_id,
                "status": m.status,
                "moduleType": m.module_type,
                "sessionType": m.session_type,
                "sessionTiming": m.session_timing,
            }
            for m in projection.modules
        ],
    }


def to_json(data: Any) -> str:
    return json.dumps(data, indent=2, ensure_ascii=False)
