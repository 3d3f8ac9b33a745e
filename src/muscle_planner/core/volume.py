"""
Volume aggregation engine.

Pure functions that turn a plan's slot collection into the derived views the
planning board shows: per-muscle weekly volume with landmark zones, the
muscle × day frequency matrix, placement counts, consecutive-day warnings and
time-under-significant-tension (TUST) estimates.

Nothing here mutates its input or keeps state between calls, so the views
can be recomputed after every edit.
"""

import math
import re
from dataclasses import dataclass, field
from typing import Iterable

from .config import INTENSITY_ADVISORY, WORKING_SET_RIR_MAX, WORKING_SET_RPE_MIN, day_label
from .conflicts import consecutive_day_warnings
from .models import LandmarkZone, MuscleSlot
from .taxonomy import MuscleGroupDef, MuscleLandmarks, Taxonomy, get_default_taxonomy

_TEMPO_RE = re.compile(r"[0-9]{4}")

ZONE_LABELS: dict[str, str] = {
    "below_mv": "Below MV",
    "maintenance": "Maintenance",
    "productive": "Productive",
    "approaching_mrv": "Near MRV",
    "over_mrv": "Over MRV",
}

# Rich style per zone (terminal counterpart of the board's text colours)
ZONE_STYLES: dict[str, str] = {
    "below_mv": "bright_black",
    "maintenance": "yellow",
    "productive": "green",
    "approaching_mrv": "dark_orange",
    "over_mrv": "red",
}


# =============================================================================
# Per-slot rules
# =============================================================================


def parse_tempo(tempo: str | None) -> tuple[int, int, int, int] | None:
    """
    Parse a tempo string into its four phase durations.

    Valid only when exactly four ASCII digits: eccentric, bottom pause,
    concentric, top pause (whole seconds). "3120" → (3, 1, 2, 0).

    Args:
        tempo: Raw tempo string from the slot (may be None)

    Returns:
        Tuple of phase seconds, or None when absent/malformed
    """
    if tempo is None or not _TEMPO_RE.fullmatch(tempo):
        return None
    return (int(tempo[0]), int(tempo[1]), int(tempo[2]), int(tempo[3]))


def tempo_total_seconds(tempo: str | None) -> int | None:
    """Seconds per rep implied by a tempo string, or None without valid tempo."""
    phases = parse_tempo(tempo)
    return sum(phases) if phases is not None else None


def is_working_set(slot: MuscleSlot) -> bool:
    """
    Whether a slot's sets are hard enough to count as working sets.

    rir ≤ 5 or rpe ≥ 5. With neither recorded the slot is not a working set.
    """
    if slot.rir is not None and slot.rir <= WORKING_SET_RIR_MAX:
        return True
    if slot.rpe is not None and slot.rpe >= WORKING_SET_RPE_MIN:
        return True
    return False


def needs_intensity_data(slot: MuscleSlot) -> bool:
    """True for a slot with valid tempo but neither rir nor rpe recorded."""
    return parse_tempo(slot.tempo) is not None and slot.rir is None and slot.rpe is None


def slot_tust_seconds(slot: MuscleSlot) -> tuple[int, int]:
    """
    TUST contribution of one slot as (min, max) seconds.

    TUST_min = sets × rep_min × tempo_total
    TUST_max = sets × rep_max × tempo_total

    Zero unless the slot has valid tempo and qualifies as a working set.
    """
    total = tempo_total_seconds(slot.tempo)
    if total is None or not is_working_set(slot):
        return (0, 0)
    return (
        slot.sets * slot.effective_rep_min * total,
        slot.sets * slot.effective_rep_max * total,
    )


def classify_zone(total_sets: int, landmarks: MuscleLandmarks) -> LandmarkZone | None:
    """
    Classify weekly sets against a muscle's volume landmarks.

        0 < sets < MV        → below_mv
        MV ≤ sets < MEV      → maintenance
        MEV ≤ sets ≤ MAV     → productive
        MAV < sets ≤ MRV     → approaching_mrv
        sets > MRV           → over_mrv

    Returns None for zero (or negative) volume: such muscles are not shown.
    """
    if total_sets <= 0:
        return None
    if total_sets < landmarks.mv:
        return "below_mv"
    if total_sets < landmarks.mev:
        return "maintenance"
    if total_sets <= landmarks.mav:
        return "productive"
    if total_sets <= landmarks.mrv:
        return "approaching_mrv"
    return "over_mrv"


def intensity_advisories(slots: Iterable[MuscleSlot], taxonomy: Taxonomy) -> tuple[str, ...]:
    """
    One advisory per slot that has tempo but no rir/rpe.

    Informational only: such slots are excluded from TUST until intensity is
    recorded, but they never block saving or converting.
    """
    ordered = sorted(slots, key=lambda s: (s.day_index, s.sort_order))
    return tuple(
        f"{taxonomy.label_for(s.muscle_id)} ({day_label(s.day_index)}): {INTENSITY_ADVISORY}"
        for s in ordered
        if needs_intensity_data(s)
    )


def _round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


# =============================================================================
# Derived views
# =============================================================================


@dataclass(frozen=True)
class DayVolume:
    day_index: int
    sets: int


@dataclass(frozen=True)
class SubdivisionVolume:
    muscle_id: str
    label: str
    sets: int


@dataclass(frozen=True)
class MuscleVolumeEntry:
    """Weekly volume for one parent muscle group (subdivisions rolled up)."""

    muscle: MuscleGroupDef
    total_sets: int
    total_reps_min: int
    total_reps_max: int
    tust_seconds_min: int
    tust_seconds_max: int
    working_sets: int
    has_tempo: bool
    frequency: int  # distinct training days
    zone: LandmarkZone
    day_breakdown: tuple[DayVolume, ...]  # ascending day
    subdivision_breakdown: tuple[SubdivisionVolume, ...]  # descending sets


@dataclass(frozen=True)
class VolumeSummary:
    """Plan-wide totals."""

    total_sets: int = 0
    muscles_targeted: int = 0
    training_days: int = 0
    avg_sets_per_muscle: int = 0
    total_tust_seconds_min: int = 0
    total_tust_seconds_max: int = 0
    total_working_sets: int = 0


@dataclass(frozen=True)
class PlanVolume:
    """
    Every derived view of one plan, computed in a single pass.

    ``entries`` follows the canonical muscle order (heatmap rows);
    ``entries_by_volume`` is the descending-sets order of the volume list.
    """

    entries: tuple[MuscleVolumeEntry, ...] = ()
    summary: VolumeSummary = field(default_factory=VolumeSummary)
    frequency_matrix: dict[str, dict[int, int]] = field(default_factory=dict)
    placement_counts: dict[str, int] = field(default_factory=dict)
    day_totals: dict[int, int] = field(default_factory=dict)
    consecutive_day_warnings: tuple[str, ...] = ()
    intensity_advisories: tuple[str, ...] = ()

    @property
    def entries_by_volume(self) -> list[MuscleVolumeEntry]:
        # sorted() is stable: ties keep canonical order
        return sorted(self.entries, key=lambda e: -e.total_sets)

    def entry_for(self, muscle_id: str) -> MuscleVolumeEntry | None:
        return next((e for e in self.entries if e.muscle.id == muscle_id), None)


@dataclass
class _Accumulator:
    total_sets: int = 0
    reps_min: int = 0
    reps_max: int = 0
    tust_min: int = 0
    tust_max: int = 0
    working_sets: int = 0
    has_tempo: bool = False
    days: dict[int, int] = field(default_factory=dict)
    subs: dict[str, int] = field(default_factory=dict)


def compute_plan_volume(
    slots: Iterable[MuscleSlot],
    taxonomy: Taxonomy | None = None,
) -> PlanVolume:
    """
    Aggregate a slot collection into per-muscle volume and plan summary.

    Slots are grouped by their parent muscle (subdivisions roll up); slots
    whose muscle id is unknown to the taxonomy are skipped from the
    per-muscle views but still counted in plan totals and placement counts.

    Args:
        slots: The plan's slots, in any order
        taxonomy: Reference data; defaults to the bundled taxonomy

    Returns:
        PlanVolume with entries, summary, frequency matrix, placement counts,
        per-day totals, consecutive-day warnings and intensity advisories
    """
    tax = taxonomy if taxonomy is not None else get_default_taxonomy()
    slots = list(slots)

    groups: dict[str, _Accumulator] = {}
    placement_counts: dict[str, int] = {}
    day_totals: dict[int, int] = {}

    for slot in slots:
        placement_counts[slot.muscle_id] = placement_counts.get(slot.muscle_id, 0) + 1
        day_totals[slot.day_index] = day_totals.get(slot.day_index, 0) + slot.sets

        parent_id = tax.resolve_parent_muscle_id(slot.muscle_id)
        if parent_id is None:
            continue

        acc = groups.setdefault(parent_id, _Accumulator())
        acc.total_sets += slot.sets
        acc.reps_min += slot.sets * slot.effective_rep_min
        acc.reps_max += slot.sets * slot.effective_rep_max
        acc.days[slot.day_index] = acc.days.get(slot.day_index, 0) + slot.sets

        if parse_tempo(slot.tempo) is not None:
            acc.has_tempo = True
            if is_working_set(slot):
                tust_min, tust_max = slot_tust_seconds(slot)
                acc.tust_min += tust_min
                acc.tust_max += tust_max
                acc.working_sets += slot.sets

        if slot.muscle_id != parent_id:
            acc.subs[slot.muscle_id] = acc.subs.get(slot.muscle_id, 0) + slot.sets

    entries: list[MuscleVolumeEntry] = []
    for muscle in tax.muscle_groups:
        acc = groups.get(muscle.id)
        if acc is None:
            continue
        zone = classify_zone(acc.total_sets, muscle.landmarks)
        if zone is None:
            continue
        sub_order = {s.id: i for i, s in enumerate(tax.subdivisions_of(muscle.id))}
        subs = sorted(acc.subs.items(), key=lambda kv: (-kv[1], sub_order.get(kv[0], 0)))
        entries.append(
            MuscleVolumeEntry(
                muscle=muscle,
                total_sets=acc.total_sets,
                total_reps_min=acc.reps_min,
                total_reps_max=acc.reps_max,
                tust_seconds_min=acc.tust_min,
                tust_seconds_max=acc.tust_max,
                working_sets=acc.working_sets,
                has_tempo=acc.has_tempo,
                frequency=len(acc.days),
                zone=zone,
                day_breakdown=tuple(DayVolume(d, s) for d, s in sorted(acc.days.items())),
                subdivision_breakdown=tuple(
                    SubdivisionVolume(sub_id, tax.label_for(sub_id), sets) for sub_id, sets in subs
                ),
            )
        )

    total_sets = sum(s.sets for s in slots)
    muscles_targeted = len(entries)
    summary = VolumeSummary(
        total_sets=total_sets,
        muscles_targeted=muscles_targeted,
        training_days=len(day_totals),
        avg_sets_per_muscle=(
            _round_half_up(total_sets / muscles_targeted) if muscles_targeted > 0 else 0
        ),
        total_tust_seconds_min=sum(e.tust_seconds_min for e in entries),
        total_tust_seconds_max=sum(e.tust_seconds_max for e in entries),
        total_working_sets=sum(e.working_sets for e in entries),
    )

    frequency_matrix = {e.muscle.id: dict(sorted(groups[e.muscle.id].days.items())) for e in entries}
    days_by_muscle = {e.muscle.id: set(groups[e.muscle.id].days) for e in entries}

    return PlanVolume(
        entries=tuple(entries),
        summary=summary,
        frequency_matrix=frequency_matrix,
        placement_counts=placement_counts,
        day_totals=dict(sorted(day_totals.items())),
        consecutive_day_warnings=consecutive_day_warnings(days_by_muscle, tax),
        intensity_advisories=intensity_advisories(slots, tax),
    )


def format_tust(seconds: int) -> str:
    """Format TUST seconds as "m:ss" (e.g. 144 → "2:24")."""
    minutes, secs = divmod(int(seconds), 60)
    return f"{minutes}:{secs:02d}"
