"""
Unit tests for the volume aggregation engine and conflict checks.

Expectations are hand-computed; the small test taxonomy uses landmarks
MV=4, MEV=8, MAV=16, MRV=20 for every muscle.
"""

import pytest

from muscle_planner.core.conflicts import duplicate_placements, has_muscle_on_day
from muscle_planner.core.models import MuscleSlot
from muscle_planner.core.taxonomy import MuscleGroupDef, MuscleLandmarks, SubdivisionDef, Taxonomy
from muscle_planner.core.volume import (
    classify_zone,
    compute_plan_volume,
    format_tust,
    is_working_set,
    parse_tempo,
    slot_tust_seconds,
    tempo_total_seconds,
)

LANDMARKS = MuscleLandmarks(mv=4, mev=8, mav=16, mrv=20)


def _muscle(mid: str, label: str, region: str) -> MuscleGroupDef:
    return MuscleGroupDef(
        id=mid,
        label=label,
        body_region=region,
        color_class="bg-test",
        color_hex="#123456",
        landmarks=LANDMARKS,
    )


TAX = Taxonomy(
    muscle_groups=(
        _muscle("chest", "Chest", "push"),
        _muscle("triceps", "Triceps", "push"),
        _muscle("back", "Back", "pull"),
        _muscle("quads", "Quads", "legs"),
    ),
    subdivisions=(
        SubdivisionDef("upper_chest", "Upper Chest", "chest"),
        SubdivisionDef("lower_chest", "Lower Chest", "chest"),
    ),
)

_counter = iter(range(10_000))


def _slot(day: int, muscle: str, sets: int = 3, order: int = 0, **detail) -> MuscleSlot:
    return MuscleSlot(
        id=f"s{next(_counter)}",
        day_index=day,
        muscle_id=muscle,
        sets=sets,
        sort_order=order,
        **detail,
    )


# =============================================================================
# Tempo and working sets
# =============================================================================


class TestTempo:
    def test_valid_tempo(self):
        assert parse_tempo("3120") == (3, 1, 2, 0)
        assert tempo_total_seconds("3120") == 6

    @pytest.mark.parametrize("tempo", [None, "", "312", "31201", "31x0", "3 20", "３１２０"])
    def test_malformed_tempo_is_absent(self, tempo):
        assert parse_tempo(tempo) is None


class TestWorkingSet:
    def test_rir_threshold(self):
        assert is_working_set(_slot(1, "chest", rir=5))
        assert not is_working_set(_slot(1, "chest", rir=6))

    def test_rpe_threshold(self):
        assert is_working_set(_slot(1, "chest", rpe=5.0))
        assert not is_working_set(_slot(1, "chest", rpe=4.5))

    def test_no_intensity_is_not_working(self):
        assert not is_working_set(_slot(1, "chest"))

    def test_high_rir_but_hard_rpe_counts(self):
        assert is_working_set(_slot(1, "chest", rir=8, rpe=8.0))

    def test_tust_example(self):
        # 3 sets × 8 reps × 6 s = 144; 3 × 12 × 6 = 216
        slot = _slot(1, "chest", sets=3, rep_min=8, rep_max=12, tempo="3120", rir=3)
        assert slot_tust_seconds(slot) == (144, 216)

    def test_tust_zero_without_working_set(self):
        slot = _slot(1, "chest", sets=3, tempo="3120", rir=8)
        assert slot_tust_seconds(slot) == (0, 0)

    def test_format_tust(self):
        assert format_tust(144) == "2:24"
        assert format_tust(0) == "0:00"


# =============================================================================
# Zones
# =============================================================================


class TestClassifyZone:
    @pytest.mark.parametrize(
        "sets, zone",
        [
            (0, None),
            (3, "below_mv"),
            (4, "maintenance"),
            (7, "maintenance"),
            (8, "productive"),
            (16, "productive"),
            (17, "approaching_mrv"),
            (20, "approaching_mrv"),
            (21, "over_mrv"),
        ],
    )
    def test_boundaries(self, sets, zone):
        assert classify_zone(sets, LANDMARKS) == zone

    def test_zone_through_aggregation(self):
        # 17 sets over three days → just past MAV
        slots = [_slot(1, "chest", 6), _slot(3, "chest", 6), _slot(5, "chest", 5)]
        entry = compute_plan_volume(slots, TAX).entry_for("chest")
        assert entry.total_sets == 17
        assert entry.zone == "approaching_mrv"


# =============================================================================
# Aggregation
# =============================================================================


class TestComputePlanVolume:
    def test_empty_plan(self):
        result = compute_plan_volume([], TAX)
        s = result.summary
        assert (s.total_sets, s.muscles_targeted, s.training_days, s.avg_sets_per_muscle) == (0, 0, 0, 0)
        assert result.entries == ()
        assert result.consecutive_day_warnings == ()
        assert result.frequency_matrix == {}

    def test_idempotent(self):
        slots = [
            _slot(1, "chest", 4, tempo="3120", rir=2),
            _slot(2, "upper_chest", 3),
            _slot(2, "back", 5),
        ]
        assert compute_plan_volume(slots, TAX) == compute_plan_volume(slots, TAX)

    def test_subdivision_rolls_up(self):
        slots = [_slot(1, "upper_chest", 3, order=0), _slot(1, "chest", 4, order=1)]
        result = compute_plan_volume(slots, TAX)

        assert len(result.entries) == 1
        entry = result.entries[0]
        assert entry.muscle.id == "chest"
        assert entry.total_sets == 7
        assert [(s.muscle_id, s.sets) for s in entry.subdivision_breakdown] == [("upper_chest", 3)]
        assert entry.frequency == 1

    def test_subdivision_breakdown_descending(self):
        slots = [_slot(1, "upper_chest", 2), _slot(2, "lower_chest", 5)]
        entry = compute_plan_volume(slots, TAX).entry_for("chest")
        assert [s.muscle_id for s in entry.subdivision_breakdown] == ["lower_chest", "upper_chest"]

    def test_reps_default_range(self):
        # 3 sets at default 8-12 → 24-36 reps; 2 sets at 5-5 → 10-10
        slots = [_slot(1, "back", 3), _slot(3, "back", 2, rep_min=5, rep_max=5)]
        entry = compute_plan_volume(slots, TAX).entry_for("back")
        assert (entry.total_reps_min, entry.total_reps_max) == (34, 46)

    def test_working_set_counts_and_tust(self):
        slots = [
            _slot(1, "chest", 3, rep_min=8, rep_max=12, tempo="3120", rir=3),
            _slot(4, "chest", 3, rep_min=8, rep_max=12, tempo="3120", rir=8),
        ]
        entry = compute_plan_volume(slots, TAX).entry_for("chest")
        assert entry.total_sets == 6
        assert entry.working_sets == 3
        assert (entry.tust_seconds_min, entry.tust_seconds_max) == (144, 216)
        assert entry.has_tempo

    def test_malformed_tempo_has_no_tempo(self):
        entry = compute_plan_volume([_slot(1, "chest", tempo="31", rir=1)], TAX).entry_for("chest")
        assert not entry.has_tempo
        assert entry.working_sets == 0

    def test_conservation_with_unknown_id(self):
        slots = [_slot(1, "chest", 4), _slot(2, "back", 5), _slot(3, "retired_muscle", 6)]
        result = compute_plan_volume(slots, TAX)

        resolvable = sum(s.sets for s in slots if TAX.resolve_parent_muscle_id(s.muscle_id))
        assert sum(e.total_sets for e in result.entries) == resolvable == 9
        # unknown ids still count in plan-wide totals and badges
        assert result.summary.total_sets == 15
        assert result.placement_counts["retired_muscle"] == 1

    def test_summary(self):
        # 4 + 3 + 5 = 12 sets over 2 muscles → 6 per muscle; days {1, 2}
        slots = [_slot(1, "chest", 4), _slot(2, "upper_chest", 3), _slot(2, "back", 5)]
        s = compute_plan_volume(slots, TAX).summary
        assert s.total_sets == 12
        assert s.muscles_targeted == 2
        assert s.training_days == 2
        assert s.avg_sets_per_muscle == 6

    def test_average_rounds_half_up(self):
        # 3 + 2 = 5 sets over 2 muscles → 2.5 → 3
        slots = [_slot(1, "chest", 3), _slot(2, "back", 2)]
        assert compute_plan_volume(slots, TAX).summary.avg_sets_per_muscle == 3

    def test_entries_order(self):
        slots = [_slot(1, "back", 3), _slot(2, "chest", 5), _slot(3, "quads", 3)]
        result = compute_plan_volume(slots, TAX)
        assert [e.muscle.id for e in result.entries] == ["chest", "back", "quads"]
        # descending sets; the back/quads tie keeps taxonomy order
        assert [e.muscle.id for e in result.entries_by_volume] == ["chest", "back", "quads"]

    def test_frequency_matrix_and_day_totals(self):
        slots = [_slot(1, "chest", 4), _slot(1, "upper_chest", 2), _slot(4, "chest", 3), _slot(4, "back", 5)]
        result = compute_plan_volume(slots, TAX)
        assert result.frequency_matrix == {"chest": {1: 6, 4: 3}, "back": {4: 5}}
        assert result.day_totals == {1: 6, 4: 8}
        assert result.placement_counts == {"chest": 2, "upper_chest": 1, "back": 1}

    def test_intensity_advisory(self):
        slots = [_slot(2, "chest", tempo="3120"), _slot(3, "back", tempo="3120", rpe=7.0)]
        result = compute_plan_volume(slots, TAX)
        assert result.intensity_advisories == ("Chest (Tue): Add RIR or RPE for TUST tracking",)


# =============================================================================
# Conflicts
# =============================================================================


class TestConsecutiveDayWarnings:
    def test_adjacent_days_warn_once(self):
        result = compute_plan_volume([_slot(2, "back"), _slot(3, "back")], TAX)
        assert result.consecutive_day_warnings == ("Back on consecutive days (2 & 3)",)

    def test_non_adjacent_days_no_warning(self):
        result = compute_plan_volume([_slot(2, "back"), _slot(5, "back")], TAX)
        assert result.consecutive_day_warnings == ()

    def test_week_does_not_wrap(self):
        result = compute_plan_volume([_slot(7, "back"), _slot(1, "back")], TAX)
        assert result.consecutive_day_warnings == ()

    def test_subdivision_counts_for_parent(self):
        result = compute_plan_volume([_slot(1, "chest"), _slot(2, "upper_chest")], TAX)
        assert result.consecutive_day_warnings == ("Chest on consecutive days (1 & 2)",)

    def test_run_of_three_days(self):
        slots = [_slot(1, "quads"), _slot(2, "quads"), _slot(3, "quads")]
        result = compute_plan_volume(slots, TAX)
        assert result.consecutive_day_warnings == (
            "Quads on consecutive days (1 & 2)",
            "Quads on consecutive days (2 & 3)",
        )


class TestPlacementChecks:
    def test_has_muscle_on_day_exact_id(self):
        slots = [_slot(1, "chest")]
        assert has_muscle_on_day(slots, 1, "chest")
        assert not has_muscle_on_day(slots, 2, "chest")
        # subdivision may share the day with its parent
        assert not has_muscle_on_day(slots, 1, "upper_chest")

    def test_exclude_slot(self):
        slot = _slot(1, "chest")
        assert not has_muscle_on_day([slot], 1, "chest", exclude_slot_id=slot.id)

    def test_duplicate_placements(self):
        slots = [_slot(1, "chest", order=0), _slot(1, "chest", order=1), _slot(2, "back")]
        assert duplicate_placements(slots) == [(1, "chest")]
