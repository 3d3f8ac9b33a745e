"""
Tests for the plan mutation reducer: structural edits, sort-order
contiguity, undo/redo history and the no-op contract.
"""

import itertools

import pytest

from muscle_planner.core.models import MuscleSlot, PlanState
from muscle_planner.core.reducer import (
    UNSET,
    AddSlot,
    ClearAll,
    LoadPreset,
    LoadTemplate,
    MarkSaved,
    MoveSlot,
    PasteDay,
    Redo,
    RemoveSlot,
    Reorder,
    SaveError,
    Saving,
    SelectDay,
    SetAllSetsForMuscle,
    SetDescription,
    SetName,
    SetSets,
    SetSlotDetail,
    Undo,
    hydrate_slot_ids,
    reduce,
    reduce_all,
)


def _ids():
    counter = itertools.count(1)
    return lambda: f"id{next(counter)}"


def _orders_contiguous(state: PlanState) -> bool:
    for day in {s.day_index for s in state.slots}:
        orders = sorted(s.sort_order for s in state.slots if s.day_index == day)
        if orders != list(range(len(orders))):
            return False
    return True


@pytest.fixture
def week():
    """Mon: pecs, triceps, shoulders; Wed: lats. Clean, no history."""
    new_id = _ids()
    state = reduce_all(
        PlanState(),
        [
            AddSlot(1, "pecs", 4),
            AddSlot(1, "triceps", 3),
            AddSlot(1, "shoulders", 3),
            AddSlot(3, "lats", 5),
        ],
        new_id,
    )
    return PlanState(slots=state.slots)


def _day(state: PlanState, day: int) -> list[str]:
    return [s.muscle_id for s in state.slots_for_day(day)]


# =============================================================================
# Add / remove / edit
# =============================================================================


class TestAddSlot:
    def test_appends_after_last(self, week):
        state = reduce(week, AddSlot(1, "core"))
        assert _day(state, 1) == ["pecs", "triceps", "shoulders", "core"]
        assert state.slots_for_day(1)[-1].sort_order == 3

    def test_default_and_clamped_sets(self):
        state = reduce(PlanState(), AddSlot(2, "quads"))
        assert state.slots[0].sets == 3
        state = reduce(state, AddSlot(3, "quads", 50))
        assert state.slots_for_day(3)[0].sets == 20

    def test_marks_dirty_and_records_history(self):
        state = reduce(PlanState(), AddSlot(2, "quads"))
        assert state.is_dirty
        assert state.can_undo
        assert not state.can_redo

    def test_invalid_day_is_noop(self, week):
        assert reduce(week, AddSlot(8, "pecs")) is week
        assert reduce(week, AddSlot(0, "pecs")) is week

    def test_unique_ids(self):
        state = reduce_all(PlanState(), [AddSlot(d, "pecs") for d in range(1, 8)])
        assert len({s.id for s in state.slots}) == 7


class TestRemoveSlot:
    def test_renumbers_day(self, week):
        triceps = week.slots_for_day(1)[1]
        state = reduce(week, RemoveSlot(triceps.id))
        assert _day(state, 1) == ["pecs", "shoulders"]
        assert _orders_contiguous(state)

    def test_missing_slot_is_noop(self, week):
        assert reduce(week, RemoveSlot("nope")) is week


class TestSetSlotDetail:
    def test_set_sets_clamps(self, week):
        pecs = week.slots_for_day(1)[0]
        state = reduce(week, SetSets(pecs.id, 0))
        assert state.find_slot(pecs.id).sets == 1

    def test_partial_update_keeps_other_fields(self, week):
        pecs = week.slots_for_day(1)[0]
        state = reduce(week, SetSlotDetail(pecs.id, tempo="3120", rir=2))
        state = reduce(state, SetSlotDetail(pecs.id, rpe=7.5))
        slot = state.find_slot(pecs.id)
        assert (slot.tempo, slot.rir, slot.rpe, slot.sets) == ("3120", 2, 7.5, 4)

    def test_none_clears_field(self, week):
        pecs = week.slots_for_day(1)[0]
        state = reduce(week, SetSlotDetail(pecs.id, tempo="3120"))
        state = reduce(state, SetSlotDetail(pecs.id, tempo=None))
        assert state.find_slot(pecs.id).tempo is None

    def test_empty_tempo_becomes_none(self, week):
        pecs = week.slots_for_day(1)[0]
        state = reduce(week, SetSlotDetail(pecs.id, tempo="  "))
        assert state is week  # nothing changed

    def test_rpe_snaps_to_half_steps(self, week):
        pecs = week.slots_for_day(1)[0]
        state = reduce(week, SetSlotDetail(pecs.id, rpe=7.3))
        assert state.find_slot(pecs.id).rpe == 7.5

    def test_rep_range_edited_bound_wins(self, week):
        pecs = week.slots_for_day(1)[0]
        # raising rep_min above the default max (12) pulls rep_max up
        state = reduce(week, SetSlotDetail(pecs.id, rep_min=15))
        slot = state.find_slot(pecs.id)
        assert (slot.rep_min, slot.rep_max) == (15, 15)
        # lowering rep_max below rep_min pulls rep_min down
        state = reduce(state, SetSlotDetail(pecs.id, rep_max=6))
        slot = state.find_slot(pecs.id)
        assert (slot.rep_min, slot.rep_max) == (6, 6)

    def test_unset_fields_do_nothing(self, week):
        pecs = week.slots_for_day(1)[0]
        assert reduce(week, SetSlotDetail(pecs.id, sets=UNSET)) is week

    def test_missing_slot_is_noop(self, week):
        assert reduce(week, SetSets("nope", 5)) is week

    def test_non_string_tempo_is_coerced(self, week):
        pecs = week.slots_for_day(1)[0]
        state = reduce(week, SetSlotDetail(pecs.id, tempo=3120))
        assert state.find_slot(pecs.id).tempo == "3120"

    @pytest.mark.parametrize("rpe", [float("nan"), float("inf")])
    def test_non_finite_rpe_is_ignored(self, week, rpe):
        pecs = week.slots_for_day(1)[0]
        assert reduce(week, SetSlotDetail(pecs.id, rpe=rpe)) is week


class TestSetAllSetsForMuscle:
    def test_exact_id_only(self):
        state = reduce_all(
            PlanState(),
            [AddSlot(1, "pecs", 3), AddSlot(1, "pecs_clavicular", 3), AddSlot(4, "pecs", 2)],
        )
        state = reduce(state, SetAllSetsForMuscle("pecs", 6))
        sets = {(s.day_index, s.muscle_id): s.sets for s in state.slots}
        assert sets == {(1, "pecs"): 6, (1, "pecs_clavicular"): 3, (4, "pecs"): 6}

    def test_no_match_is_noop(self, week):
        assert reduce(week, SetAllSetsForMuscle("calves", 4)) is week


# =============================================================================
# Ordering
# =============================================================================


class TestReorder:
    def test_moves_within_day(self, week):
        state = reduce(week, Reorder(1, 2, 0))
        assert _day(state, 1) == ["shoulders", "pecs", "triceps"]
        assert _orders_contiguous(state)

    @pytest.mark.parametrize("src, dst", [(3, 0), (0, 3), (-1, 0)])
    def test_out_of_range_is_noop(self, week, src, dst):
        assert reduce(week, Reorder(1, src, dst)) is week

    def test_empty_day_is_noop(self, week):
        assert reduce(week, Reorder(6, 0, 0)) is week

    def test_contiguous_after_every_permutation(self, week):
        for src, dst in itertools.product(range(3), repeat=2):
            assert _orders_contiguous(reduce(week, Reorder(1, src, dst)))


class TestMoveSlot:
    def test_move_to_other_day(self, week):
        triceps = week.slots_for_day(1)[1]
        state = reduce(week, MoveSlot(triceps.id, 3, 0))
        assert _day(state, 1) == ["pecs", "shoulders"]
        assert _day(state, 3) == ["triceps", "lats"]
        assert state.find_slot(triceps.id).day_index == 3  # id stable across moves
        assert _orders_contiguous(state)

    def test_move_to_end_of_empty_day(self, week):
        pecs = week.slots_for_day(1)[0]
        state = reduce(week, MoveSlot(pecs.id, 6, 0))
        assert _day(state, 6) == ["pecs"]
        assert _orders_contiguous(state)

    def test_move_within_same_day(self, week):
        pecs = week.slots_for_day(1)[0]
        state = reduce(week, MoveSlot(pecs.id, 1, 2))
        assert _day(state, 1) == ["triceps", "shoulders", "pecs"]

    def test_invalid_target_is_noop(self, week):
        pecs = week.slots_for_day(1)[0]
        assert reduce(week, MoveSlot(pecs.id, 9, 0)) is week
        assert reduce(week, MoveSlot(pecs.id, 3, 5)) is week
        assert reduce(week, MoveSlot("nope", 3, 0)) is week


class TestPasteDay:
    def test_appends_to_occupied_day(self, week):
        state = reduce(week, PasteDay(1, 3))
        # |A| + |B| = 3 + 1
        assert _day(state, 3) == ["lats", "pecs", "triceps", "shoulders"]
        assert _orders_contiguous(state)

    def test_copies_detail_with_new_ids(self, week):
        pecs = week.slots_for_day(1)[0]
        state = reduce(week, SetSlotDetail(pecs.id, tempo="3120", rir=2))
        state = reduce(state, PasteDay(1, 5))
        copy = state.slots_for_day(5)[0]
        assert copy.id != pecs.id
        assert (copy.muscle_id, copy.sets, copy.tempo, copy.rir) == ("pecs", 4, "3120", 2)

    def test_duplicates_are_kept(self, week):
        state = reduce(week, PasteDay(1, 1))
        assert _day(state, 1) == ["pecs", "triceps", "shoulders"] * 2

    def test_empty_source_is_noop(self, week):
        assert reduce(week, PasteDay(6, 1)) is week


# =============================================================================
# History
# =============================================================================


class TestUndoRedo:
    def test_round_trip(self, week):
        actions = [
            AddSlot(2, "quads", 4),
            Reorder(1, 0, 2),
            PasteDay(1, 4),
            SetName("Block A"),
            SetDescription("hypertrophy"),
            RemoveSlot(week.slots_for_day(3)[0].id),
        ]
        final = reduce_all(week, actions)

        state = final
        for _ in actions:
            state = reduce(state, Undo())
        assert state.snapshot() == week.snapshot()
        assert not state.can_undo

        for _ in actions:
            state = reduce(state, Redo())
        assert state.snapshot() == final.snapshot()
        assert not state.can_redo

    def test_new_edit_clears_redo(self, week):
        state = reduce_all(week, [AddSlot(2, "quads"), Undo()])
        assert state.can_redo
        state = reduce(state, AddSlot(2, "calves"))
        assert not state.can_redo

    def test_undo_with_empty_history_is_noop(self, week):
        assert reduce(week, Undo()) is week
        assert reduce(week, Redo()) is week

    def test_undo_marks_dirty(self, week):
        state = reduce_all(week, [AddSlot(2, "quads"), MarkSaved("p1"), Undo()])
        assert state.is_dirty

    def test_select_day_not_in_history(self, week):
        state = reduce(week, SelectDay(4))
        assert state.selected_day == 4
        assert not state.can_undo
        assert not state.is_dirty
        assert reduce(week, SelectDay(9)) is week


# =============================================================================
# Loading and save lifecycle
# =============================================================================


class TestLoading:
    def test_load_template_backfills_ids_and_resets(self, week):
        legacy = (
            MuscleSlot(id="", day_index=2, muscle_id="pecs", sort_order=5),
            MuscleSlot(id="", day_index=2, muscle_id="lats", sort_order=9),
            MuscleSlot(id="dup", day_index=4, muscle_id="quads"),
            MuscleSlot(id="dup", day_index=4, muscle_id="calves", sort_order=1),
        )
        dirty = reduce(week, AddSlot(2, "quads"))
        state = reduce(dirty, LoadTemplate("plan-1", "Loaded", "desc", legacy), _ids())

        assert all(s.id for s in state.slots)
        assert len({s.id for s in state.slots}) == 4
        assert _orders_contiguous(state)
        assert _day(state, 2) == ["pecs", "lats"]
        assert (state.plan_id, state.name, state.description) == ("plan-1", "Loaded", "desc")
        assert not state.is_dirty
        assert not state.can_undo

    def test_hydrate_keeps_existing_unique_ids(self):
        slots = (MuscleSlot(id="a", day_index=1, muscle_id="pecs"),)
        assert hydrate_slot_ids(slots) == slots

    def test_load_preset_is_undoable(self, week):
        preset = (MuscleSlot(id="x", day_index=5, muscle_id="glutes"),)
        state = reduce(week, LoadPreset(preset, name="Glute Day"))
        assert _day(state, 5) == ["glutes"]
        assert state.name == "Glute Day"
        assert state.is_dirty
        assert reduce(state, Undo()).snapshot() == week.snapshot()

    def test_loaded_slots_are_clamped(self):
        wild = (
            MuscleSlot(id="a", day_index=1, muscle_id="pecs", sets=50, rep_min=0, rir=14, rpe=12.0),
            MuscleSlot(id="b", day_index=1, muscle_id="lats", rep_min=20, rep_max=10, rpe=float("nan")),
        )
        for action in (LoadPreset(wild), LoadTemplate("plan-1", "Loaded", "", wild)):
            state = reduce(PlanState(), action)
            pecs, lats = state.find_slot("a"), state.find_slot("b")
            assert (pecs.sets, pecs.rep_min, pecs.rir, pecs.rpe) == (20, 1, 10, 10.0)
            # inverted range: rep_max follows rep_min
            assert (lats.rep_min, lats.rep_max) == (20, 20)
            assert lats.rpe is None

    def test_clear_all(self, week):
        state = reduce(week, ClearAll())
        assert state.slots == ()
        assert reduce(state, ClearAll()) is state


class TestSaveLifecycle:
    def test_mark_saved_clears_dirty_keeps_slots(self, week):
        state = reduce_all(week, [AddSlot(2, "quads"), Saving()])
        assert state.is_saving
        saved = reduce(state, MarkSaved("plan-9"))
        assert (saved.plan_id, saved.is_dirty, saved.is_saving) == ("plan-9", False, False)
        assert saved.slots == state.slots

    def test_save_error_keeps_dirty(self, week):
        state = reduce_all(week, [AddSlot(2, "quads"), Saving(), SaveError()])
        assert state.is_dirty
        assert not state.is_saving
