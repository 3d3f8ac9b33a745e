"""Slot editing commands: add, remove, set, set-all, reorder, move, paste-day."""

from typing import Annotated, Optional

import typer

from ...core.config import DAYS_PER_WEEK, day_label
from ...core.conflicts import duplicate_placements, has_muscle_on_day
from ...core.reducer import (
    AddSlot,
    MoveSlot,
    PasteDay,
    RemoveSlot,
    Reorder,
    SetAllSetsForMuscle,
    SetSlotDetail,
    UNSET,
)
from ...core.volume import parse_tempo
from .. import views
from ..app import PlanIdArg, StoreOption, app, check_day, check_muscle, open_session, resolve_slot, save_session

DayArg = Annotated[int, typer.Argument(help=f"Day of week, 1 (Mon) to {DAYS_PER_WEEK} (Sun)")]
SlotRefArg = Annotated[str, typer.Argument(help="Slot as DAY:POS (e.g. 2:1) or slot id")]


@app.command()
def add(
    plan_id: PlanIdArg,
    day: DayArg,
    muscle_id: Annotated[str, typer.Argument(help="Muscle or subdivision ID (see 'muscles')")],
    sets: Annotated[
        Optional[int],
        typer.Option("--sets", "-n", help="Number of sets (1-20, default 3)"),
    ] = None,
    store_path: StoreOption = None,
) -> None:
    """
    Place a muscle on a day.

    Example:
        muscle-planner add <plan-id> 1 pecs --sets 4
    """
    check_day(day)
    check_muscle(muscle_id)
    session = open_session(store_path, plan_id)

    if has_muscle_on_day(session.state.slots, day, muscle_id):
        views.print_error(f"{session.taxonomy.label_for(muscle_id)} is already on {day_label(day)}")
        raise typer.Exit(1)

    session.dispatch(AddSlot(day, muscle_id, sets))
    save_session(session)
    views.print_success(f"Added {session.taxonomy.label_for(muscle_id)} to {day_label(day)}")
    views.print_warnings(session.volume())


@app.command()
def remove(
    plan_id: PlanIdArg,
    slot_ref: SlotRefArg,
    store_path: StoreOption = None,
) -> None:
    """
    Remove one slot.
    """
    session = open_session(store_path, plan_id)
    slot = resolve_slot(session.state, slot_ref)
    session.dispatch(RemoveSlot(slot.id))
    save_session(session)
    views.print_success(
        f"Removed {session.taxonomy.label_for(slot.muscle_id)} from {day_label(slot.day_index)}"
    )


@app.command("set")
def set_detail(
    plan_id: PlanIdArg,
    slot_ref: SlotRefArg,
    sets: Annotated[Optional[int], typer.Option("--sets", "-n", help="Sets (1-20)")] = None,
    rep_min: Annotated[Optional[int], typer.Option("--rep-min", help="Lower rep bound")] = None,
    rep_max: Annotated[Optional[int], typer.Option("--rep-max", help="Upper rep bound")] = None,
    tempo: Annotated[
        Optional[str],
        typer.Option("--tempo", "-t", help="4-digit tempo, e.g. 3120 ('' clears)"),
    ] = None,
    rir: Annotated[Optional[int], typer.Option("--rir", help="Reps in reserve (0-10, -1 clears)")] = None,
    rpe: Annotated[Optional[float], typer.Option("--rpe", help="RPE (1-10, half steps, 0 clears)")] = None,
    store_path: StoreOption = None,
) -> None:
    """
    Edit sets, rep range, tempo or intensity of one slot.

    Example:
        muscle-planner set <plan-id> 1:1 --tempo 3120 --rir 2
    """
    session = open_session(store_path, plan_id)
    slot = resolve_slot(session.state, slot_ref)

    if tempo and parse_tempo(tempo) is None:
        views.print_warning(f"Tempo '{tempo}' is not 4 digits; it will not count toward TUST")

    action = SetSlotDetail(
        slot_id=slot.id,
        sets=sets if sets is not None else UNSET,
        rep_min=rep_min if rep_min is not None else UNSET,
        rep_max=rep_max if rep_max is not None else UNSET,
        tempo=(tempo or None) if tempo is not None else UNSET,
        rir=(None if rir < 0 else rir) if rir is not None else UNSET,
        rpe=(None if rpe <= 0 else rpe) if rpe is not None else UNSET,
    )
    before = session.state
    session.dispatch(action)
    if session.state is before:
        views.print_info("Nothing changed.")
        return

    save_session(session)
    updated = session.state.find_slot(slot.id)
    views.print_success(f"Updated {session.taxonomy.label_for(slot.muscle_id)} on {day_label(slot.day_index)}")
    views.print_warnings(session.volume())
    if updated is not None:
        views.console.print(f"[dim]{views.slot_detail(updated)}[/dim]")


@app.command("set-all")
def set_all(
    plan_id: PlanIdArg,
    muscle_id: Annotated[str, typer.Argument(help="Muscle or subdivision ID (exact match)")],
    sets: Annotated[int, typer.Argument(help="Sets for every slot of that muscle")],
    store_path: StoreOption = None,
) -> None:
    """
    Set the set count on every slot of one muscle ID.

    Only slots with exactly that ID change; subdivisions of a muscle are not
    included when the parent ID is given.
    """
    check_muscle(muscle_id)
    session = open_session(store_path, plan_id)
    count = sum(1 for s in session.state.slots if s.muscle_id == muscle_id)
    if count == 0:
        views.print_info(f"No slots for {muscle_id}.")
        return
    session.dispatch(SetAllSetsForMuscle(muscle_id, sets))
    save_session(session)
    views.print_success(f"Updated {count} slot(s) of {session.taxonomy.label_for(muscle_id)}")


@app.command()
def reorder(
    plan_id: PlanIdArg,
    day: DayArg,
    from_pos: Annotated[int, typer.Argument(help="Current position (1-based)")],
    to_pos: Annotated[int, typer.Argument(help="New position (1-based)")],
    store_path: StoreOption = None,
) -> None:
    """
    Change a slot's position within its day.
    """
    check_day(day)
    session = open_session(store_path, plan_id)
    n = len(session.state.slots_for_day(day))
    if not (1 <= from_pos <= n and 1 <= to_pos <= n):
        views.print_error(f"{day_label(day)} has {n} slot(s); positions must be 1-{n}")
        raise typer.Exit(1)
    session.dispatch(Reorder(day, from_pos - 1, to_pos - 1))
    save_session(session)
    views.print_success(f"Moved position {from_pos} to {to_pos} on {day_label(day)}")


@app.command()
def move(
    plan_id: PlanIdArg,
    slot_ref: SlotRefArg,
    to_day: DayArg,
    position: Annotated[
        Optional[int],
        typer.Option("--position", "-p", help="Position on the target day (1-based, default last)"),
    ] = None,
    store_path: StoreOption = None,
) -> None:
    """
    Move a slot to another day (or another position).
    """
    check_day(to_day)
    session = open_session(store_path, plan_id)
    slot = resolve_slot(session.state, slot_ref)

    if to_day != slot.day_index and has_muscle_on_day(session.state.slots, to_day, slot.muscle_id, slot.id):
        views.print_error(f"{session.taxonomy.label_for(slot.muscle_id)} is already on {day_label(to_day)}")
        raise typer.Exit(1)

    others = [s for s in session.state.slots_for_day(to_day) if s.id != slot.id]
    index = len(others) if position is None else position - 1
    if not 0 <= index <= len(others):
        views.print_error(f"Position must be 1-{len(others) + 1}")
        raise typer.Exit(1)

    session.dispatch(MoveSlot(slot.id, to_day, index))
    save_session(session)
    views.print_success(
        f"Moved {session.taxonomy.label_for(slot.muscle_id)} to {day_label(to_day)} (position {index + 1})"
    )
    views.print_warnings(session.volume())


@app.command("paste-day")
def paste_day(
    plan_id: PlanIdArg,
    from_day: DayArg,
    to_day: DayArg,
    store_path: StoreOption = None,
) -> None:
    """
    Copy every slot of one day onto another (appended, nothing overwritten).
    """
    check_day(from_day)
    check_day(to_day)
    session = open_session(store_path, plan_id)
    copied = len(session.state.slots_for_day(from_day))
    if copied == 0:
        views.print_info(f"{day_label(from_day)} has no slots to copy.")
        return

    session.dispatch(PasteDay(from_day, to_day))
    save_session(session)
    views.print_success(f"Pasted {copied} slot(s) from {day_label(from_day)} to {day_label(to_day)}")

    for day, muscle_id in duplicate_placements(session.state.slots):
        if day == to_day:
            views.print_warning(f"{session.taxonomy.label_for(muscle_id)} now appears twice on {day_label(day)}")
