"""Interactive plan editor with in-memory undo/redo."""

import asyncio
import shlex

from ...core.config import DAYS_PER_WEEK, day_label
from ...core.conflicts import has_muscle_on_day
from ...core.reducer import (
    AddSlot,
    MoveSlot,
    PasteDay,
    Redo,
    RemoveSlot,
    Reorder,
    SelectDay,
    SetName,
    SetSets,
    Undo,
)
from ...io.boundary import BoundaryError
from ...io.session import PlanSession
from .. import views
from ..app import PlanIdArg, StoreOption, app, find_slot_ref, open_session

EDIT_HELP = """\
  add DAY MUSCLE [SETS]   place a muscle (DAY defaults to the selected day with 'add MUSCLE')
  rm DAY:POS              remove a slot
  sets DAY:POS N          change set count
  move DAY:POS DAY [POS]  move a slot to another day
  reorder DAY FROM TO     change position within a day
  paste FROM TO           copy one day onto another
  day N                   select a day
  name TEXT               rename the plan
  undo / redo             step through history
  show / vol / heat       grid, volume table, heatmap
  save                    save the plan
  quit                    leave (asks before discarding unsaved changes)"""


def _ints(args: list[str], count: int) -> list[int] | None:
    try:
        return [int(a) for a in args[:count]]
    except ValueError:
        return None


def _apply(session: PlanSession, cmd: str, args: list[str]) -> str | None:
    """
    Run one editor command against the session.

    Returns an error message for the user, or None on success.
    """
    state = session.state
    tax = session.taxonomy

    if cmd == "add":
        if len(args) == 1:
            args = [str(state.selected_day), args[0]]
        if len(args) < 2:
            return "usage: add DAY MUSCLE [SETS]"
        day_and_sets = _ints([args[0], *args[2:3]], 2)
        if day_and_sets is None:
            return "DAY and SETS must be numbers"
        day, muscle_id = day_and_sets[0], args[1]
        sets = day_and_sets[1] if len(day_and_sets) > 1 else None
        if not tax.is_known(muscle_id):
            return f"Unknown muscle '{muscle_id}'"
        if not 1 <= day <= DAYS_PER_WEEK:
            return f"DAY must be 1-{DAYS_PER_WEEK}"
        if has_muscle_on_day(state.slots, day, muscle_id):
            return f"{tax.label_for(muscle_id)} is already on {day_label(day)}"
        session.dispatch(AddSlot(day, muscle_id, sets))
        return None

    if cmd in ("rm", "sets", "move"):
        if not args:
            return f"usage: {cmd} DAY:POS ..."
        slot = find_slot_ref(state, args[0])
        if slot is None:
            return f"No slot '{args[0]}'"
        if cmd == "rm":
            session.dispatch(RemoveSlot(slot.id))
            return None
        nums = _ints(args[1:], 2)
        if not nums:
            return f"usage: {cmd} DAY:POS N"
        if cmd == "sets":
            session.dispatch(SetSets(slot.id, nums[0]))
            return None
        to_day = nums[0]
        if to_day != slot.day_index and has_muscle_on_day(state.slots, to_day, slot.muscle_id, slot.id):
            return f"{tax.label_for(slot.muscle_id)} is already on {day_label(to_day)}"
        others = [s for s in state.slots_for_day(to_day) if s.id != slot.id]
        index = nums[1] - 1 if len(nums) > 1 else len(others)
        before = session.state
        session.dispatch(MoveSlot(slot.id, to_day, index))
        return "Invalid day or position" if session.state is before else None

    if cmd == "reorder":
        nums = _ints(args, 3)
        if nums is None or len(nums) < 3:
            return "usage: reorder DAY FROM TO"
        before = session.state
        session.dispatch(Reorder(nums[0], nums[1] - 1, nums[2] - 1))
        return "Invalid day or position" if session.state is before else None

    if cmd == "paste":
        nums = _ints(args, 2)
        if nums is None or len(nums) < 2:
            return "usage: paste FROM TO"
        session.dispatch(PasteDay(nums[0], nums[1]))
        return None

    if cmd == "day":
        nums = _ints(args, 1)
        if not nums:
            return "usage: day N"
        session.dispatch(SelectDay(nums[0]))
        return None

    if cmd == "name":
        if not args:
            return "usage: name TEXT"
        session.dispatch(SetName(" ".join(args)))
        return None

    if cmd == "undo":
        if not state.can_undo:
            return "Nothing to undo"
        session.dispatch(Undo())
        return None

    if cmd == "redo":
        if not state.can_redo:
            return "Nothing to redo"
        session.dispatch(Redo())
        return None

    return f"Unknown command '{cmd}'. Type 'help'."


def _show(session: PlanSession) -> None:
    volume = session.volume()
    views.print_plan_header(session.state)
    views.print_plan_grid(session.state, session.taxonomy, volume)
    views.print_summary(volume)
    views.print_warnings(volume)


@app.command()
def edit(
    plan_id: PlanIdArg,
    store_path: StoreOption = None,
) -> None:
    """
    Edit a plan interactively, with undo/redo kept for the session.

    Changes are saved only with 'save' (or on quit after confirming).
    """
    session = open_session(store_path, plan_id)
    _show(session)
    views.print_info("Type 'help' for commands.")

    while True:
        try:
            line = views.console.input("[bold]edit>[/bold] ").strip()
        except EOFError:
            break
        if not line:
            continue
        try:
            parts = shlex.split(line)
        except ValueError as e:
            views.print_error(str(e))
            continue
        cmd, args = parts[0].lower(), parts[1:]

        if cmd in ("quit", "exit", "q"):
            if session.state.is_dirty and views.confirm_action("Save changes before leaving?"):
                cmd = "save"
            else:
                break
        if cmd == "save":
            try:
                asyncio.run(session.save())
            except BoundaryError as e:
                views.print_error(f"{e} (changes kept, try again)")
                continue
            views.print_success("Saved.")
            if parts[0].lower() in ("quit", "exit", "q"):
                break
            continue
        if cmd == "help":
            views.console.print(EDIT_HELP, markup=False)
            continue
        if cmd == "show":
            _show(session)
            continue
        if cmd == "vol":
            views.print_volume(session.volume())
            continue
        if cmd == "heat":
            views.print_heatmap(session.volume(), session.taxonomy)
            continue

        error = _apply(session, cmd, args)
        if error is not None:
            views.print_error(error)
            continue
        for w in session.volume().consecutive_day_warnings:
            views.print_warning(w)
