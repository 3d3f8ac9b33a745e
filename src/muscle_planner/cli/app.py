"""Shared Typer app object, shared option types, and store/session utilities."""

import asyncio
from pathlib import Path
from typing import Annotated, Optional

import typer

from ..core.config import DAYS_PER_WEEK
from ..core.models import MuscleSlot, PlanState
from ..core.taxonomy import get_default_taxonomy
from ..io.boundary import BoundaryError
from ..io.plan_store import PlanStore, get_default_store_path
from ..io.session import PlanSession
from . import views

# Shared --store-path option type used across all commands
StoreOption = Annotated[
    Optional[Path],
    typer.Option("--store-path", "-s", help="Directory holding plan files (default ~/.muscle-planner/plans)"),
]

PlanIdArg = Annotated[str, typer.Argument(help="Plan ID (see 'list')")]

app = typer.Typer(
    name="muscle-planner",
    help="Weekly muscle-volume planner: place muscles on days, check volume landmarks, convert to a program.",
    no_args_is_help=True,
)


def get_store(store_path: Path | None) -> PlanStore:
    """Get plan store from path or default location."""
    if store_path is None:
        store_path = get_default_store_path()
    return PlanStore(store_path)


def run_boundary(coro):
    """Run one boundary coroutine; report failures and exit 1."""
    try:
        return asyncio.run(coro)
    except BoundaryError as e:
        views.print_error(str(e))
        raise typer.Exit(1)


def open_session(store_path: Path | None, plan_id: str) -> PlanSession:
    """Load a stored plan into a fresh session, exiting 1 if it cannot be read."""
    session = PlanSession(get_store(store_path))
    run_boundary(session.load(plan_id))
    return session


def save_session(session: PlanSession) -> str:
    return run_boundary(session.save())


def check_day(day: int) -> int:
    if not 1 <= day <= DAYS_PER_WEEK:
        views.print_error(f"Day must be between 1 and {DAYS_PER_WEEK}, got {day}")
        raise typer.Exit(1)
    return day


def check_muscle(muscle_id: str) -> str:
    """Validate a muscle or subdivision id against the taxonomy."""
    taxonomy = get_default_taxonomy()
    if not taxonomy.is_known(muscle_id):
        views.print_error(f"Unknown muscle '{muscle_id}'")
        views.print_info("Run 'muscles' to see valid muscle and subdivision IDs.")
        raise typer.Exit(1)
    return muscle_id


def find_slot_ref(state: PlanState, ref: str) -> MuscleSlot | None:
    """
    Resolve a slot reference.

    Accepts "DAY:POS" (1-based position as shown by 'show') or a slot id.
    """
    if ":" in ref:
        day_s, _, pos_s = ref.partition(":")
        try:
            day, pos = int(day_s), int(pos_s)
        except ValueError:
            return None
        slots = state.slots_for_day(day)
        return slots[pos - 1] if 1 <= pos <= len(slots) else None
    return state.find_slot(ref)


def resolve_slot(state: PlanState, ref: str) -> MuscleSlot:
    slot = find_slot_ref(state, ref)
    if slot is None:
        views.print_error(f"No slot '{ref}'. Use DAY:POS (e.g. 2:1) as shown by 'show'.")
        raise typer.Exit(1)
    return slot
