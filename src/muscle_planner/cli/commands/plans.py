"""Plan library commands: new, list, show, rename, clear, presets, duplicate, delete."""

from typing import Annotated, Optional

import typer

from ...core.config import DEFAULT_PLAN_NAME
from ...core.presets import get_preset, load_presets
from ...core.reducer import ClearAll, LoadPreset, SetDescription, SetName
from ...core.taxonomy import get_default_taxonomy
from ...io.boundary import call_with_timeout
from ...io.session import PlanSession
from .. import views
from ..app import PlanIdArg, StoreOption, app, get_store, open_session, run_boundary, save_session


@app.command()
def new(
    name: Annotated[
        str,
        typer.Argument(help="Plan name"),
    ] = DEFAULT_PLAN_NAME,
    description: Annotated[
        str,
        typer.Option("--description", "-d", help="Plan description"),
    ] = "",
    preset: Annotated[
        Optional[str],
        typer.Option("--preset", help="Start from a preset (see 'presets')"),
    ] = None,
    store_path: StoreOption = None,
) -> None:
    """
    Create a new muscle plan and print its ID.

    Example:
        muscle-planner new "Hypertrophy Block" --preset "Upper / Lower"
    """
    session = PlanSession(get_store(store_path))
    session.dispatch(SetName(name), SetDescription(description))

    if preset is not None:
        try:
            chosen = get_preset(preset)
        except ValueError as e:
            views.print_error(str(e))
            raise typer.Exit(1)
        session.dispatch(LoadPreset(chosen.build_slots()))

    plan_id = save_session(session)
    views.print_success(f"Created plan '{name}'")
    views.console.print(f"ID: [bold]{plan_id}[/bold]")


@app.command("list")
def list_plans(
    search: Annotated[
        Optional[str],
        typer.Option("--search", "-q", help="Filter by name or description"),
    ] = None,
    presets_only: Annotated[
        bool,
        typer.Option("--presets", help="Show only saved presets"),
    ] = False,
    store_path: StoreOption = None,
) -> None:
    """
    List saved plans, most recently updated first.
    """
    store = get_store(store_path)
    plans = run_boundary(
        call_with_timeout(
            store.list_plans,
            search,
            True if presets_only else None,
            label="list plans",
        )
    )
    views.print_plan_list(plans)


@app.command()
def show(
    plan_id: PlanIdArg,
    store_path: StoreOption = None,
) -> None:
    """
    Show a plan's week grid, volume summary and warnings.
    """
    session = open_session(store_path, plan_id)
    volume = session.volume()
    views.print_plan_header(session.state)
    views.print_plan_grid(session.state, session.taxonomy, volume)
    views.print_summary(volume)
    views.print_warnings(volume)


@app.command()
def rename(
    plan_id: PlanIdArg,
    name: Annotated[str, typer.Argument(help="New plan name")],
    description: Annotated[
        Optional[str],
        typer.Option("--description", "-d", help="New description"),
    ] = None,
    store_path: StoreOption = None,
) -> None:
    """
    Rename a plan (and optionally replace its description).
    """
    session = open_session(store_path, plan_id)
    session.dispatch(SetName(name))
    if description is not None:
        session.dispatch(SetDescription(description))
    save_session(session)
    views.print_success(f"Renamed plan to '{name}'")


@app.command()
def clear(
    plan_id: PlanIdArg,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation"),
    ] = False,
    store_path: StoreOption = None,
) -> None:
    """
    Remove every slot from a plan.
    """
    session = open_session(store_path, plan_id)
    if not session.state.slots:
        views.print_info("Plan is already empty.")
        return
    if not force and not views.confirm_action(f"Remove all {len(session.state.slots)} slots?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)
    session.dispatch(ClearAll())
    save_session(session)
    views.print_success("Cleared all slots.")


@app.command()
def presets() -> None:
    """
    List built-in plan presets.
    """
    views.print_presets(load_presets())


@app.command("load-preset")
def load_preset(
    plan_id: PlanIdArg,
    preset: Annotated[str, typer.Argument(help="Preset name (see 'presets')")],
    rename_plan: Annotated[
        bool,
        typer.Option("--rename", help="Also rename the plan after the preset"),
    ] = False,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation when the plan has slots"),
    ] = False,
    store_path: StoreOption = None,
) -> None:
    """
    Replace a plan's slots with a preset.
    """
    try:
        chosen = get_preset(preset)
    except ValueError as e:
        views.print_error(str(e))
        raise typer.Exit(1)

    session = open_session(store_path, plan_id)
    if session.state.slots and not force:
        if not views.confirm_action(f"Replace {len(session.state.slots)} existing slots?"):
            views.print_info("Cancelled.")
            raise typer.Exit(0)

    session.dispatch(LoadPreset(chosen.build_slots(), name=chosen.name if rename_plan else None))
    save_session(session)
    views.print_success(f"Loaded preset '{chosen.name}' ({len(session.state.slots)} slots)")


@app.command("save-preset")
def save_preset(
    plan_id: PlanIdArg,
    store_path: StoreOption = None,
) -> None:
    """
    Save a copy of a plan as a reusable preset.
    """
    session = open_session(store_path, plan_id)
    preset_id = run_boundary(session.save_as_preset())
    views.print_success(f"Saved '{session.state.name}' as preset")
    views.console.print(f"ID: [bold]{preset_id}[/bold]")


@app.command()
def duplicate(
    plan_id: PlanIdArg,
    store_path: StoreOption = None,
) -> None:
    """
    Copy a plan as "<name> (Copy)".
    """
    store = get_store(store_path)
    new_id = run_boundary(call_with_timeout(store.duplicate_plan, plan_id, label="duplicate plan"))
    views.print_success("Duplicated plan")
    views.console.print(f"ID: [bold]{new_id}[/bold]")


@app.command()
def delete(
    plan_id: PlanIdArg,
    force: Annotated[
        bool,
        typer.Option("--force", "-f", help="Skip confirmation"),
    ] = False,
    store_path: StoreOption = None,
) -> None:
    """
    Delete a saved plan.
    """
    store = get_store(store_path)
    if not force and not views.confirm_action(f"Delete plan {plan_id}?"):
        views.print_info("Cancelled.")
        raise typer.Exit(0)
    run_boundary(call_with_timeout(store.delete_plan, plan_id, label="delete plan"))
    views.print_success(f"Deleted plan {plan_id}")


@app.command()
def muscles() -> None:
    """
    List muscle groups, their landmarks and subdivision IDs.
    """
    views.print_taxonomy(get_default_taxonomy())
