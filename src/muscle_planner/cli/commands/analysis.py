"""Analysis commands: volume, heatmap, convert."""

from pathlib import Path
from typing import Annotated, Optional

import typer

from ...io.serializers import plan_volume_to_dict, projection_to_dict, to_json
from .. import views
from ..app import PlanIdArg, StoreOption, app, open_session, run_boundary


@app.command()
def volume(
    plan_id: PlanIdArg,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Output as JSON for machine processing"),
    ] = False,
    store_path: StoreOption = None,
) -> None:
    """
    Show weekly sets per muscle against volume landmarks (MV/MEV/MAV/MRV).
    """
    session = open_session(store_path, plan_id)
    result = session.volume()

    if json_out:
        print(to_json(plan_volume_to_dict(result)))
        return

    views.print_plan_header(session.state)
    views.print_volume(result)
    views.print_warnings(result)


@app.command()
def heatmap(
    plan_id: PlanIdArg,
    store_path: StoreOption = None,
) -> None:
    """
    Show the muscle x day frequency matrix.
    """
    session = open_session(store_path, plan_id)
    result = session.volume()
    views.print_plan_header(session.state)
    views.print_heatmap(result, session.taxonomy)
    for w in result.consecutive_day_warnings:
        views.print_warning(w)


@app.command()
def convert(
    plan_id: PlanIdArg,
    owner: Annotated[
        Optional[str],
        typer.Option("--owner", help="Owner ID recorded on the program and its modules"),
    ] = None,
    json_out: Annotated[
        bool,
        typer.Option("--json", "-j", help="Print the projection as JSON without recording it"),
    ] = False,
    out: Annotated[
        Optional[Path],
        typer.Option("--out", "-o", help="Also write the projection JSON to this file"),
    ] = None,
    store_path: StoreOption = None,
) -> None:
    """
    Convert a plan into a program template (one day per training day,
    one module per slot).
    """
    session = open_session(store_path, plan_id)
    if not session.state.slots:
        views.print_error("Plan has no slots to convert.")
        raise typer.Exit(1)

    if json_out:
        print(to_json(projection_to_dict(session.projection(owner))))
        return

    program_id, projection = run_boundary(session.convert(owner))

    if out is not None:
        try:
            out.write_text(to_json(projection_to_dict(projection)) + "\n", encoding="utf-8")
        except OSError as e:
            views.print_error(f"Could not write {out}: {e}")
            raise typer.Exit(1)

    views.print_projection(projection)
    for a in session.volume().intensity_advisories:
        views.print_info(a)
    views.print_success(
        f"Converted to program with {len(projection.days)} day(s) and {len(projection.modules)} module(s)"
    )
    views.console.print(f"Program ID: [bold]{program_id}[/bold]")
