"""
CLI view formatters using Rich for pretty console output.

Handles table formatting and display of plans and their derived volume.
"""

from rich.console import Console
from rich.table import Table

from ..core.config import DAYS_PER_WEEK, day_label
from ..core.models import MuscleSlot, PlanState
from ..core.presets import SystemPreset
from ..core.projector import ProgramProjection
from ..core.taxonomy import BODY_REGION_LABELS, BODY_REGIONS, Taxonomy
from ..core.volume import ZONE_LABELS, ZONE_STYLES, PlanVolume, format_tust, parse_tempo
from ..io.plan_store import PlanSummary

console = Console()


def slot_detail(slot: MuscleSlot) -> str:
    """Compact detail string: "3x8-12 @3120 RIR2"."""
    parts = [f"{slot.sets}x{slot.effective_rep_min}-{slot.effective_rep_max}"]
    if slot.tempo:
        parts.append(f"@{slot.tempo}" if parse_tempo(slot.tempo) else f"@{slot.tempo}?")
    if slot.rir is not None:
        parts.append(f"RIR{slot.rir}")
    if slot.rpe is not None:
        parts.append(f"RPE{slot.rpe:g}")
    return " ".join(parts)


def print_plan_header(state: PlanState) -> None:
    dirty = " [yellow]*unsaved[/yellow]" if state.is_dirty else ""
    console.print(f"[bold]{state.name}[/bold]{dirty}")
    if state.description:
        console.print(f"[dim]{state.description}[/dim]")
    if state.plan_id:
        console.print(f"[dim]id: {state.plan_id}[/dim]")


def print_plan_grid(state: PlanState, taxonomy: Taxonomy, volume: PlanVolume) -> None:
    """
    Show the week as one row per day.

    Each slot is listed as "<pos>. <label> <detail>"; the position is the
    1-based reference other commands accept as DAY:POS.
    """
    table = Table(title="Week", show_lines=True)
    table.add_column("Day", style="cyan", no_wrap=True)
    table.add_column("Muscles")
    table.add_column("Sets", justify="right", style="bold")

    for day in range(1, DAYS_PER_WEEK + 1):
        slots = state.slots_for_day(day)
        marker = ">" if day == state.selected_day else " "
        if not slots:
            table.add_row(f"{marker}{day} {day_label(day)}", "[dim]rest[/dim]", "")
            continue
        lines = []
        for pos, slot in enumerate(slots, start=1):
            display = taxonomy.get_muscle_display(slot.muscle_id)
            label = taxonomy.label_for(slot.muscle_id)
            styled = f"[{display.color_hex}]{label}[/]" if display else f"[red]{label}[/red]"
            lines.append(f"{pos}. {styled} [dim]{slot_detail(slot)}[/dim]")
        table.add_row(
            f"{marker}{day} {day_label(day)}",
            "\n".join(lines),
            str(volume.day_totals.get(day, 0)),
        )

    console.print(table)


def print_summary(volume: PlanVolume) -> None:
    s = volume.summary
    console.print(
        f"Total sets: [bold]{s.total_sets}[/bold]  "
        f"Muscles: [bold]{s.muscles_targeted}[/bold]  "
        f"Training days: [bold]{s.training_days}[/bold]  "
        f"Avg sets/muscle: [bold]{s.avg_sets_per_muscle}[/bold]"
    )
    if s.total_working_sets:
        console.print(
            f"TUST: {format_tust(s.total_tust_seconds_min)}-{format_tust(s.total_tust_seconds_max)} "
            f"over {s.total_working_sets} working sets"
        )


def print_volume(volume: PlanVolume) -> None:
    """Per-muscle weekly volume, highest first, with zone and TUST."""
    if not volume.entries:
        console.print("[yellow]No muscles placed yet.[/yellow]")
        return

    table = Table(title="Weekly Volume")
    table.add_column("Muscle", style="bold")
    table.add_column("Sets", justify="right")
    table.add_column("Zone")
    table.add_column("Landmarks", style="dim")
    table.add_column("Freq", justify="right")
    table.add_column("Reps", justify="right")
    table.add_column("TUST", justify="right")
    table.add_column("Subdivisions", style="dim")

    for e in volume.entries_by_volume:
        lm = e.muscle.landmarks
        style = ZONE_STYLES[e.zone]
        tust = (
            f"{format_tust(e.tust_seconds_min)}-{format_tust(e.tust_seconds_max)}"
            if e.working_sets
            else ("[yellow]needs RIR/RPE[/yellow]" if e.has_tempo else "-")
        )
        table.add_row(
            e.muscle.label,
            str(e.total_sets),
            f"[{style}]{ZONE_LABELS[e.zone]}[/{style}]",
            f"{lm.mv}/{lm.mev}/{lm.mav}/{lm.mrv}",
            f"{e.frequency}x",
            f"{e.total_reps_min}-{e.total_reps_max}",
            tust,
            ", ".join(f"{sub.label} {sub.sets}" for sub in e.subdivision_breakdown),
        )

    console.print(table)
    print_summary(volume)


def print_warnings(volume: PlanVolume) -> None:
    for w in volume.consecutive_day_warnings:
        print_warning(w)
    for a in volume.intensity_advisories:
        print_info(a)


def print_heatmap(volume: PlanVolume, taxonomy: Taxonomy) -> None:
    """Muscle x day set matrix, grouped by body region."""
    if not volume.frequency_matrix:
        console.print("[yellow]No muscles placed yet.[/yellow]")
        return

    table = Table(title="Frequency Heatmap")
    table.add_column("Muscle", style="bold")
    for day in range(1, DAYS_PER_WEEK + 1):
        table.add_column(day_label(day), justify="center")
    table.add_column("Total", justify="right")

    for region in BODY_REGIONS:
        rows = [m for m in taxonomy.muscles_in_region(region) if m.id in volume.frequency_matrix]
        if not rows:
            continue
        table.add_row(f"[dim]{BODY_REGION_LABELS[region]}[/dim]", *[""] * (DAYS_PER_WEEK + 1))
        for muscle in rows:
            days = volume.frequency_matrix[muscle.id]
            entry = volume.entry_for(muscle.id)
            cells = [
                f"[{muscle.color_hex}]{days[d]}[/]" if d in days else "[dim]·[/dim]"
                for d in range(1, DAYS_PER_WEEK + 1)
            ]
            total = ""
            if entry is not None:
                style = ZONE_STYLES[entry.zone]
                total = f"[{style}]{entry.total_sets}[/{style}]"
            table.add_row(f"  {muscle.label}", *cells, total)

    console.print(table)


def print_plan_list(plans: list[PlanSummary]) -> None:
    if not plans:
        console.print("[yellow]No saved plans.[/yellow]")
        return

    table = Table(title="Muscle Plans")
    table.add_column("ID", style="dim", no_wrap=True)
    table.add_column("Name", style="bold")
    table.add_column("Days", justify="right")
    table.add_column("Sets", justify="right")
    table.add_column("Muscles", justify="right")
    table.add_column("Updated", style="cyan")
    table.add_column("", style="magenta")

    for p in plans:
        tags = []
        if p.is_preset:
            tags.append("preset")
        if p.converted_program_id:
            tags.append("converted")
        table.add_row(
            p.plan_id,
            p.name,
            str(p.training_days),
            str(p.total_sets),
            str(p.muscle_count),
            p.updated_at[:16].replace("T", " "),
            ", ".join(tags),
        )

    console.print(table)


def print_presets(presets: list[SystemPreset]) -> None:
    table = Table(title="Presets")
    table.add_column("Name", style="bold")
    table.add_column("Description")
    table.add_column("Days", justify="right")
    table.add_column("Sets", justify="right")
    for p in presets:
        table.add_row(p.name, p.description, str(p.training_days), str(p.total_sets))
    console.print(table)


def print_taxonomy(taxonomy: Taxonomy) -> None:
    table = Table(title="Muscles")
    table.add_column("ID", style="dim")
    table.add_column("Label", style="bold")
    table.add_column("Region")
    table.add_column("MV/MEV/MAV/MRV", justify="right")
    table.add_column("Subdivisions", style="dim")
    for m in taxonomy.muscle_groups:
        lm = m.landmarks
        table.add_row(
            m.id,
            f"[{m.color_hex}]{m.label}[/]",
            BODY_REGION_LABELS[m.body_region],
            f"{lm.mv}/{lm.mev}/{lm.mav}/{lm.mrv}",
            ", ".join(s.id for s in taxonomy.subdivisions_of(m.id)),
        )
    console.print(table)


def print_projection(projection: ProgramProjection) -> None:
    console.print(f"[bold]{projection.program.title}[/bold]")
    console.print(f"[dim]{projection.program.description}[/dim]")
    for day in projection.days:
        console.print(f"\n[cyan]{day.title}[/cyan]")
        for m in projection.modules_for_day(day.day_index):
            console.print(f"  {m.sort_order + 1}. {m.title} [dim]({m.source_muscle_id}, {m.status})[/dim]")


def print_success(message: str) -> None:
    """Print a success message."""
    console.print(f"[green]{message}[/green]")


def print_error(message: str) -> None:
    """Print an error message."""
    console.print(f"[red]Error: {message}[/red]")


def print_warning(message: str) -> None:
    """Print a warning message."""
    console.print(f"[yellow]Warning: {message}[/yellow]")


def print_info(message: str) -> None:
    """Print an info message."""
    console.print(f"[blue]{message}[/blue]")


def confirm_action(message: str) -> bool:
    """
    Prompt user for confirmation.

    Args:
        message: Confirmation message

    Returns:
        True if confirmed, False otherwise
    """
    response = console.input(f"{message} \\[y/N]: ")
    return response.lower() in ("y", "yes")
