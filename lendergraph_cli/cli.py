"""Typer-based CLI for LenderGraph lender matching."""

from __future__ import annotations

import logging
from dataclasses import replace
from pathlib import Path
from typing import List, Optional

import typer
from rich.console import Console
from rich.logging import RichHandler
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from . import __version__, config_manager
from .cli_groups import config_grp, filters_grp, graph_grp, lenders_grp
from .detail_card import (
    INCOMPLETE_FILTERS_MESSAGE,
    INCOMPLETE_FILTERS_TITLE,
    build_card_rows,
    match_percentage,
)
from .graph_export import export_html, export_svg, frame_to_svg, render_frames
from .models import FILTER_OPTIONS, FilterCriteria, LenderProfile
from .orchestrator import MatchOrchestrator
from .roster import RosterLoadError
from .scoring import compute_match_score, count_matching
from .storage import LenderStore

console = Console()

app = typer.Typer(
    help="🏢 LenderGraph CLI — match borrowers to commercial real-estate lenders.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

app.add_typer(lenders_grp, name="lenders")
app.add_typer(filters_grp, name="filters")
app.add_typer(graph_grp, name="graph")
app.add_typer(config_grp, name="config")


def version_callback(value: bool):
    """Print version and exit."""
    if value:
        typer.echo(f"LenderGraph CLI v{__version__}")
        raise typer.Exit()


@app.callback()
def main(
    version: Optional[bool] = typer.Option(
        None,
        "--version",
        "-v",
        help="Show version and exit.",
        callback=version_callback,
        is_eager=True,
    ),
    verbose: bool = typer.Option(False, "--verbose", help="Show debug logging."),
):
    """LenderGraph CLI: score a lender roster and render the match graph."""
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


# ── Shared option helpers ────────────────────────────────────

ROSTER_OPTION = typer.Option(None, "--roster", "-r", help="Path to a lender roster JSON file.")


def _asset_option():
    return typer.Option(None, "--asset-type", "-a", help="Asset type (repeatable).")


def _deal_option():
    return typer.Option(None, "--deal-type", "-d", help="Deal type (repeatable).")


def _capital_option():
    return typer.Option(None, "--capital-type", "-c", help="Capital type (repeatable).")


def _debt_option():
    return typer.Option(None, "--debt-range", "-b", help="Debt range, e.g. '$5M - $25M' (repeatable).")


def _location_option():
    return typer.Option(None, "--location", "-l", help="Location (repeatable).")


def _amount_option():
    return typer.Option(None, "--amount", min=0, help="Requested loan amount (recorded, not scored).")


def _check_values(category: str, values: Optional[List[str]]) -> List[str]:
    values = list(values or [])
    allowed = FILTER_OPTIONS[category]
    unknown = [v for v in values if v not in allowed]
    if unknown:
        raise typer.BadParameter(
            f"Unknown {category.replace('_', ' ')}: {', '.join(unknown)}. "
            f"Choose from: {', '.join(allowed)}"
        )
    return values


def _filters_from_options(
    asset_type: Optional[List[str]],
    deal_type: Optional[List[str]],
    capital_type: Optional[List[str]],
    debt_range: Optional[List[str]],
    location: Optional[List[str]],
    amount: Optional[float],
) -> FilterCriteria:
    return FilterCriteria(
        asset_types=_check_values("asset_types", asset_type),
        deal_types=_check_values("deal_types", deal_type),
        capital_types=_check_values("capital_types", capital_type),
        debt_ranges=_check_values("debt_ranges", debt_range),
        locations=_check_values("locations", location),
        requested_amount=amount,
    )


def _orchestrator(roster: Optional[Path]) -> MatchOrchestrator:
    return MatchOrchestrator(LenderStore(), roster_path=roster)


def _load(orchestrator: MatchOrchestrator) -> List[LenderProfile]:
    try:
        return orchestrator.roster
    except RosterLoadError as exc:
        raise typer.BadParameter(str(exc)) from exc


def _render_bar(score: float) -> str:
    """Render a simple text bar for a 0-1 score."""
    percentage = score * 100
    filled = int(round(percentage / 10))
    bar = "█" * filled + "░" * (10 - filled)
    if percentage >= 80:
        color = "green"
    elif percentage >= 50:
        color = "yellow"
    else:
        color = "red"
    return f"[{color}]{bar}[/{color}] {percentage:.0f}%"


def _describe_filters(filters: FilterCriteria) -> str:
    parts = []
    for category in FILTER_OPTIONS:
        values = filters.values(category)
        label = category.replace("_", " ")
        parts.append(f"{label}: {', '.join(values) if values else '-'}")
    if filters.requested_amount is not None:
        parts.append(f"requested amount: ${filters.requested_amount:,.0f}")
    return "\n".join(escape(p) for p in parts)


def _print_card(lender: LenderProfile, filters: FilterCriteria) -> None:
    table = Table(show_header=False, box=None, pad_edge=False)
    table.add_column("Field", style="bold")
    table.add_column("Value")
    table.add_column("Status")
    for row in build_card_rows(lender, filters):
        badge = ""
        if row.status is True:
            badge = "[green]Match[/green]"
        elif row.status is False:
            badge = "[red]Mismatch[/red]"
        table.add_row(row.label, escape(row.value), badge)

    header = f"[bold]{escape(lender.name)}[/bold]  (#{lender.lender_id})  {match_percentage(lender)}% match"
    console.print(Panel.fit(table, title=header, border_style="cyan"))
    if lender.description:
        console.print(f"  [dim]{escape(lender.description)}[/dim]")
    if lender.contact_email or lender.contact_phone:
        console.print(f"  Contact: {escape(lender.contact_email)} {escape(lender.contact_phone)}".rstrip())


# ===================================================================
# Matching
# ===================================================================


@app.command("match")
def match(
    asset_type: Optional[List[str]] = _asset_option(),
    deal_type: Optional[List[str]] = _deal_option(),
    capital_type: Optional[List[str]] = _capital_option(),
    debt_range: Optional[List[str]] = _debt_option(),
    location: Optional[List[str]] = _location_option(),
    amount: Optional[float] = _amount_option(),
    top: int = typer.Option(10, "--top", "-n", min=1, help="Maximum lenders to show."),
    roster: Optional[Path] = ROSTER_OPTION,
):
    """Rank the lender roster against filters (stored filters when none are given)."""
    orchestrator = _orchestrator(roster)
    lenders = _load(orchestrator)
    filters = orchestrator.resolve_filters(
        _filters_from_options(asset_type, deal_type, capital_type, debt_range, location, amount)
    )
    ranked = orchestrator.match(filters)

    if not filters.any_selected():
        typer.echo("No filter categories selected; every lender scores 0.")

    table = Table(title="Lender matches")
    table.add_column("#", justify="right")
    table.add_column("ID", justify="right")
    table.add_column("Lender")
    table.add_column("Score")
    table.add_column("Locations")
    for rank, lender in enumerate(ranked[:top], start=1):
        table.add_row(
            str(rank),
            str(lender.lender_id),
            escape(lender.name),
            _render_bar(lender.match_score),
            escape(", ".join(lender.locations)),
        )
    console.print(table)
    typer.echo(f"{count_matching(ranked)} of {len(lenders)} lenders match the selected filters.")


# ===================================================================
# Lenders group
# ===================================================================


@lenders_grp.command("list")
def lenders_list(roster: Optional[Path] = ROSTER_OPTION):
    """List every lender in the roster."""
    lenders = _load(_orchestrator(roster))
    if not lenders:
        typer.echo("Roster is empty.")
        raise typer.Exit(code=0)
    for lender in lenders:
        typer.echo(f"{lender.lender_id:>4}  {lender.name}")


@lenders_grp.command("show")
def lenders_show(
    lender_id: int = typer.Argument(..., help="Lender id."),
    roster: Optional[Path] = ROSTER_OPTION,
):
    """Show a lender's detail card against the stored filters."""
    orchestrator = _orchestrator(roster)
    _load(orchestrator)
    lender = orchestrator.lender(lender_id)
    if lender is None:
        raise typer.BadParameter(f"Lender {lender_id} not found.")
    filters = orchestrator.store.get_filters()
    lender = replace(lender, match_score=compute_match_score(lender, filters))
    _print_card(lender, filters)
    if not filters.all_selected():
        console.print(f"[yellow]{INCOMPLETE_FILTERS_TITLE}:[/yellow] {INCOMPLETE_FILTERS_MESSAGE}")


@lenders_grp.command("save")
def lenders_save(
    lender_id: int = typer.Argument(..., help="Lender id to save."),
    roster: Optional[Path] = ROSTER_OPTION,
):
    """Save a lender to your shortlist."""
    orchestrator = _orchestrator(roster)
    _load(orchestrator)
    lender = orchestrator.lender(lender_id)
    if lender is None:
        raise typer.BadParameter(f"Lender {lender_id} not found.")
    if orchestrator.store.save_lender(lender):
        typer.echo(f"Saved lender '{lender.name}'.")
    else:
        typer.echo(f"Lender '{lender.name}' is already saved.")


@lenders_grp.command("unsave")
def lenders_unsave(lender_id: int = typer.Argument(..., help="Lender id to remove.")):
    """Remove a lender from your shortlist."""
    store = LenderStore()
    if not store.remove_saved_lender(lender_id):
        raise typer.BadParameter(f"Lender {lender_id} is not saved.")
    typer.echo(f"Removed lender {lender_id} from saved lenders.")


@lenders_grp.command("saved")
def lenders_saved():
    """List saved lenders."""
    saved = LenderStore().list_saved()
    if not saved:
        typer.echo("No saved lenders yet.")
        raise typer.Exit(code=0)
    for lender in saved:
        typer.echo(f"{lender.lender_id:>4}  {lender.name}")


# ===================================================================
# Filters group
# ===================================================================


@filters_grp.command("show")
def filters_show():
    """Show the stored filter selection."""
    filters = LenderStore().get_filters()
    console.print(Panel(_describe_filters(filters), title="Filters", border_style="blue"))
    selected = len(filters.selected_categories())
    typer.echo(f"{selected} of {len(FILTER_OPTIONS)} categories selected.")


@filters_grp.command("set")
def filters_set(
    asset_type: Optional[List[str]] = _asset_option(),
    deal_type: Optional[List[str]] = _deal_option(),
    capital_type: Optional[List[str]] = _capital_option(),
    debt_range: Optional[List[str]] = _debt_option(),
    location: Optional[List[str]] = _location_option(),
    amount: Optional[float] = _amount_option(),
):
    """Replace the given categories in the stored filters; others are kept."""
    given = {
        "asset_types": asset_type,
        "deal_types": deal_type,
        "capital_types": capital_type,
        "debt_ranges": debt_range,
        "locations": location,
    }
    partial = {key: _check_values(key, values) for key, values in given.items() if values}
    if amount is not None:
        partial["requested_amount"] = amount
    if not partial:
        raise typer.BadParameter("Give at least one filter option to set.")
    filters = LenderStore().set_filters(**partial)
    console.print(Panel(_describe_filters(filters), title="Filters updated", border_style="green"))


@filters_grp.command("reset")
def filters_reset():
    """Clear every stored filter category."""
    LenderStore().reset_filters()
    typer.echo("Filters cleared.")


# ===================================================================
# Graph group
# ===================================================================


@graph_grp.command("export")
def graph_export(
    output: Path = typer.Argument(..., help="Output file (.svg or .html)."),
    fmt: Optional[str] = typer.Option(None, "--format", "-f", help="svg or html (default: from extension)."),
    frames: Optional[int] = typer.Option(None, "--frames", min=1, help="Frames to simulate."),
    width: Optional[int] = typer.Option(None, "--width", min=1, help="Canvas width."),
    height: Optional[int] = typer.Option(None, "--height", min=1, help="Canvas height."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed for spawn offsets and particles."),
    asset_type: Optional[List[str]] = _asset_option(),
    deal_type: Optional[List[str]] = _deal_option(),
    capital_type: Optional[List[str]] = _capital_option(),
    debt_range: Optional[List[str]] = _debt_option(),
    location: Optional[List[str]] = _location_option(),
    roster: Optional[Path] = ROSTER_OPTION,
):
    """Render the match graph to an SVG snapshot or an animated HTML page."""
    kind = (fmt or output.suffix.lstrip(".") or "svg").lower()
    if kind not in ("svg", "html"):
        raise typer.BadParameter("Format must be 'svg' or 'html'.")

    orchestrator = _orchestrator(roster)
    _load(orchestrator)
    filters = orchestrator.resolve_filters(
        _filters_from_options(asset_type, deal_type, capital_type, debt_range, location, None)
    )
    cfg = config_manager.load_graph_config()
    frame_count = frames or int(cfg["frames"])
    fps = float(cfg["fps"])

    session, scheduler, canvas = orchestrator.build_session(filters, width=width, height=height, seed=seed)
    rendered = render_frames(session, scheduler, canvas, frame_count, fps=fps)
    session.teardown()

    if kind == "svg":
        svg = rendered[-1] if rendered else frame_to_svg([], session.width, session.height)
        export_svg(svg, output)
    else:
        export_html(rendered, output, fps=fps)

    typer.echo(f"Exported {len(rendered)} frame(s) to {output}")
    typer.echo(f"Active lenders: {session.active_lender_count} of {len(session.lenders)}")


@graph_grp.command("hit")
def graph_hit(
    x: float = typer.Argument(..., help="Pointer x in canvas pixels."),
    y: float = typer.Argument(..., help="Pointer y in canvas pixels."),
    frames: int = typer.Option(120, "--frames", min=0, help="Frames to settle the layout first."),
    width: Optional[int] = typer.Option(None, "--width", min=1, help="Canvas width."),
    height: Optional[int] = typer.Option(None, "--height", min=1, help="Canvas height."),
    seed: Optional[int] = typer.Option(None, "--seed", help="Random seed."),
    roster: Optional[Path] = ROSTER_OPTION,
):
    """Click the graph at (X, Y) after settling, using the stored filters."""
    orchestrator = _orchestrator(roster)
    _load(orchestrator)
    filters = orchestrator.store.get_filters()
    session, scheduler, _ = orchestrator.build_session(filters, width=width, height=height, seed=seed)
    scheduler.run(frames, fps=float(config_manager.load_graph_config()["fps"]))

    hovered = session.on_pointer_move(x, y)
    selected = session.on_click(x, y)
    session.teardown()

    if hovered is None:
        typer.echo("No lender at that point.")
        raise typer.Exit(code=0)
    typer.echo(f"Hit lender #{hovered.lender_id} {hovered.name} (score {hovered.match_score:.2f})")
    if selected is not None:
        _print_card(selected, filters)
    elif session.info_tooltip is not None:
        console.print(f"[yellow]{INCOMPLETE_FILTERS_TITLE}:[/yellow] {INCOMPLETE_FILTERS_MESSAGE}")
    else:
        typer.echo("Lender has no match score; selection cleared.")


# ===================================================================
# Config group
# ===================================================================


@config_grp.command("show")
def config_show():
    """Show effective configuration."""
    table = Table(title="Configuration")
    table.add_column("Key")
    table.add_column("Value")
    for key, value in config_manager.load_graph_config().items():
        table.add_row(f"graph.{key}", str(value))
    for key, value in config_manager.load_roster_config().items():
        table.add_row(f"roster.{key}", str(value) or "(bundled sample)")
    console.print(table)


@config_grp.command("set")
def config_set(
    key: str = typer.Argument(..., help="Dotted key, e.g. graph.width."),
    value: str = typer.Argument(..., help="New value."),
):
    """Persist a configuration value."""
    try:
        stored = config_manager.set_config_value(key, value)
    except ValueError as exc:
        raise typer.BadParameter(str(exc)) from exc
    typer.echo(f"Set {key} = {stored}")


@config_grp.command("reset")
def config_reset(section: str = typer.Argument(..., help="Section to reset: graph or roster.")):
    """Reset a configuration section to defaults."""
    if section not in config_manager.SECTION_DEFAULTS:
        raise typer.BadParameter(f"Unknown section '{section}'.")
    config_manager.clear_section(section)
    typer.echo(f"Reset [{section}] to defaults.")


@app.command("menu")
def menu():
    """Interactive menu."""
    from .cli_tui import show_interactive_menu

    show_interactive_menu()
