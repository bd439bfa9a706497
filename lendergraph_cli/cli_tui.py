"""Interactive TUI menu for LenderGraph CLI."""

from __future__ import annotations

import typer
from rich.console import Console
from rich.markup import escape
from rich.panel import Panel
from rich.prompt import Prompt

from .models import FILTER_OPTIONS
from .orchestrator import MatchOrchestrator
from .roster import RosterLoadError
from .storage import LenderStore

console = Console()


def show_interactive_menu() -> None:
    """Display the interactive menu until the user exits."""
    console.print()
    console.print(
        Panel.fit(
            "[bold cyan]🏢 LenderGraph CLI[/bold cyan]\n"
            "[dim]Commercial real-estate lender matching[/dim]",
            border_style="cyan",
        )
    )

    while True:
        console.print("\n[bold]What would you like to do?[/bold]\n")

        choices = [
            "1. 🎛  Edit a filter category",
            "2. 🔍 Show top matches",
            "3. 🏦 Show a lender's detail card",
            "4. 🧹 Reset filters",
            "0. Exit",
        ]
        for choice in choices:
            console.print(f"  {choice}")

        selection = Prompt.ask("\nChoice", choices=["0", "1", "2", "3", "4"], default="0")

        if selection == "0":
            console.print("[cyan]Goodbye![/cyan]")
            break
        elif selection == "1":
            _edit_category()
        elif selection == "2":
            _run_match()
        elif selection == "3":
            lender_id = Prompt.ask("Lender id")
            if lender_id.strip().isdigit():
                _run_show(int(lender_id.strip()))
        elif selection == "4":
            LenderStore().reset_filters()
            console.print("[green]✓[/green] Filters cleared.")


def _edit_category() -> None:
    """Pick a category and replace its values from a comma-separated list."""
    category = Prompt.ask("Category", choices=list(FILTER_OPTIONS), default="asset_types")
    options = FILTER_OPTIONS[category]
    console.print(f"[dim]Options: {escape(', '.join(options))}[/dim]")
    raw = Prompt.ask("Values (comma-separated, blank to clear)", default="")
    values = [v.strip() for v in raw.split(",") if v.strip()]
    unknown = [v for v in values if v not in options]
    if unknown:
        console.print(f"[red]✗[/red] Unknown values: {escape(', '.join(unknown))}")
        return
    LenderStore().set_filters(**{category: values})
    console.print(f"[green]✓[/green] Updated {category.replace('_', ' ')}.")


def _run_match() -> None:
    """Run matching from TUI."""
    try:
        from .cli import match

        match(
            asset_type=None,
            deal_type=None,
            capital_type=None,
            debt_range=None,
            location=None,
            amount=None,
            top=10,
            roster=None,
        )
    except (typer.Exit, SystemExit):
        pass
    except (typer.BadParameter, RosterLoadError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")


def _run_show(lender_id: int) -> None:
    """Show a detail card from TUI."""
    try:
        from .cli import lenders_show

        orchestrator = MatchOrchestrator(LenderStore())
        if orchestrator.lender(lender_id) is None:
            console.print(f"[yellow]No lender with id {lender_id}.[/yellow]")
            return
        lenders_show(lender_id=lender_id, roster=None)
    except (typer.Exit, SystemExit):
        pass
    except (typer.BadParameter, RosterLoadError) as e:
        console.print(f"[red]Error: {escape(str(e))}[/red]")
