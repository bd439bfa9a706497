"""Command hierarchy groups for organized CLI experience.

Provides logical grouping of commands under:
  lg lenders  — Roster browsing and saved lenders
  lg filters  — Stored filter selection
  lg graph    — Match graph export and hit-testing
  lg config   — Configuration management
"""

from __future__ import annotations

import typer

# ── Lenders group ────────────────────────────────────────────
lenders_grp = typer.Typer(
    help="🏦 Lenders — browse the roster and manage saved lenders.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ── Filters group ────────────────────────────────────────────
filters_grp = typer.Typer(
    help="🎛  Filters — view and change the stored borrower filters.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ── Graph group ──────────────────────────────────────────────
graph_grp = typer.Typer(
    help="🕸  Graph — render the radial match graph and probe it.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)

# ── Configuration group ──────────────────────────────────────
config_grp = typer.Typer(
    help="⚙️  Configuration — graph tuning and roster location.",
    no_args_is_help=True,
    rich_markup_mode="rich",
)
