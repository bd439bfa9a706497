"""Pytest configuration and fixtures for LenderGraph CLI tests."""

import json
import random
from pathlib import Path
from typing import Callable, List, Optional, Tuple

import pytest

from lendergraph_cli.canvas import RecordingCanvas
from lendergraph_cli.models import FilterCriteria, LenderProfile
from lendergraph_cli.renderer import RendererSession, Viewport
from lendergraph_cli.scheduler import ManualFrameScheduler
from lendergraph_cli.scoring import score_lenders


@pytest.fixture(autouse=True)
def _isolated_home(tmp_path: Path, monkeypatch):
    """Redirect all local state and config into a temporary home directory."""
    home = tmp_path / "lendergraph_home"
    monkeypatch.setattr("lendergraph_cli.config.BASE_DIR", home)
    monkeypatch.setattr("lendergraph_cli.config.CONFIG_FILE", home / "config.toml")
    monkeypatch.setattr("lendergraph_cli.config.STATE_FILE", home / "state.json")
    monkeypatch.setattr("lendergraph_cli.config.SAVED_LENDERS_FILE", home / "saved_lenders.json")
    return home


@pytest.fixture
def full_filters() -> FilterCriteria:
    """Filters with every category selected."""
    return FilterCriteria(
        asset_types=["Multifamily"],
        deal_types=["Refinance"],
        capital_types=["Senior Debt"],
        debt_ranges=["$5M - $25M"],
        locations=["West Coast"],
    )


@pytest.fixture
def sample_lenders() -> List[LenderProfile]:
    """Three lenders: a perfect match, a partial match and a miss under full_filters."""
    return [
        LenderProfile(
            lender_id=1,
            name="Alpha Capital",
            asset_types=["Multifamily"],
            deal_types=["Refinance"],
            capital_types=["Senior Debt"],
            debt_ranges=["$5M - $25M"],
            locations=["nationwide"],
            min_deal_size=5_000_000,
            max_deal_size=25_000_000,
        ),
        LenderProfile(
            lender_id=2,
            name="Beta Lending",
            asset_types=["Multifamily", "Office"],
            deal_types=["Acquisition"],
            capital_types=["Mezzanine"],
            locations=["West Coast"],
            min_deal_size=1_000_000,
            max_deal_size=10_000_000,
        ),
        LenderProfile(
            lender_id=3,
            name="Gamma Equity",
            asset_types=["Office"],
            deal_types=["Construction"],
            capital_types=["JV Equity"],
            debt_ranges=["$100M+"],
            locations=["Northeast"],
            min_deal_size=100_000_000,
            max_deal_size=500_000_000,
        ),
    ]


@pytest.fixture
def roster_file(tmp_path: Path, sample_lenders: List[LenderProfile]) -> Path:
    """Sample lenders written to a roster JSON file."""
    path = tmp_path / "roster.json"
    path.write_text(json.dumps([lender.to_dict() for lender in sample_lenders]), encoding="utf-8")
    return path


SessionFactory = Callable[..., Tuple[RendererSession, ManualFrameScheduler, RecordingCanvas]]


@pytest.fixture
def make_session(sample_lenders: List[LenderProfile]) -> SessionFactory:
    """Build an 800x600 renderer session loaded with scored sample lenders."""

    def _make(
        filters: FilterCriteria,
        lenders: Optional[List[LenderProfile]] = None,
        all_filters_selected: Optional[bool] = None,
        on_lender_click=None,
        canvas: Optional[RecordingCanvas] = None,
    ):
        scheduler = ManualFrameScheduler()
        canvas = canvas if canvas is not None else RecordingCanvas()
        session = RendererSession(
            scheduler,
            canvas=canvas,
            on_lender_click=on_lender_click,
            rng=random.Random(1),
        )
        session.update(
            lenders=score_lenders(sample_lenders if lenders is None else lenders, filters),
            form_data=filters.to_dict(),
            filters_applied=filters.any_selected(),
            all_filters_selected=(
                filters.all_selected() if all_filters_selected is None else all_filters_selected
            ),
        )
        session.attach(Viewport(width=800, height=660))
        return session, scheduler, canvas

    return _make
