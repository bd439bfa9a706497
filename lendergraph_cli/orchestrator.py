"""Orchestrator coordinating roster, scorer, filter state and graph renderer."""

from __future__ import annotations

import random
from pathlib import Path
from typing import List, Optional, Tuple

from .canvas import RecordingCanvas
from .config_manager import load_graph_config
from .models import FilterCriteria, LenderProfile
from .renderer import GraphSettings, RendererSession, Viewport
from .roster import get_lender_by_id, load_roster
from .scheduler import ManualFrameScheduler
from .scoring import match_lenders
from .storage import LenderStore


class MatchOrchestrator:
    """Feeds the scored roster and filter state into renderer sessions."""

    def __init__(self, store: LenderStore, roster_path: Optional[Path] = None):
        self.store = store
        self.roster_path = roster_path
        self._roster: Optional[List[LenderProfile]] = None

    @property
    def roster(self) -> List[LenderProfile]:
        if self._roster is None:
            self._roster = load_roster(self.roster_path)
        return self._roster

    def resolve_filters(self, overrides: Optional[FilterCriteria] = None) -> FilterCriteria:
        """Explicit filters when any category is given, else the stored state.

        A requested amount given on its own is applied on top of the stored
        categories.
        """
        if overrides is not None and overrides.any_selected():
            return overrides
        stored = self.store.get_filters()
        if overrides is not None and overrides.requested_amount is not None:
            return stored.merged(requested_amount=overrides.requested_amount)
        return stored

    def match(self, filters: FilterCriteria) -> List[LenderProfile]:
        return match_lenders(self.roster, filters)

    def lender(self, lender_id: int) -> Optional[LenderProfile]:
        return get_lender_by_id(self.roster, lender_id)

    def build_session(
        self,
        filters: FilterCriteria,
        width: Optional[float] = None,
        height: Optional[float] = None,
        seed: Optional[int] = None,
    ) -> Tuple[RendererSession, ManualFrameScheduler, RecordingCanvas]:
        """Create a renderer session sized for export and loaded with scores."""
        cfg = load_graph_config()
        settings = GraphSettings.from_config()
        scheduler = ManualFrameScheduler()
        canvas = RecordingCanvas()
        session = RendererSession(
            scheduler,
            canvas=canvas,
            rng=random.Random(cfg["seed"] if seed is None else seed),
            settings=settings,
        )
        session.update(
            lenders=self.match(filters),
            form_data=filters.to_dict(),
            filters_applied=filters.any_selected(),
            all_filters_selected=filters.all_selected(),
        )
        session.attach(Viewport(
            width=float(width or cfg["width"]),
            height=float(height or cfg["height"]) + settings.legend_height,
        ))
        return session, scheduler, canvas
