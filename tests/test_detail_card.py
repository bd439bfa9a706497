"""Tests for detail card content."""

import pytest

from lendergraph_cli.detail_card import (
    build_card_rows,
    criteria_matches,
    format_currency,
    match_percentage,
)
from lendergraph_cli.models import FilterCriteria
from lendergraph_cli.scoring import score_lenders


@pytest.mark.parametrize(
    "amount,expected",
    [
        (0, "$0"),
        (999, "$999"),
        (500_000, "$500K"),
        (5_000_000, "$5M"),
        (2_500_000, "$2.5M"),
        (1_500_000_000, "$1.5B"),
    ],
)
def test_format_currency(amount, expected):
    """Test compact currency formatting."""
    assert format_currency(amount) == expected


class TestCriteriaMatches:
    """Tests for per-row match badges."""

    def test_nothing_selected(self):
        """Test a category with no selection has no badge."""
        assert criteria_matches(["Office"], [], "asset_types") is None

    def test_overlap(self):
        """Test overlap decides match or mismatch."""
        assert criteria_matches(["Office", "Retail"], ["Retail"], "asset_types") is True
        assert criteria_matches(["Office"], ["Retail"], "asset_types") is False

    def test_nationwide(self):
        """Test nationwide lenders match any location."""
        assert criteria_matches(["nationwide"], ["Midwest"], "locations") is True


class TestBuildCardRows:
    """Tests for the full card layout."""

    def test_rows_and_badges(self, sample_lenders, full_filters):
        """Test row order, values and badges for a partial match."""
        beta = score_lenders(sample_lenders, full_filters)[1]
        rows = {row.label: row for row in build_card_rows(beta, full_filters)}

        assert list(rows) == ["Asset Types", "Deal Types", "Capital Types", "Debt Range", "Deal Size", "Locations"]
        assert rows["Asset Types"].badge == "Match"
        assert rows["Deal Types"].badge == "Mismatch"
        assert rows["Debt Range"].value == "-"
        assert rows["Deal Size"].value == "$1M - $10M"
        assert rows["Deal Size"].badge == ""
        assert match_percentage(beta) == 40

    def test_no_filters_no_badges(self, sample_lenders):
        """Test no row carries a badge without filters."""
        rows = build_card_rows(sample_lenders[0], FilterCriteria())
        assert all(row.status is None for row in rows)
