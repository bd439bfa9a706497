"""Tests for the authoritative match scorer."""

from lendergraph_cli.models import FilterCriteria, LenderProfile
from lendergraph_cli.scoring import (
    category_matches,
    compute_match_score,
    count_matching,
    match_lenders,
    rank_lenders,
    score_lenders,
    selected_categories,
)


def _lender(**kwargs) -> LenderProfile:
    base = dict(lender_id=1, name="Test Lender")
    base.update(kwargs)
    return LenderProfile(**base)


class TestSelectedCategories:
    """Tests for category selection."""

    def test_only_non_empty_categories(self):
        """Test only non-empty categories count as selected."""
        filters = FilterCriteria(asset_types=["Office"], locations=["Midwest"])
        assert selected_categories(filters) == ["asset_types", "locations"]

    def test_accepts_plain_dict(self):
        """Test a plain dict works as filters."""
        assert selected_categories({"deal_types": ["Bridge"], "asset_types": []}) == ["deal_types"]

    def test_none_means_nothing_selected(self):
        """Test missing filters select nothing."""
        assert selected_categories(None) == []


class TestCategoryMatches:
    """Tests for per-category binary matching."""

    def test_nationwide_always_matches_locations(self):
        """Test nationwide lenders match any location."""
        lender = _lender(locations=["nationwide"])
        assert category_matches(lender, "locations", ["West Coast"])

    def test_location_overlap(self):
        """Test locations match on overlap."""
        lender = _lender(locations=["Midwest", "Southeast"])
        assert category_matches(lender, "locations", ["Southeast"])
        assert not category_matches(lender, "locations", ["Northeast"])

    def test_missing_debt_ranges_never_match(self):
        """Test lenders without debt ranges never match that category."""
        lender = _lender(debt_ranges=None)
        assert not category_matches(lender, "debt_ranges", ["$0 - $5M", "$100M+"])

    def test_debt_range_overlap(self):
        """Test debt ranges match on overlap."""
        lender = _lender(debt_ranges=["$5M - $25M"])
        assert category_matches(lender, "debt_ranges", ["$5M - $25M"])

    def test_malformed_values_treated_as_empty(self):
        """Test non-list category values count as empty."""
        lender = _lender()
        lender.asset_types = None  # type: ignore[assignment]
        assert not category_matches(lender, "asset_types", ["Office"])


class TestComputeMatchScore:
    """Tests for the overlap formula."""

    def test_no_selected_categories_scores_zero(self, sample_lenders):
        """Test every lender scores zero without selected categories."""
        for lender in sample_lenders:
            assert compute_match_score(lender, FilterCriteria()) == 0.0

    def test_full_coverage_scores_one(self, sample_lenders, full_filters):
        """Test covering every selected category scores one."""
        assert compute_match_score(sample_lenders[0], full_filters) == 1.0

    def test_partial_match(self, sample_lenders, full_filters):
        """Test a partial match scores its share of categories."""
        # asset + location of five selected categories
        assert compute_match_score(sample_lenders[1], full_filters) == 0.4

    def test_nationwide_example(self):
        """Test the nationwide worked example before and after adding capital types."""
        lender = _lender(
            asset_types=["Multifamily"],
            deal_types=["Refinance"],
            capital_types=[],
            locations=["nationwide"],
        )
        filters = FilterCriteria(
            asset_types=["Multifamily"],
            deal_types=["Refinance"],
            locations=["West Coast"],
        )
        assert compute_match_score(lender, filters) == 1.0

        with_capital = filters.merged(capital_types=["Senior Debt"])
        assert compute_match_score(lender, with_capital) == 0.75

    def test_score_bounds(self, sample_lenders, full_filters):
        """Test scores stay within zero and one."""
        for lender in sample_lenders:
            score = compute_match_score(lender, full_filters)
            assert 0.0 <= score <= 1.0

    def test_monotonic_in_overlap(self, full_filters):
        """Test adding a matching category raises the score."""
        lender = _lender(asset_types=["Multifamily"])
        before = compute_match_score(lender, full_filters)
        lender.deal_types = ["Refinance"]
        after = compute_match_score(lender, full_filters)
        assert after >= before
        assert after > before

    def test_requested_amount_does_not_change_score(self, sample_lenders, full_filters):
        """Test the requested amount does not affect the score."""
        with_amount = full_filters.merged(requested_amount=1_000_000_000)
        for lender in sample_lenders:
            assert compute_match_score(lender, with_amount) == compute_match_score(lender, full_filters)

    def test_dict_lender_with_missing_fields(self, full_filters):
        """Test a sparse dict record scores without errors."""
        score = compute_match_score({"lender_id": 9, "name": "Sparse", "locations": ["nationwide"]}, full_filters)
        assert score == 0.2


class TestScoreLenders:
    """Tests for whole-roster scoring and ranking."""

    def test_returns_copies_in_roster_order(self, sample_lenders, full_filters):
        """Test scoring returns copies in roster order."""
        scored = score_lenders(sample_lenders, full_filters)
        assert [l.lender_id for l in scored] == [1, 2, 3]
        assert [l.match_score for l in scored] == [1.0, 0.4, 0.0]
        # inputs untouched
        assert all(l.match_score == 0.0 for l in sample_lenders)

    def test_idempotent(self, sample_lenders, full_filters):
        """Test scoring twice gives the same scores."""
        first = score_lenders(sample_lenders, full_filters)
        second = score_lenders(sample_lenders, full_filters)
        assert [l.match_score for l in first] == [l.match_score for l in second]

    def test_malformed_record_is_kept(self, sample_lenders, full_filters):
        """Test malformed records are kept and scored."""
        roster = list(sample_lenders) + [{"lender_id": "x", "asset_types": "Multifamily"}]
        scored = score_lenders(roster, full_filters)
        assert len(scored) == 4
        assert scored[-1].match_score == 0.0
        assert scored[-1].lender_id == 7

    def test_records_without_ids_stay_distinct(self):
        """Test records without ids keep distinct ids after scoring."""
        filters = FilterCriteria(asset_types=["Multifamily"])
        scored = score_lenders([{"name": "First"}, {"name": "Second", "asset_types": ["Multifamily"]}], filters)
        assert [l.lender_id for l in scored] == [1, 2]
        assert [l.match_score for l in scored] == [0.0, 1.0]

    def test_rank_descending_with_id_tiebreak(self):
        """Test ranking by score with ties broken by id."""
        lenders = [
            _lender(lender_id=5, match_score=0.5),
            _lender(lender_id=2, match_score=1.0),
            _lender(lender_id=3, match_score=0.5),
        ]
        assert [l.lender_id for l in rank_lenders(lenders)] == [2, 3, 5]

    def test_match_lenders_ranks_best_first(self, sample_lenders, full_filters):
        """Test match_lenders puts the best match first."""
        ranked = match_lenders(list(reversed(sample_lenders)), full_filters)
        assert [l.lender_id for l in ranked] == [1, 2, 3]
        assert count_matching(ranked) == 2
