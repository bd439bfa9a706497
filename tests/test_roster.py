"""Tests for roster loading."""

import json
import logging

import pytest

from lendergraph_cli import config
from lendergraph_cli.config_manager import set_config_value
from lendergraph_cli.roster import (
    RosterLoadError,
    get_lender_by_id,
    load_roster,
    parse_roster,
    resolve_roster_path,
)


class TestParseRoster:
    """Tests for coercing decoded JSON."""

    def test_list_and_wrapped_forms(self):
        """Test bare lists and wrapped lender lists parse alike."""
        records = [{"lender_id": 1, "name": "One"}]
        assert [l.name for l in parse_roster(records)] == ["One"]
        assert [l.name for l in parse_roster({"lenders": records})] == ["One"]

    def test_non_object_entries_become_empty_profiles(self):
        """Test non-object entries are kept as empty profiles."""
        lenders = parse_roster([{"lender_id": 1, "name": "One"}, "junk", 42])
        assert [l.lender_id for l in lenders] == [1, 3, 4]
        assert [l.name for l in lenders] == ["One", "", ""]
        assert lenders[1].asset_types == []

    def test_missing_ids_get_unique_fallbacks(self, caplog):
        """Test entries without a usable id get unique fallback ids."""
        records = [
            {"lender_id": 5, "name": "Five"},
            {"name": "No Id"},
            {"lender_id": "abc", "name": "Bad Id"},
        ]
        with caplog.at_level(logging.WARNING, logger="lendergraph_cli.models"):
            lenders = parse_roster(records)

        assert [l.lender_id for l in lenders] == [5, 7, 8]
        assert [l.name for l in lenders] == ["Five", "No Id", "Bad Id"]
        assert "no usable lender_id" in caplog.text

    def test_malformed_fields_get_defaults(self):
        """Test malformed fields fall back to empty defaults."""
        lender = parse_roster([{"lender_id": "7", "asset_types": "Office", "min_deal_size": "n/a"}])[0]
        assert lender.lender_id == 7
        assert lender.asset_types == []
        assert lender.debt_ranges is None
        assert lender.min_deal_size == 0.0

    def test_contact_from_user_block(self):
        """Test contact details come from the user block."""
        lender = parse_roster([{"lender_id": 1, "name": "One", "user": {"email": "a@b.co", "phone": "555"}}])[0]
        assert lender.contact_email == "a@b.co"
        assert lender.contact_phone == "555"

    def test_scalar_payload_rejected(self):
        """Test a payload that is not a list is rejected."""
        with pytest.raises(RosterLoadError):
            parse_roster("lenders")


class TestLoadRoster:
    """Tests for locating and reading roster files."""

    def test_explicit_path(self, roster_file):
        """Test loading a roster from an explicit path."""
        lenders = load_roster(roster_file)
        assert [l.lender_id for l in lenders] == [1, 2, 3]
        assert get_lender_by_id(lenders, 2).name == "Beta Lending"
        assert get_lender_by_id(lenders, 99) is None

    def test_bundled_roster(self):
        """Test the bundled sample roster loads by default."""
        assert resolve_roster_path() == config.DEFAULT_ROSTER_FILE
        lenders = load_roster()
        assert len(lenders) == 16
        assert len({l.lender_id for l in lenders}) == 16

    def test_configured_path(self, roster_file):
        """Test the roster path from config is used."""
        set_config_value("roster.path", str(roster_file))
        assert resolve_roster_path() == roster_file
        assert len(load_roster()) == 3

    def test_missing_file(self, tmp_path):
        """Test a missing roster file raises RosterLoadError."""
        with pytest.raises(RosterLoadError, match="not found"):
            load_roster(tmp_path / "nope.json")

    def test_invalid_json(self, tmp_path):
        """Test invalid JSON raises RosterLoadError."""
        path = tmp_path / "bad.json"
        path.write_text("[{", encoding="utf-8")
        with pytest.raises(RosterLoadError):
            load_roster(path)

    def test_wrapped_file(self, tmp_path):
        """Test a file with a lenders key loads."""
        path = tmp_path / "wrapped.json"
        path.write_text(json.dumps({"lenders": [{"lender_id": 4, "name": "Four"}]}), encoding="utf-8")
        assert load_roster(path)[0].name == "Four"
