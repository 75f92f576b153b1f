"""Integration tests for CLI commands with mocked HTTP."""

import json

import pytest
import requests
import responses
from click.testing import CliRunner

from abr_lookup.commands import cli
from abr_lookup.render import console
from abr_lookup.registry.abr_client import (
    ABN_SEARCH_METHOD,
    ASIC_SEARCH_METHOD,
    DEFAULT_ABR_API_BASE_URL,
    NAME_SEARCH_METHOD,
)


ABN_URL = f"{DEFAULT_ABR_API_BASE_URL}/{ABN_SEARCH_METHOD}"
ASIC_URL = f"{DEFAULT_ABR_API_BASE_URL}/{ASIC_SEARCH_METHOD}"
NAME_URL = f"{DEFAULT_ABR_API_BASE_URL}/{NAME_SEARCH_METHOD}"


@pytest.fixture(autouse=True)
def wide_console(monkeypatch):
    """Keep table cells on one line in captured output."""
    monkeypatch.setattr(console, "width", 200)


@pytest.fixture
def runner():
    """Create a CLI test runner."""
    return CliRunner()


class TestCLIBasics:
    """Basic CLI functionality tests."""

    def test_cli_help(self, runner):
        """Test that --help works."""
        result = runner.invoke(cli, ["--help"])

        assert result.exit_code == 0
        assert "ABR Lookup" in result.output
        assert "abn" in result.output
        assert "asic" in result.output
        assert "name" in result.output

    def test_cli_version(self, runner):
        """Test that --version works."""
        result = runner.invoke(cli, ["--version"])

        assert result.exit_code == 0
        assert "0.1.0" in result.output

    def test_abn_help_shows_options(self, runner):
        result = runner.invoke(cli, ["abn", "--help"])

        assert result.exit_code == 0
        assert "--as-of" in result.output
        assert "--history" in result.output
        assert "--json" in result.output


class TestStatusCommand:
    """Tests for status command."""

    def test_status_not_configured(self, runner, no_abr_guid):
        result = runner.invoke(cli, ["status"])

        assert result.exit_code == 0
        assert "ABR_GUID: not set" in result.output

    def test_status_configured(self, runner, abr_guid):
        result = runner.invoke(cli, ["status"])

        assert result.exit_code == 0
        assert "ABR_GUID: configured" in result.output
        assert abr_guid not in result.output


class TestAbnCommand:
    """Tests for abn and asic commands."""

    @responses.activate
    def test_abn_json(self, runner, abr_guid, successful_xml):
        responses.add(responses.GET, ABN_URL, body=successful_xml, status=200)

        result = runner.invoke(cli, ["abn", "18406500889", "--json", "--as-of", "2024-01-01"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["abn"] == "18406500889"
        assert data["registered_name"] == "CHRISANTHY BARONE"
        assert data["effective_from"] == "2002-12-01"
        assert "history" not in data

    @responses.activate
    def test_abn_json_with_history(self, runner, abr_guid, successful_xml):
        responses.add(responses.GET, ABN_URL, body=successful_xml, status=200)

        result = runner.invoke(cli, ["abn", "18406500889", "--json", "--history", "--as-of", "2024-01-01"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert [a["postcode"] for a in data["history"]["addresses"]] == ["5067", "5000"]

    @responses.activate
    def test_abn_json_errors(self, runner, abr_guid, failed_abn_xml):
        responses.add(responses.GET, ABN_URL, body=failed_abn_xml, status=200)

        result = runner.invoke(cli, ["abn", "12345", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output) == {
            "lookup_number": "12345",
            "errors": "Search text is not a valid ABN or ACN",
        }

    @responses.activate
    def test_abn_rendered(self, runner, abr_guid, successful_company_xml):
        responses.add(responses.GET, ABN_URL, body=successful_company_xml, status=200)

        result = runner.invoke(cli, ["abn", "75 584 793 718", "--as-of", "2024-01-01"])

        assert result.exit_code == 0
        assert "P F & B K BIGGS" in result.output
        assert "PADDY'S CONSTRUCTIONS" in result.output
        assert "Family Partnership" in result.output

    @responses.activate
    def test_abn_rendered_history(self, runner, abr_guid, successful_company_xml):
        responses.add(responses.GET, ABN_URL, body=successful_company_xml, status=200)

        result = runner.invoke(cli, ["abn", "75584793718", "--history"])

        assert result.exit_code == 0
        assert "Trading Names" in result.output
        assert "BIGGS EARTHMOVING" in result.output

    @responses.activate
    def test_abn_rendered_errors(self, runner, abr_guid, failed_guid_xml):
        responses.add(responses.GET, ABN_URL, body=failed_guid_xml, status=200)

        result = runner.invoke(cli, ["abn", "18406500889"])

        assert result.exit_code == 0
        assert "not recognised as a Registered Party" in result.output

    @responses.activate
    def test_asic(self, runner, abr_guid, successful_company_xml):
        responses.add(responses.GET, ASIC_URL, body=successful_company_xml, status=200)

        result = runner.invoke(cli, ["asic", "584793718", "--json"])

        assert result.exit_code == 0
        assert json.loads(result.output)["lookup_number"] == "584793718"

    def test_abn_not_configured(self, runner, no_abr_guid):
        result = runner.invoke(cli, ["abn", "18406500889"])

        assert result.exit_code == 0
        assert "ABR_GUID" in result.output

    @responses.activate
    def test_abn_connection_error(self, runner, abr_guid):
        responses.add(
            responses.GET,
            ABN_URL,
            body=requests.exceptions.ConnectionError("Network unreachable"),
        )

        result = runner.invoke(cli, ["abn", "18406500889"])

        assert result.exit_code == 0
        assert "Connection error" in result.output

    @responses.activate
    def test_abn_unparseable_response(self, runner, abr_guid):
        responses.add(responses.GET, ABN_URL, body="<html>Service Unavailable", status=200)

        result = runner.invoke(cli, ["abn", "18406500889"])

        assert result.exit_code == 0
        assert "ABR API error" in result.output

    def test_invalid_as_of(self, runner):
        result = runner.invoke(cli, ["abn", "18406500889", "--as-of", "yesterday"])

        assert result.exit_code != 0


class TestNameCommand:
    """Tests for name search command."""

    @responses.activate
    def test_name_rendered(self, runner, abr_guid, name_search_xml):
        responses.add(responses.GET, NAME_URL, body=name_search_xml, status=200)

        result = runner.invoke(cli, ["name", "BIGGS", "--state", "QLD"])

        assert result.exit_code == 0
        assert "75584793718" in result.output
        assert "BIGGS BAKERY" in result.output

    @responses.activate
    def test_name_json(self, runner, abr_guid, name_search_xml):
        responses.add(responses.GET, NAME_URL, body=name_search_xml, status=200)

        result = runner.invoke(cli, ["name", "BIGGS", "--json"])

        assert result.exit_code == 0
        data = json.loads(result.output)
        assert data["lookup_name"] == "BIGGS"
        assert len(data["search_results"]) == 2

    def test_name_rejects_unknown_state(self, runner):
        result = runner.invoke(cli, ["name", "BIGGS", "--state", "XX"])

        assert result.exit_code != 0
