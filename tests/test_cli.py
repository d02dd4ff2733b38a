"""Tests for the command line entry point."""

from __future__ import annotations

import json

import pytest
from dependency_injector import providers

from retail_search import __main__ as cli
from retail_search.container import create_container

from .fakes import FakeLookup


@pytest.fixture
def offline(monkeypatch):
    """Route the CLI's container to a fake location lookup."""

    def offline_container(settings):
        container = create_container(settings)
        container.lookup_client.override(providers.Object(_ClosableLookup()))
        return container

    monkeypatch.setattr(cli, "create_container", offline_container)
    monkeypatch.delenv("RETAIL_SEARCH_SOURCES", raising=False)


class _ClosableLookup(FakeLookup):
    async def close(self) -> None:
        pass


class TestParser:
    def test_defaults(self):
        args = cli.build_parser().parse_args(["running shoes"])
        assert args.query == "running shoes"
        assert args.location == "110001"
        assert args.json is False
        assert args.timeout is None

    def test_log_level_choices(self):
        with pytest.raises(SystemExit):
            cli.build_parser().parse_args(["shoes", "--log-level", "LOUD"])


class TestMain:
    def test_text_output(self, offline, capsys):
        assert cli.main(["running shoes under 3000", "--location", "110001"]) == 0
        out = capsys.readouterr().out
        assert "Results for \"running shoes under 3000\"" in out
        assert "amazon" in out
        assert "[top_pick]" in out
        assert "Recommended because" in out

    def test_json_output(self, offline, capsys):
        assert cli.main(["running shoes under 3000", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert data["total"] > 0
        assert set(data["results"]) == {"amazon", "flipkart", "myntra", "meesho"}

    def test_invalid_location_marks_sources(self, offline, capsys):
        assert cli.main(["running shoes", "--location", "123", "--json"]) == 0
        data = json.loads(capsys.readouterr().out)
        assert all(r["status"] == "not_deliverable" for r in data["results"].values())
        assert data["total"] == 0

    def test_empty_query_is_rejected(self, offline, capsys):
        assert cli.main(["   "]) == 2
        assert "Invalid input" in capsys.readouterr().err

    def test_bad_timeout(self, offline, capsys):
        assert cli.main(["shoes", "--timeout", "0"]) == 2

    def test_bad_environment(self, monkeypatch, capsys):
        monkeypatch.setenv("RETAIL_SEARCH_SOURCE_TIMEOUT", "never")
        assert cli.main(["shoes"]) == 2
        assert "Configuration error" in capsys.readouterr().err
