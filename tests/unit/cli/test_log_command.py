"""Unit tests for the log command."""

import json
from collections.abc import Callable
from pathlib import Path
from unittest.mock import patch

from craftbrew.cli.main import app
from fakes import FakeClient, cask, formula
from typer.testing import CliRunner

runner = CliRunner()

WriteManifest = Callable[[str, str], Path]


def _sync(client: FakeClient) -> None:
    with patch("craftbrew.cli.runner.get_client", return_value=client):
        runner.invoke(app, ["sync", "--force"])


class TestLogCommand:
    """Tests for the log command."""

    def test_empty_log(self) -> None:
        """No recorded operations are reported."""
        result = runner.invoke(app, ["log"])

        assert result.exit_code == 0
        assert "No operations recorded" in result.output

    def test_entries_after_sync(self, write_manifest: WriteManifest) -> None:
        """Operations of a sync are listed."""
        write_manifest("base.brewfile", 'brew "git"\ncask "firefox"\n')
        _sync(FakeClient(installed={formula("git"), cask("slack")}))

        result = runner.invoke(app, ["log"])

        assert result.exit_code == 0, result.output
        assert "cask:firefox" in result.output
        assert "cask:slack" in result.output

    def test_json_newest_first(self, write_manifest: WriteManifest) -> None:
        """--json lists entries newest first."""
        write_manifest("base.brewfile", 'brew "git"\ncask "firefox"\n')
        _sync(FakeClient(installed={formula("git"), cask("slack")}))

        result = runner.invoke(app, ["log", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert [(e["operation"], e["name"]) for e in data] == [
            ("remove", "slack"),
            ("install", "firefox"),
        ]
        assert all(e["status"] == "success" for e in data)

    def test_filter_by_run(self, write_manifest: WriteManifest) -> None:
        """--run shows one run only."""
        write_manifest("base.brewfile", 'cask "firefox"\n')
        _sync(FakeClient())
        write_manifest("base.brewfile", 'cask "firefox"\nbrew "jq"\n')
        _sync(FakeClient(installed={cask("firefox")}))
        latest_run = json.loads(runner.invoke(app, ["log", "--json"]).stdout)[0]["run_id"]

        result = runner.invoke(app, ["log", "--json", "--run", latest_run])

        data = json.loads(result.stdout)
        assert [e["name"] for e in data] == ["jq"]

    def test_limit(self, write_manifest: WriteManifest) -> None:
        """--limit caps the number of entries."""
        write_manifest("base.brewfile", 'brew "git"\ncask "firefox"\n')
        _sync(FakeClient(installed={formula("git"), cask("slack")}))

        result = runner.invoke(app, ["log", "--json", "--limit", "1"])

        assert len(json.loads(result.stdout)) == 1
