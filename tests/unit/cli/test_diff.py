"""Unit tests for diff and validate commands."""

import json
from collections.abc import Callable, Iterator
from pathlib import Path
from unittest.mock import patch

import pytest
from craftbrew.cli.main import app
from fakes import FakeClient, cask, formula, tap
from typer.testing import CliRunner

runner = CliRunner()

WriteManifest = Callable[[str, str], Path]


@pytest.fixture
def client() -> Iterator[FakeClient]:
    fake = FakeClient(installed={formula("git"), cask("slack"), tap("homebrew/core")})
    with patch("craftbrew.cli.runner.get_client", return_value=fake):
        yield fake


class TestDiffCommand:
    """Tests for the diff command."""

    def test_diff_table(self, client: FakeClient, write_manifest: WriteManifest) -> None:
        """diff shows missing, extraneous and protected packages."""
        write_manifest("base.brewfile", 'brew "git"\ncask "firefox"\n')

        result = runner.invoke(app, ["diff"])

        assert result.exit_code == 0, result.output
        assert "firefox" in result.output
        assert "slack" in result.output
        assert "homebrew/core" in result.output
        assert "1 to install" in result.output
        assert "1 to remove" in result.output
        assert client.calls == []

    def test_diff_in_sync(self, client: FakeClient, write_manifest: WriteManifest) -> None:
        """An in-sync system is reported as such."""
        client.installed = {formula("git")}
        write_manifest("base.brewfile", 'brew "git"\n')

        result = runner.invoke(app, ["diff"])

        assert result.exit_code == 0
        assert "System is in sync with the manifests." in result.output

    def test_diff_json(self, client: FakeClient, write_manifest: WriteManifest) -> None:
        """--json prints machine-readable output."""
        write_manifest("base.brewfile", 'brew "git"\ncask "firefox"\n')

        result = runner.invoke(app, ["diff", "--json"])

        assert result.exit_code == 0, result.output
        data = json.loads(result.stdout)
        assert data["in_sync"] is False
        assert data["summary"]["to_install"] == 1
        assert data["to_remove"] == [{"kind": "cask", "name": "slack"}]
        assert data["protected"] == [{"kind": "tap", "name": "homebrew/core"}]

    def test_diff_probe_error(self, client: FakeClient, write_manifest: WriteManifest) -> None:
        """Probe failures exit with code 3."""
        write_manifest("base.brewfile", 'brew "git"\n')
        client.available = False

        result = runner.invoke(app, ["diff"])

        assert result.exit_code == 3
        assert "not available" in result.output


class TestValidateCommand:
    """Tests for the validate command."""

    def test_valid_profile(self, client: FakeClient, write_manifest: WriteManifest) -> None:
        """Valid manifests are summarised without probing."""
        write_manifest("base.brewfile", 'brew "git"\ncask "firefox"\n')
        write_manifest("dev.brewfile", 'brew "git"\nbrew "neovim"\n')

        result = runner.invoke(app, ["validate", "--system", "dev"])

        assert result.exit_code == 0, result.output
        assert "2 manifest(s) valid: 3 unique packages" in result.output
        assert client.list_calls == []

    def test_invalid_manifest(self, client: FakeClient, write_manifest: WriteManifest) -> None:
        """Syntax errors exit with code 2 and name the line."""
        path = write_manifest("base.brewfile", 'brew "git"\nbrew "x", colour: "red"\n')

        result = runner.invoke(app, ["validate", "-m", str(path)])

        assert result.exit_code == 2
        assert "base.brewfile:2" in result.output
        assert "Unknown attribute 'colour'" in result.output
