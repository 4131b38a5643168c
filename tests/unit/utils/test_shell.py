"""Unit tests for shell execution utilities."""

import subprocess
from unittest.mock import MagicMock, patch

import pytest
from craftbrew.utils.shell import CommandResult, command_exists, run_command


class TestCommandResult:
    """Tests for CommandResult dataclass."""

    def test_success(self) -> None:
        """Exit code 0 is a success."""
        assert CommandResult(stdout="", stderr="", returncode=0).success
        assert not CommandResult(stdout="", stderr="", returncode=1).success

    def test_output_combines_streams(self) -> None:
        """output joins stderr and stdout for error classification."""
        result = CommandResult(stdout="out\n", stderr="Error: boom", returncode=1)

        assert result.output == "Error: boom\nout"

    def test_output_strips_empty_streams(self) -> None:
        """output has no stray newlines when a stream is empty."""
        result = CommandResult(stdout="only stdout", stderr="", returncode=0)

        assert result.output == "only stdout"


class TestRunCommand:
    """Tests for run_command function."""

    @patch("craftbrew.utils.shell.subprocess.run")
    def test_returns_result(self, mock_run: MagicMock) -> None:
        """run_command wraps the completed process."""
        mock_run.return_value = MagicMock(stdout="git 2.44\n", stderr="", returncode=0)

        result = run_command(["brew", "list"])

        assert result == CommandResult(stdout="git 2.44\n", stderr="", returncode=0)

    @patch("craftbrew.utils.shell.subprocess.run")
    def test_captures_output_without_check(self, mock_run: MagicMock) -> None:
        """Output is captured as text and nonzero exits do not raise."""
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=1)

        run_command(["false"])

        kwargs = mock_run.call_args.kwargs
        assert kwargs["capture_output"] is True
        assert kwargs["text"] is True
        assert kwargs["check"] is False

    @patch("craftbrew.utils.shell.subprocess.run")
    def test_passes_timeout_and_session(self, mock_run: MagicMock) -> None:
        """Timeout and new_session are forwarded to subprocess.run."""
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["brew", "install", "git"], timeout=900, new_session=True)

        kwargs = mock_run.call_args.kwargs
        assert kwargs["timeout"] == 900
        assert kwargs["start_new_session"] is True

    @patch("craftbrew.utils.shell.subprocess.run")
    def test_merges_env(self, mock_run: MagicMock, monkeypatch: pytest.MonkeyPatch) -> None:
        """Custom env is merged into the current environment."""
        monkeypatch.setenv("HOME", "/Users/test")
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["brew", "list"], env={"HOMEBREW_NO_AUTO_UPDATE": "1"})

        env = mock_run.call_args.kwargs["env"]
        assert env["HOMEBREW_NO_AUTO_UPDATE"] == "1"
        assert env["HOME"] == "/Users/test"

    @patch("craftbrew.utils.shell.subprocess.run")
    def test_inherits_env_by_default(self, mock_run: MagicMock) -> None:
        """Without env the child inherits the environment unchanged."""
        mock_run.return_value = MagicMock(stdout="", stderr="", returncode=0)

        run_command(["brew", "list"])

        assert mock_run.call_args.kwargs["env"] is None

    @patch("craftbrew.utils.shell.subprocess.run")
    def test_timeout_propagates(self, mock_run: MagicMock) -> None:
        """TimeoutExpired is raised to the caller."""
        mock_run.side_effect = subprocess.TimeoutExpired(cmd=["brew"], timeout=1)

        with pytest.raises(subprocess.TimeoutExpired):
            run_command(["brew", "update"], timeout=1)


class TestCommandExists:
    """Tests for command_exists function."""

    @patch("craftbrew.utils.shell.shutil.which", return_value="/opt/homebrew/bin/brew")
    def test_found(self, mock_which: MagicMock) -> None:
        """Commands on PATH exist."""
        assert command_exists("brew")
        mock_which.assert_called_once_with("brew")

    @patch("craftbrew.utils.shell.shutil.which", return_value=None)
    def test_missing(self, mock_which: MagicMock) -> None:
        """Commands not on PATH do not exist."""
        assert not command_exists("mas")
