"""Unit tests for the operation log."""

import json
from pathlib import Path

import pytest
from craftbrew.core.oplog import OperationLog
from craftbrew.core.paths import get_oplog_path
from craftbrew.models.oplog import OplogEntry
from craftbrew.models.package import PackageKind
from craftbrew.models.plan import OperationType
from craftbrew.models.result import OperationStatus


def _entry(name: str, run_id: str = "run1", **kwargs: object) -> OplogEntry:
    return OplogEntry(
        run_id=run_id,
        kind=PackageKind.FORMULA,
        name=name,
        operation=OperationType.INSTALL,
        status=OperationStatus.SUCCESS,
        **kwargs,  # type: ignore[arg-type]
    )


@pytest.fixture
def log(tmp_path: Path) -> OperationLog:
    return OperationLog(tmp_path / "state" / "ops.jsonl")


class TestOperationLog:
    """Tests for OperationLog."""

    def test_default_path(self) -> None:
        """Without an override the XDG state path is used."""
        assert OperationLog().path == get_oplog_path()

    def test_read_missing_file(self, log: OperationLog) -> None:
        """A missing log reads as empty."""
        assert log.read() == []

    def test_record_creates_file(self, log: OperationLog) -> None:
        """record creates parent directories and appends a line."""
        log.record(_entry("git"))

        assert log.path.is_file()
        assert len(log.path.read_text().splitlines()) == 1

    def test_read_newest_first(self, log: OperationLog) -> None:
        """Entries are returned newest first."""
        for name in ("a", "b", "c"):
            log.record(_entry(name))

        assert [e.name for e in log.read()] == ["c", "b", "a"]

    def test_read_limit(self, log: OperationLog) -> None:
        """limit caps the number of entries."""
        for name in ("a", "b", "c"):
            log.record(_entry(name))

        assert [e.name for e in log.read(limit=2)] == ["c", "b"]

    def test_read_filters_by_run(self, log: OperationLog) -> None:
        """run_id selects one run."""
        log.record(_entry("a", run_id="r1"))
        log.record(_entry("b", run_id="r2"))

        assert [e.name for e in log.read(run_id="r1")] == ["a"]

    def test_corrupt_lines_skipped(
        self, log: OperationLog, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Corrupt lines are skipped with a warning."""
        log.record(_entry("a"))
        with log.path.open("a") as f:
            f.write("{torn line\n\n")
        log.record(_entry("b"))

        entries = log.read()

        assert [e.name for e in entries] == ["b", "a"]
        assert "Skipping corrupt operation log line 2" in caplog.text

    def test_non_object_lines_skipped(
        self, log: OperationLog, caplog: pytest.LogCaptureFixture
    ) -> None:
        """Valid JSON that is not a well-formed entry is skipped too."""
        log.record(_entry("a"))
        bad = {**_entry("x").to_dict(), "attempt": [1]}
        with log.path.open("a") as f:
            f.write("[1, 2]\n")
            f.write('"text"\n')
            f.write(json.dumps(bad) + "\n")
        log.record(_entry("b"))

        entries = log.read()

        assert [e.name for e in entries] == ["b", "a"]
        for line_num in (2, 3, 4):
            assert f"Skipping corrupt operation log line {line_num}" in caplog.text
