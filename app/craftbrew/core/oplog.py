"""Append-only operation log.

This module provides the OperationLog class, which records every attempted
package operation in a JSONL file independent of the snapshot store.
"""

import json
import logging
from pathlib import Path

from craftbrew.core.paths import get_oplog_path
from craftbrew.models.oplog import OplogEntry

logger = logging.getLogger(__name__)


class OperationLog:
    """Operation log stored as JSON Lines.

    Storage location: ~/.local/state/craftbrew/operations.jsonl

    Each line is a complete JSON object representing one OplogEntry, so
    writes are plain appends and a torn last line only loses that line.

    Attributes:
        path: Path of the log file.
    """

    def __init__(self, path: Path | None = None) -> None:
        """Initialize OperationLog.

        Args:
            path: Optional override for the log file path.
        """
        self.path = path if path is not None else get_oplog_path()

    def record(self, entry: OplogEntry) -> None:
        """Append an entry to the log.

        Creates the file and parent directories if they don't exist.

        Args:
            entry: The entry to record.

        Raises:
            OSError: If the file cannot be written.
        """
        self.path.parent.mkdir(parents=True, exist_ok=True)
        with self.path.open(mode="a", encoding="utf-8") as f:
            f.write(entry.to_json_line() + "\n")
            f.flush()

    def read(self, limit: int | None = None, run_id: str | None = None) -> list[OplogEntry]:
        """Read entries, newest first.

        Args:
            limit: Maximum number of entries to return. If None, returns all.
            run_id: Only return entries of this run.

        Returns:
            List of OplogEntry, newest first. Empty if the file doesn't exist.
        """
        if not self.path.exists():
            return []

        entries: list[OplogEntry] = []
        with self.path.open(encoding="utf-8") as f:
            for line_num, line in enumerate(f, start=1):
                line = line.strip()
                if not line:
                    continue
                try:
                    entry = OplogEntry.from_json_line(line)
                except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                    logger.warning("Skipping corrupt operation log line %d: %s", line_num, e)
                    continue
                if run_id is None or entry.run_id == run_id:
                    entries.append(entry)

        entries.reverse()
        if limit is not None:
            return entries[:limit]
        return entries
