"""Operation log entry model.

Each attempted install or remove is recorded as one OplogEntry, so a
run can be audited after the fact.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from datetime import UTC, datetime
from typing import Any

from craftbrew.models.package import PackageKind
from craftbrew.models.plan import OperationType
from craftbrew.models.result import OperationStatus


@dataclass(frozen=True, slots=True)
class OplogEntry:
    """One attempted package operation.

    Attributes:
        run_id: Identifier shared by all entries of one run.
        kind: Kind of the package.
        name: Name of the package.
        operation: Install or remove.
        status: Outcome of this attempt.
        message: Success message or error text.
        duration_seconds: Duration of this attempt.
        attempt: 1-based attempt number.
        timestamp: ISO 8601 time the attempt finished.
    """

    run_id: str
    kind: PackageKind
    name: str
    operation: OperationType
    status: OperationStatus
    message: str = ""
    duration_seconds: float = 0.0
    attempt: int = 1
    timestamp: str = field(default_factory=lambda: datetime.now(UTC).isoformat())

    def __post_init__(self) -> None:
        """Validate entry data after initialization."""
        if not self.run_id:
            msg = "Run ID cannot be empty"
            raise ValueError(msg)
        if self.attempt < 1:
            msg = f"Attempt number must be positive, got {self.attempt}"
            raise ValueError(msg)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dictionary for JSON storage."""
        return {
            "run_id": self.run_id,
            "timestamp": self.timestamp,
            "kind": self.kind.value,
            "name": self.name,
            "operation": self.operation.value,
            "status": self.status.value,
            "message": self.message,
            "duration_seconds": round(self.duration_seconds, 3),
            "attempt": self.attempt,
        }

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> OplogEntry:
        """Deserialize from dictionary.

        Raises:
            KeyError: If required fields are missing.
            ValueError: If enum values are invalid.
        """
        return cls(
            run_id=data["run_id"],
            kind=PackageKind(data["kind"]),
            name=data["name"],
            operation=OperationType(data["operation"]),
            status=OperationStatus(data["status"]),
            message=data.get("message", ""),
            duration_seconds=float(data.get("duration_seconds", 0.0)),
            attempt=int(data.get("attempt", 1)),
            timestamp=data["timestamp"],
        )

    def to_json_line(self) -> str:
        """Serialize to a single JSON line (without newline)."""
        return json.dumps(self.to_dict(), separators=(",", ":"))

    @classmethod
    def from_json_line(cls, line: str) -> OplogEntry:
        """Deserialize from a JSON line.

        Raises:
            json.JSONDecodeError: If the line is not valid JSON.
            KeyError: If required fields are missing.
            ValueError: If the line is not an object or a value is invalid.
            TypeError: If a field has the wrong type.
        """
        data = json.loads(line)
        if not isinstance(data, dict):
            msg = "Operation log line must be a JSON object"
            raise ValueError(msg)
        return cls.from_dict(data)
