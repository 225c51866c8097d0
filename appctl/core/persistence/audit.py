"""
Audit ledger — append-only record of every deploy and teardown.

Each CLI operation writes one entry to an NDJSON (newline-delimited
JSON) file under the state directory: which workflow ran, against which
application, how far it got and why it stopped.

The ledger is append-only: entries are never modified or deleted.
"""

from __future__ import annotations

import json
import logging
from datetime import UTC, datetime
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field

from appctl.core.engine.executor import StepReport

logger = logging.getLogger(__name__)

DEFAULT_AUDIT_FILE = "audit.ndjson"


class AuditEntry(BaseModel):
    """A single audit log entry."""

    timestamp: str = Field(default_factory=lambda: datetime.now(UTC).isoformat())
    operation_id: str = ""
    operation_type: str = ""       # pipeline-deploy, pipeline-delete, app-delete

    # What was targeted
    app: str = ""
    pipeline: str = ""

    # Results
    status: str = ""               # ok, partial, failed, cancelled
    steps_completed: list[str] = Field(default_factory=list)
    failed_step: str | None = None
    duration_ms: int = 0

    errors: list[str] = Field(default_factory=list)
    context: dict[str, Any] = Field(default_factory=dict)

    @classmethod
    def from_report(cls, operation_type: str, report: StepReport, **kwargs: Any) -> AuditEntry:
        """Build an entry from a workflow's step report."""
        return cls(
            operation_id=report.operation_id,
            operation_type=operation_type,
            status=report.status,
            steps_completed=list(report.completed),
            failed_step=report.failed_step,
            duration_ms=report.duration_ms,
            errors=[report.error] if report.error else [],
            **kwargs,
        )


class AuditWriter:
    """Append-only audit ledger writer.

    Each call to write() appends a single JSON line to the ledger file.
    The file is created if it doesn't exist.
    """

    def __init__(self, path: Path | None = None, state_dir: Path | None = None):
        if path is not None:
            self._path = path
        elif state_dir is not None:
            self._path = state_dir / DEFAULT_AUDIT_FILE
        else:
            self._path = Path(DEFAULT_AUDIT_FILE)

    @property
    def path(self) -> Path:
        return self._path

    def write(self, entry: AuditEntry) -> None:
        """Append an audit entry to the ledger.

        Args:
            entry: The entry to write.
        """
        self._path.parent.mkdir(parents=True, exist_ok=True)

        data = entry.model_dump(mode="json")
        line = json.dumps(data, ensure_ascii=False) + "\n"

        try:
            with self._path.open("a", encoding="utf-8") as f:
                f.write(line)
            logger.debug("Audit entry written: %s/%s", entry.operation_type, entry.operation_id)
        except OSError as e:
            logger.error("Failed to write audit entry: %s", e)

    def read_all(self) -> list[AuditEntry]:
        """Read all entries from the ledger, oldest first."""
        if not self._path.is_file():
            return []

        entries = []
        try:
            with self._path.open("r", encoding="utf-8") as f:
                for line_num, line in enumerate(f, start=1):
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        entries.append(AuditEntry.model_validate(json.loads(line)))
                    except Exception as e:
                        logger.warning("Skipping corrupt audit entry at line %d: %s", line_num, e)
        except OSError as e:
            logger.error("Failed to read audit ledger: %s", e)

        return entries
