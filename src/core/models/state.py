"""
TaskBackup — progress record of an interrupted task pipeline.

Serialized to .state/tasks-backup.json after every backupable task, so
a failed run can be resumed without redoing work that already
succeeded.  Deleted once the pipeline finishes.
"""

from __future__ import annotations

from datetime import UTC, datetime
from typing import Any

from pydantic import BaseModel, Field


def _now_iso() -> str:
    """Current UTC time as ISO string."""
    return datetime.now(UTC).isoformat()


class TaskBackup(BaseModel):
    """What a pipeline run has completed so far."""

    # ── Schema ───────────────────────────────────────────────────
    schema_version: int = 1

    # ── Identity ─────────────────────────────────────────────────
    pipeline: str = ""
    packages: list[str] = Field(default_factory=list)

    # ── Timestamps ───────────────────────────────────────────────
    created_at: str = Field(default_factory=_now_iso)
    updated_at: str = Field(default_factory=_now_iso)

    # ── Progress ─────────────────────────────────────────────────
    completed_tasks: list[str] = Field(default_factory=list)

    # ── Extensible metadata ──────────────────────────────────────
    metadata: dict[str, Any] = Field(default_factory=dict)

    def touch(self) -> None:
        """Update the updated_at timestamp."""
        self.updated_at = _now_iso()

    def matches(self, pipeline: str, packages: list[str]) -> bool:
        """Whether this backup was taken for the same pipeline and packages."""
        return self.pipeline == pipeline and sorted(self.packages) == sorted(packages)

    def mark_completed(self, task_name: str) -> None:
        if task_name not in self.completed_tasks:
            self.completed_tasks.append(task_name)
