"""
Task runner — the publish pipeline's orchestration loop.

A pipeline is an ordered list of Tasks.  Each task receives the same
list of parcels and works by side effect; tasks run one at a time.

Flow:
    load backup → for each task: skip if already done → run → record → clear backup

Task flags:
    required    A failure aborts the pipeline (the exception propagates).
                Failures of optional tasks are logged and the run goes on.
    backupable  On success the task is recorded in the backup file, so a
                resumed run skips it.  Non-backupable tasks always rerun.
"""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any

from src.core.models.package import Parcel
from src.core.models.state import TaskBackup
from src.core.persistence.state_file import load_backup, remove_backup, save_backup

logger = logging.getLogger(__name__)

TaskHandler = Callable[[list[Parcel], dict[str, Any]], Awaitable[None]]


@dataclass(frozen=True)
class Task:
    """A named pipeline step."""

    name: str
    handler: TaskHandler
    required: bool = False
    backupable: bool = True

    async def __call__(self, parcels: list[Parcel], options: dict[str, Any] | None = None) -> None:
        await self.handler(parcels, options or {})


@dataclass
class TaskRunReport:
    """Result of running a pipeline."""

    pipeline: str = ""
    results: dict[str, str] = field(default_factory=dict)   # task → ok/failed/skipped
    errors: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> int:
        return sum(1 for status in self.results.values() if status == "ok")

    @property
    def failed(self) -> int:
        return sum(1 for status in self.results.values() if status == "failed")

    @property
    def skipped(self) -> int:
        return sum(1 for status in self.results.values() if status == "skipped")

    @property
    def status(self) -> str:
        if self.failed == 0:
            return "ok"
        if self.succeeded > 0:
            return "partial"
        return "failed"

    def to_dict(self) -> dict:
        return {
            "pipeline": self.pipeline,
            "status": self.status,
            "succeeded": self.succeeded,
            "failed": self.failed,
            "skipped": self.skipped,
            "results": dict(self.results),
            "errors": dict(self.errors),
        }


class TaskRunner:
    """Runs tasks in order over a list of parcels."""

    def __init__(
        self,
        pipeline: str,
        tasks: list[Task],
        backup_path: Path | None = None,
    ):
        self.pipeline = pipeline
        self.tasks = list(tasks)
        self.backup_path = backup_path

    async def run(
        self,
        parcels: list[Parcel],
        options: dict[str, Any] | None = None,
        resume: bool = False,
    ) -> TaskRunReport:
        """Run the pipeline.

        Args:
            parcels: Parcels handed to every task.
            options: Free-form options handed to every task.
            resume: Skip backupable tasks recorded by a previous failed run.

        Raises:
            Exception: Whatever a required task raised.
        """
        options = options or {}
        report = TaskRunReport(pipeline=self.pipeline)
        package_names = [parcel.pkg.package_name for parcel in parcels]
        backup = self._start_backup(package_names, resume)

        for task in self.tasks:
            if task.name in backup.completed_tasks:
                logger.info("⊘ %s (done in a previous run)", task.name)
                report.results[task.name] = "skipped"
                continue

            logger.debug("Running task %s", task.name)
            try:
                await task(parcels, options)
            except Exception as e:
                report.results[task.name] = "failed"
                report.errors[task.name] = str(e)
                if task.required:
                    logger.error("✗ %s failed: %s", task.name, e)
                    raise
                logger.warning("✗ %s failed (optional, continuing): %s", task.name, e)
                continue

            report.results[task.name] = "ok"
            logger.info("✓ %s", task.name)

            if task.backupable and self.backup_path is not None:
                backup.mark_completed(task.name)
                save_backup(backup, self.backup_path)

        if self.backup_path is not None:
            remove_backup(self.backup_path)
        return report

    def _start_backup(self, package_names: list[str], resume: bool) -> TaskBackup:
        if resume and self.backup_path is not None:
            previous = load_backup(self.backup_path)
            if previous is not None and previous.matches(self.pipeline, package_names):
                logger.info(
                    "Resuming %s: %d tasks already done",
                    self.pipeline,
                    len(previous.completed_tasks),
                )
                return previous
            if previous is not None:
                logger.warning("Task backup is for a different run — starting over")
        return TaskBackup(pipeline=self.pipeline, packages=package_names)
