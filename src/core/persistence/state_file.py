"""
Task backup persistence — atomic read/write for TaskBackup.

The backup is stored as JSON in .state/tasks-backup.json. Writes are
atomic (write to temp file, then rename) so a crash mid-write never
leaves a half-written backup behind.
"""

from __future__ import annotations

import json
import logging
import os
import tempfile
from pathlib import Path

from src.core.models.state import TaskBackup

logger = logging.getLogger(__name__)

# Default backup file path (relative to the workspace root)
DEFAULT_STATE_DIR = ".state"
DEFAULT_BACKUP_FILE = "tasks-backup.json"


def default_backup_path(root: Path) -> Path:
    """Get the default task backup path for a workspace."""
    return root / DEFAULT_STATE_DIR / DEFAULT_BACKUP_FILE


def load_backup(path: Path) -> TaskBackup | None:
    """Load a task backup from a JSON file.

    Returns:
        The backup, or None if there is none (or it's unreadable).
    """
    if not path.is_file():
        return None

    try:
        data = json.loads(path.read_text(encoding="utf-8"))
        backup = TaskBackup.model_validate(data)
        logger.debug("Loaded task backup from %s (updated_at=%s)", path, backup.updated_at)
        return backup
    except json.JSONDecodeError as e:
        logger.warning("Corrupt task backup %s: %s — ignoring it", path, e)
        return None
    except Exception as e:
        logger.warning("Cannot load task backup from %s: %s — ignoring it", path, e)
        return None


def save_backup(backup: TaskBackup, path: Path) -> None:
    """Save a task backup to a JSON file (atomic write).

    Uses write-to-temp-then-rename to prevent corruption.
    """
    backup.touch()

    path.parent.mkdir(parents=True, exist_ok=True)

    data = backup.model_dump(mode="json")
    content = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    try:
        fd, tmp_path = tempfile.mkstemp(
            dir=path.parent,
            prefix=".backup_",
            suffix=".tmp",
        )
        os.close(fd)
        tmp = Path(tmp_path)
        try:
            tmp.write_text(content, encoding="utf-8")
            tmp.rename(path)
            logger.debug("Task backup saved to %s", path)
        except Exception:
            tmp.unlink(missing_ok=True)
            raise
    except Exception as e:
        logger.error("Failed to save task backup to %s: %s", path, e)
        raise


def remove_backup(path: Path) -> None:
    """Delete the backup once the pipeline has finished."""
    path.unlink(missing_ok=True)
