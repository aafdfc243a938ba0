"""Safety layer: git precondition checks and in-memory file backups."""

from .backup import BackupEngine, Snapshot, SnapshotBatch
from .git import (
    GitStatusResult,
    check_git_status,
    check_git_status_for_directories,
    ensure_directories_committed,
    ensure_files_committed,
)
from .session import guarded_edit

__all__ = [
    "BackupEngine",
    "Snapshot",
    "SnapshotBatch",
    "GitStatusResult",
    "check_git_status",
    "check_git_status_for_directories",
    "ensure_directories_committed",
    "ensure_files_committed",
    "guarded_edit",
]
