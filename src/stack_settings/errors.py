"""Custom exceptions for stack-settings.

This module defines typed exceptions for better error handling and clearer
error messages throughout the application.
"""

from pathlib import Path
from typing import List, Optional, Sequence, Union


class SettingsError(RuntimeError):
    """Base class for all stack-settings errors."""
    pass


# Safety Errors
class SafetyError(SettingsError):
    """Base class for backup, restore and precondition errors."""
    pass


class CaptureError(SafetyError):
    """Reading a file for backup failed."""

    def __init__(self, path: Union[str, Path], cause: BaseException):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to create backup for {self.path}: {_describe(cause)}")


class RestoreError(SafetyError):
    """Writing a file back from its snapshot failed."""

    def __init__(self, path: Union[str, Path], cause: BaseException):
        self.path = Path(path)
        self.cause = cause
        super().__init__(f"Failed to restore backup for {self.path}: {_describe(cause)}")


class BatchRestoreError(SafetyError):
    """One or more files in a batch could not be restored."""

    def __init__(self, errors: Sequence[RestoreError], attempted: int):
        self.errors: List[RestoreError] = list(errors)
        self.attempted = attempted
        lines = "\n".join(f"  - {e}" for e in self.errors)
        super().__init__(
            f"Failed to restore {len(self.errors)} of {attempted} files:\n{lines}"
        )

    @property
    def paths(self) -> List[Path]:
        """Paths that still need manual recovery."""
        return [e.path for e in self.errors]


class BatchCaptureError(SafetyError):
    """Batch backup aborted; snapshots taken so far were rolled back."""

    def __init__(
        self,
        error: CaptureError,
        captured: int,
        rollback_error: Optional[BatchRestoreError] = None,
    ):
        self.error = error
        self.path = error.path
        self.captured = captured
        self.rollback_error = rollback_error
        message = (
            f"Backup failed for {error.path} after {captured} file(s) were captured "
            f"and rolled back: {_describe(error.cause)}"
        )
        if rollback_error is not None:
            message += f"\nRollback was incomplete. {rollback_error}"
        super().__init__(message)


class GitStatusError(SafetyError):
    """The git status query itself failed."""
    pass


class UncommittedChangesError(SafetyError):
    """Target files have uncommitted changes."""

    def __init__(self, paths: Sequence[str], hint: str = "Please commit these files before proceeding."):
        self.paths = list(paths)
        file_list = "\n".join(f"  - {p}" for p in self.paths)
        super().__init__(
            f"The following files have uncommitted changes:\n{file_list}\n\n{hint}"
        )


# Configuration Errors
class ConfigError(SettingsError):
    """Base class for configuration errors."""
    pass


class NotInRepositoryError(ConfigError):
    """No project root marker found above the start directory."""

    def __init__(self, start: Path, marker: str):
        self.start = start
        super().__init__(f"Not inside a template project (no {marker} found above {start})")


def _describe(cause: BaseException) -> str:
    """Short human-readable description of an underlying exception."""
    if isinstance(cause, OSError) and cause.strerror:
        return cause.strerror
    return str(cause) or type(cause).__name__
