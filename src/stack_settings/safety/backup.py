"""In-memory file backups for destructive multi-file edits.

Two batch policies, deliberately asymmetric:

- capture_all stops at the first failed read and rolls back whatever it
  had already captured before re-raising. Nothing on disk has been touched
  yet, so aborting early is always safe.
- restore_all never stops early. By the time it runs the tree has already
  been edited, so it restores as many files as it can and reports every
  failure at the end.

Snapshots live only in process memory for the duration of one command.
"""

import logging
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable, Iterator, List, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from ..errors import BatchCaptureError, BatchRestoreError, CaptureError, RestoreError
from ..reporter import Reporter
from ..utils import read_text_verbatim, write_text_verbatim

logger = logging.getLogger(__name__)


class Snapshot(BaseModel):
    """Verbatim content of one file at capture time."""

    model_config = ConfigDict(frozen=True)

    path: Path
    content: str
    captured_at: float = Field(default_factory=time.time)


@dataclass(frozen=True)
class SnapshotBatch:
    """Snapshots in the order their paths were supplied."""

    snapshots: Tuple[Snapshot, ...] = ()

    def __len__(self) -> int:
        return len(self.snapshots)

    def __iter__(self) -> Iterator[Snapshot]:
        return iter(self.snapshots)

    def __getitem__(self, index: int) -> Snapshot:
        return self.snapshots[index]

    @property
    def paths(self) -> List[Path]:
        return [s.path for s in self.snapshots]


class BackupEngine:
    """Captures and restores file contents.

    Args:
        reporter: Where progress and errors are reported. Each engine gets
            its own Reporter when none is given.
    """

    def __init__(self, reporter: Optional[Reporter] = None):
        self.reporter = reporter or Reporter()

    def capture(self, path: Union[str, Path]) -> Snapshot:
        """Read a file and return its snapshot.

        Raises:
            CaptureError: If the file is missing or unreadable
        """
        path = Path(path)
        try:
            content = read_text_verbatim(path)
        except (OSError, UnicodeDecodeError) as e:
            error = CaptureError(path, e)
            self.reporter.error(str(error))
            raise error from e

        snapshot = Snapshot(path=path, content=content)
        logger.debug("Captured %s (%d chars)", path, len(content))
        self.reporter.info(f"Created backup for {path}")
        return snapshot

    def restore(self, snapshot: Snapshot) -> None:
        """Overwrite snapshot.path with snapshot.content.

        Raises:
            RestoreError: If the write fails. The snapshot stays usable.
        """
        try:
            write_text_verbatim(snapshot.path, snapshot.content)
        except (OSError, UnicodeEncodeError) as e:
            error = RestoreError(snapshot.path, e)
            self.reporter.error(str(error))
            raise error from e

        logger.debug("Restored %s", snapshot.path)
        self.reporter.success(f"Restored {snapshot.path}")

    def capture_all(self, paths: Iterable[Union[str, Path]]) -> SnapshotBatch:
        """Capture every path in order, all or nothing.

        Duplicate paths are captured independently.

        Raises:
            BatchCaptureError: On the first failed capture, after rolling back
                every snapshot taken so far in this call
            TypeError: If paths is a single path rather than a collection
        """
        if isinstance(paths, (str, Path)):
            raise TypeError(f"capture_all expects a collection of paths, got a single path: {paths!r}")
        paths = list(paths)
        self.reporter.info(f"Creating backups for {len(paths)} files...")
        captured: List[Snapshot] = []

        for path in paths:
            try:
                captured.append(self.capture(path))
            except CaptureError as e:
                self.reporter.error(f"Backup failed for {e.path}, restoring previous backups...")
                rollback_error = None
                try:
                    self.restore_all(SnapshotBatch(tuple(captured)))
                except BatchRestoreError as restore_error:
                    rollback_error = restore_error
                raise BatchCaptureError(e, len(captured), rollback_error) from e

        self.reporter.success(f"Successfully created {len(captured)} backups")
        return SnapshotBatch(tuple(captured))

    def restore_all(self, batch: SnapshotBatch) -> None:
        """Restore every snapshot in the batch, best effort.

        A failed restore does not stop the remaining ones.

        Raises:
            BatchRestoreError: After all snapshots were attempted, listing
                every file that could not be restored
        """
        self.reporter.info(f"Restoring {len(batch)} files from backup...")
        errors: List[RestoreError] = []

        for snapshot in batch:
            try:
                self.restore(snapshot)
            except RestoreError as e:
                errors.append(e)

        if errors:
            error = BatchRestoreError(errors, attempted=len(batch))
            self.reporter.error(str(error))
            raise error

        self.reporter.success(f"Successfully restored {len(batch)} files")
