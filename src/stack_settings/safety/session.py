"""Backup-edit-restore flow for destructive commands."""

import logging
from contextlib import contextmanager
from pathlib import Path
from typing import Iterable, Iterator, Optional, Union

from ..errors import BatchRestoreError
from .backup import BackupEngine, SnapshotBatch

logger = logging.getLogger(__name__)


@contextmanager
def guarded_edit(
    paths: Iterable[Union[str, Path]],
    engine: Optional[BackupEngine] = None,
) -> Iterator[SnapshotBatch]:
    """Capture paths, run the body, and restore everything if the body fails.

    A BatchCaptureError from the capture step propagates before the body runs.
    On failure (including KeyboardInterrupt) the original exception is
    re-raised after the restore. If the restore is incomplete a
    BatchRestoreError is raised instead, chained from the original exception.

    Example:
        with guarded_edit([client_ts, schema_prisma], engine=engine):
            client_ts.write_text(new_client)
            schema_prisma.write_text(new_schema)
    """
    engine = engine or BackupEngine()
    batch = engine.capture_all(paths)

    try:
        yield batch
    except (Exception, KeyboardInterrupt) as e:
        logger.debug("Edit failed with %r, restoring %d file(s)", e, len(batch))
        engine.reporter.error("Failed to apply changes, rolling back...")
        try:
            engine.restore_all(batch)
        except BatchRestoreError as restore_error:
            raise restore_error from e
        engine.reporter.success("Restored all files from backup")
        raise
