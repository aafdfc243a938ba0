"""Git cleanliness checks run before any destructive edit.

The settings commands only rewrite files that git can give back: every target
must sit in a work tree and be committed. Outside a repository the checks
warn and let the caller proceed.
"""

import logging
import subprocess
from pathlib import Path
from typing import Iterable, List, Optional, Sequence, Set, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field

from ..context import RepoContext
from ..errors import GitStatusError, UncommittedChangesError
from ..reporter import Reporter

logger = logging.getLogger(__name__)

PathLike = Union[str, Path]


class GitStatusResult(BaseModel):
    """Result of a git cleanliness check."""

    model_config = ConfigDict(frozen=True)

    is_repo: bool
    all_committed: bool
    dirty_paths: List[str] = Field(default_factory=list)


def _run_git(args: Sequence[str], cwd: Path) -> subprocess.CompletedProcess:
    try:
        return subprocess.run(
            ["git", *args],
            cwd=cwd,
            capture_output=True,
            text=True,
            check=False,  # Handle errors manually for better diagnostics
        )
    except OSError as e:
        raise GitStatusError(f"Git status check failed: could not run git ({e})") from e


def parse_porcelain(output: str) -> Set[str]:
    """Parse `git status --porcelain -z` output into the set of changed paths.

    Covers modified, untracked, added, deleted, renamed (destination path),
    copied and conflicted entries. Paths are relative to the work tree top.
    """
    changed: Set[str] = set()
    entries = output.split("\0")
    i = 0
    while i < len(entries):
        entry = entries[i]
        i += 1
        if len(entry) < 4:
            continue
        code, path = entry[:2], entry[3:]
        changed.add(path)
        if "R" in code or "C" in code:
            # -z puts the source path in the following field
            i += 1
    return changed


def _get_changed_files(root: Path) -> Tuple[Optional[Path], Set[str]]:
    """Return the work tree top (None outside a repository) and changed paths."""
    result = _run_git(["rev-parse", "--show-toplevel"], root)
    if result.returncode != 0:
        logger.debug("git rev-parse failed in %s: %s", root, result.stderr.strip())
        return None, set()

    toplevel = Path(result.stdout.strip()).resolve()
    status = _run_git(["status", "--porcelain", "-z", "--untracked-files=all"], toplevel)
    if status.returncode != 0:
        error_msg = status.stderr.strip() or status.stdout.strip()
        raise GitStatusError(f"Git status check failed: {error_msg}")

    changed = parse_porcelain(status.stdout)
    logger.debug("git reports %d changed path(s) under %s", len(changed), toplevel)
    return toplevel, changed


def _relative_to_toplevel(path: PathLike, root: Path, toplevel: Path) -> str:
    p = Path(path)
    if not p.is_absolute():
        p = root / p
    # git reports a symlink under its own path, not its target's
    p = p.parent.resolve() / p.name
    try:
        return p.relative_to(toplevel).as_posix()
    except ValueError:
        return Path(path).as_posix()


def check_git_status(
    paths: Iterable[PathLike],
    root: Optional[Path] = None,
    reporter: Optional[Reporter] = None,
) -> GitStatusResult:
    """Check whether the given files are committed.

    Args:
        paths: Files to check (absolute, or relative to root)
        root: Directory to run git in (default: discovered repository root)
        reporter: Progress reporter

    Returns:
        GitStatusResult; dirty_paths holds the offending inputs in input order

    Raises:
        GitStatusError: If git itself fails
    """
    paths = list(paths)
    root = Path(root) if root else RepoContext().root
    reporter = reporter or Reporter()

    toplevel, changed = _get_changed_files(root)
    if toplevel is None:
        reporter.warn("Not a git repository")
        return GitStatusResult(is_repo=False, all_committed=False, dirty_paths=[])

    dirty = [str(p) for p in paths if _relative_to_toplevel(p, root, toplevel) in changed]
    return GitStatusResult(is_repo=True, all_committed=not dirty, dirty_paths=dirty)


def check_git_status_for_directories(
    directories: Iterable[PathLike],
    root: Optional[Path] = None,
    reporter: Optional[Reporter] = None,
) -> GitStatusResult:
    """Check whether every file inside the given directories is committed.

    Returns:
        GitStatusResult; dirty_paths holds the changed files (relative to the
        work tree top) found inside any of the directories
    """
    directories = list(directories)
    root = Path(root) if root else RepoContext().root
    reporter = reporter or Reporter()

    toplevel, changed = _get_changed_files(root)
    if toplevel is None:
        reporter.warn("Not a git repository")
        return GitStatusResult(is_repo=False, all_committed=False, dirty_paths=[])

    relative_dirs = [_relative_to_toplevel(d, root, toplevel).rstrip("/") for d in directories]
    dirty = []
    for changed_file in sorted(changed):
        for d in relative_dirs:
            if d in ("", ".") or changed_file == d or changed_file.startswith(d + "/"):
                dirty.append(changed_file)
                break

    return GitStatusResult(is_repo=True, all_committed=not dirty, dirty_paths=dirty)


def ensure_files_committed(
    paths: Iterable[PathLike],
    root: Optional[Path] = None,
    reporter: Optional[Reporter] = None,
) -> GitStatusResult:
    """Raise UncommittedChangesError unless every file is committed."""
    reporter = reporter or Reporter()
    result = check_git_status(paths, root=root, reporter=reporter)

    if not result.is_repo:
        reporter.warn("Not a git repository - skipping commit check (proceeding with caution)")
        return result

    if not result.all_committed:
        error = UncommittedChangesError(result.dirty_paths)
        reporter.error(str(error))
        raise error

    reporter.success("All target files are committed")
    return result


def ensure_directories_committed(
    directories: Iterable[PathLike],
    root: Optional[Path] = None,
    reporter: Optional[Reporter] = None,
) -> GitStatusResult:
    """Raise UncommittedChangesError unless the directories hold no changes."""
    reporter = reporter or Reporter()
    result = check_git_status_for_directories(directories, root=root, reporter=reporter)

    if not result.is_repo:
        reporter.warn("Not a git repository - skipping commit check (proceeding with caution)")
        return result

    if not result.all_committed:
        error = UncommittedChangesError(
            result.dirty_paths,
            hint="Please commit all changes in the affected packages before proceeding.",
        )
        reporter.error(str(error))
        raise error

    reporter.success("All files in protected packages are committed")
    return result
