"""CLI for stack-settings."""

import logging
import os
from pathlib import Path
from typing import List, Optional, Tuple

import typer
from rich.console import Console
from rich.markup import escape
from rich.table import Table

from .config import SettingsConfig, load_settings_config
from .constants import DEBUG_ENV_VAR
from .context import RepoContext
from .errors import (
    BatchCaptureError,
    BatchRestoreError,
    SettingsError,
    UncommittedChangesError,
)
from .reporter import Reporter
from .safety import (
    BackupEngine,
    GitStatusResult,
    check_git_status,
    check_git_status_for_directories,
    ensure_files_committed,
    guarded_edit,
)
from .utils import read_text_verbatim, write_text_verbatim


app = typer.Typer(help="""\
Administrative settings for the template monorepo. Every command that
rewrites files checks that the targets are committed, backs them up in
memory, and restores them if anything goes wrong.""")

console = Console()


@app.callback()
def main(
    ctx: typer.Context,
    quiet: bool = typer.Option(False, "--quiet", "-q", help="Only print warnings and errors"),
):
    """Configure logging and the shared reporter for a command."""
    if os.environ.get(DEBUG_ENV_VAR, "").lower() in ("1", "true", "yes"):
        logging.basicConfig(level=logging.DEBUG, format="%(name)s: %(message)s")
    ctx.obj = Reporter(console=console, quiet=quiet)


def _reporter(ctx: typer.Context) -> Reporter:
    return ctx.obj if isinstance(ctx.obj, Reporter) else Reporter(console=console)


def _load_context() -> Tuple[RepoContext, SettingsConfig]:
    """Discover the repository and load its configuration.

    Raises:
        typer.Exit: If the configuration file is invalid
    """
    repo = RepoContext()
    try:
        config = load_settings_config(repo.root)
    except SettingsError as e:
        console.print(f"[red]✗[/red] {escape(str(e))}")
        raise typer.Exit(1)
    return repo, config


def _resolve(paths: List[Path]) -> List[Path]:
    """Resolve CLI paths against the current directory, keeping symlinked names."""
    resolved = []
    for p in paths:
        p = Path.cwd() / p
        resolved.append(p.parent.resolve() / p.name)
    return resolved


def _print_batch_capture_error(error: BatchCaptureError, reporter: Reporter) -> None:
    reporter.error(f"Could not back up {error.path}: {error.error.cause}")
    if error.rollback_error is not None:
        _print_batch_restore_error(error.rollback_error, reporter)
        return
    reporter.info("Nothing was changed. Fix the problem above and run the command again.")


def _print_batch_restore_error(error: BatchRestoreError, reporter: Reporter) -> None:
    reporter.error(f"Restore incomplete: {len(error.errors)} of {error.attempted} files could not be restored")
    for e in error.errors:
        reporter.error(f"  {e.path}: {e.cause}")
    reporter.warn("Inspect and restore these files manually (e.g. `git checkout -- <file>`).")


def _print_status_table(title: str, result: GitStatusResult, checked: List[str]) -> None:
    table = Table(title=title)
    table.add_column("Path", style="cyan")
    table.add_column("State")
    dirty = set(result.dirty_paths)
    rows = checked if checked else result.dirty_paths
    for path in rows:
        state = "[yellow]uncommitted[/yellow]" if path in dirty else "[green]committed[/green]"
        table.add_row(escape(path), state)
    console.print(table)


@app.command()
def status(
    ctx: typer.Context,
    paths: Optional[List[Path]] = typer.Argument(
        None, help="Files to check (default: configured protected files and packages)"
    ),
):
    """Check that files are committed before running destructive commands."""
    reporter = _reporter(ctx)
    repo, config = _load_context()

    try:
        if paths:
            targets = _resolve(paths)
            result = check_git_status(targets, root=repo.root, reporter=reporter)
            results = [("Files", result, [str(p) for p in targets])]
        else:
            files = repo.absolute_all(config.protected_files)
            packages = repo.absolute_all(config.protected_packages)
            results = [
                ("Protected files", check_git_status(files, root=repo.root, reporter=reporter),
                 [str(p) for p in files]),
                ("Protected packages", check_git_status_for_directories(packages, root=repo.root, reporter=reporter),
                 []),
            ]
    except SettingsError as e:
        reporter.error(str(e))
        raise typer.Exit(1)

    if not results[0][1].is_repo:
        reporter.warn("Not a git repository - destructive commands run without a safety net")
        raise typer.Exit(0)

    clean = True
    for title, result, checked in results:
        if checked or result.dirty_paths:
            _print_status_table(title, result, checked)
        clean = clean and result.all_committed

    if not clean:
        reporter.error("Uncommitted changes found. Commit them before running destructive commands.")
        raise typer.Exit(1)
    reporter.success("Working tree is clean for all targets")


@app.command()
def replace(
    ctx: typer.Context,
    old: str = typer.Argument(..., help="Literal text to replace"),
    new: str = typer.Argument(..., help="Replacement text"),
    paths: List[Path] = typer.Argument(..., help="Files to edit"),
    force: bool = typer.Option(False, "--force", help="Skip the uncommitted-changes check"),
    dry_run: bool = typer.Option(False, "--dry-run", help="Only show which files would change"),
):
    """Replace text across files, restoring every file if any edit fails."""
    reporter = _reporter(ctx)
    repo, config = _load_context()
    targets = _resolve(paths)
    engine = BackupEngine(reporter=reporter)

    reporter.step(1, 3, "Checking repository state...")
    if force or not config.require_clean:
        reporter.warn("Skipping uncommitted-changes check")
    else:
        try:
            ensure_files_committed(targets, root=repo.root, reporter=reporter)
        except UncommittedChangesError:
            raise typer.Exit(1)
        except SettingsError as e:
            reporter.error(str(e))
            raise typer.Exit(1)

    if dry_run:
        reporter.step(2, 3, "Scanning files...")
        try:
            batch = engine.capture_all(targets)
        except BatchCaptureError as e:
            _print_batch_capture_error(e, reporter)
            raise typer.Exit(1)
        changing = [s.path for s in batch if old in s.content]
        for path in changing:
            console.print(f"  [cyan]would update[/cyan] {escape(str(path))}")
        reporter.step(3, 3, f"{len(changing)} of {len(batch)} file(s) would change (dry run)")
        return

    reporter.step(2, 3, "Creating backups...")
    updated = 0
    current: Optional[Path] = None
    try:
        with guarded_edit(targets, engine=engine) as batch:
            reporter.step(3, 3, "Applying changes...")
            for snapshot in batch:
                if old not in snapshot.content:
                    continue
                current = snapshot.path
                write_text_verbatim(snapshot.path, snapshot.content.replace(old, new))
                reporter.success(f"Updated {snapshot.path}")
                updated += 1
    except BatchCaptureError as e:
        _print_batch_capture_error(e, reporter)
        raise typer.Exit(1)
    except BatchRestoreError as e:
        _print_batch_restore_error(e, reporter)
        raise typer.Exit(1)
    except (OSError, ValueError) as e:
        # UnicodeEncodeError is a ValueError
        reporter.error(f"Edit failed for {current}: {e}")
        reporter.info("All files were restored from backup.")
        raise typer.Exit(1)

    reporter.success(f"Updated {updated} of {len(targets)} file(s)")


@app.command("restore-check")
def restore_check(
    ctx: typer.Context,
    paths: List[Path] = typer.Argument(..., help="Files to back up and restore"),
):
    """Back up files and write them straight back, verifying the round trip."""
    reporter = _reporter(ctx)
    targets = _resolve(paths)
    engine = BackupEngine(reporter=reporter)

    reporter.header("Backup round trip")
    try:
        batch = engine.capture_all(targets)
        engine.restore_all(batch)
    except BatchCaptureError as e:
        _print_batch_capture_error(e, reporter)
        raise typer.Exit(1)
    except BatchRestoreError as e:
        _print_batch_restore_error(e, reporter)
        raise typer.Exit(1)

    mismatched = [s.path for s in batch if read_text_verbatim(s.path) != s.content]
    if mismatched:
        for path in mismatched:
            reporter.error(f"Content mismatch after restore: {path}")
        raise typer.Exit(1)
    reporter.success(f"Verified {len(batch)} file(s)")


if __name__ == "__main__":
    app()
