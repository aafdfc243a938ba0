"""Shared test fixtures and utilities."""

import io
import shutil
import subprocess
from pathlib import Path

import pytest
from rich.console import Console

from stack_settings.constants import REPO_ROOT_MARKER, ROOT_ENV_VAR
from stack_settings.reporter import Reporter
from stack_settings.safety import BackupEngine


@pytest.fixture
def reporter():
    """Reporter writing to an in-memory console; output is in reporter.console.file."""
    console = Console(file=io.StringIO(), width=200, highlight=False)
    return Reporter(console=console)


@pytest.fixture
def engine(reporter):
    """Backup engine with a captured reporter."""
    return BackupEngine(reporter=reporter)


@pytest.fixture
def output(reporter):
    """Read everything the reporter printed so far."""
    def _output() -> str:
        return reporter.console.file.getvalue()
    return _output


@pytest.fixture
def write_file(tmp_path):
    """Factory fixture to write files relative to tmp_path."""
    def _write(path: str, content: str = "test content") -> Path:
        file_path = tmp_path / path
        file_path.parent.mkdir(parents=True, exist_ok=True)
        file_path.write_text(content)
        return file_path
    return _write


@pytest.fixture
def workspace(tmp_path, monkeypatch):
    """Temporary monorepo root (pnpm-workspace.yaml marker) as the cwd."""
    monkeypatch.delenv(ROOT_ENV_VAR, raising=False)
    (tmp_path / REPO_ROOT_MARKER).write_text("packages:\n  - 'packages/*'\n")
    monkeypatch.chdir(tmp_path)
    return tmp_path


def _git(root: Path, *args: str) -> None:
    subprocess.run(
        ["git", "-c", "user.name=Test", "-c", "user.email=test@example.com", "-c", "commit.gpgsign=false", *args],
        cwd=root,
        check=True,
        capture_output=True,
    )


class GitRepo:
    """Handle on a throwaway git repository."""

    def __init__(self, root: Path):
        self.root = root

    def commit_all(self, message: str = "update") -> None:
        _git(self.root, "add", "-A")
        _git(self.root, "commit", "-q", "-m", message)


@pytest.fixture
def git_repo(workspace):
    """Real git repository with every workspace file committed."""
    if shutil.which("git") is None:
        pytest.skip("git executable not available")

    _git(workspace, "init", "-q")
    repo = GitRepo(workspace)
    repo.commit_all("initial")
    return repo
