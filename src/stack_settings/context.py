"""Repository context for root discovery and path resolution."""

import os
from pathlib import Path
from typing import List, Optional, Union

from .constants import REPO_ROOT_MARKER, ROOT_ENV_VAR
from .errors import NotInRepositoryError


class RepoContext:
    """Manages repository root discovery and path resolution."""

    def __init__(self, start_path: Optional[Path] = None, strict: bool = False):
        """Initialize context by finding the repository root.

        Args:
            start_path: Path to start searching for the root (default: cwd)
            strict: Raise NotInRepositoryError instead of falling back to the
                start directory when no marker is found
        """
        start = Path(start_path or Path.cwd()).resolve()
        override = os.environ.get(ROOT_ENV_VAR)
        if override and start_path is None:
            self.root = Path(override).resolve()
            return

        root = self._find_root(start)
        if root is None:
            if strict:
                raise NotInRepositoryError(start, REPO_ROOT_MARKER)
            root = start
        self.root = root

    def _find_root(self, start: Path) -> Optional[Path]:
        """Walk up directory tree to find the workspace marker."""
        current = start

        while current != current.parent:
            if (current / REPO_ROOT_MARKER).exists():
                return current
            current = current.parent

        # Check root directory
        if (current / REPO_ROOT_MARKER).exists():
            return current
        return None

    def absolute(self, path: Union[str, Path]) -> Path:
        """Get absolute path; relative paths are taken from the repository root."""
        p = Path(path)
        if p.is_absolute():
            return p
        return self.root / p

    def absolute_all(self, paths: List[Union[str, Path]]) -> List[Path]:
        return [self.absolute(p) for p in paths]
