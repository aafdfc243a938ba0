"""Utility functions for stack-settings."""

from pathlib import Path


def read_text_verbatim(path: Path) -> str:
    """Read a text file without newline translation."""
    with path.open("r", newline="") as f:
        return f.read()


def write_text_verbatim(path: Path, content: str) -> None:
    """Truncate a text file and write content without newline translation."""
    with path.open("w", newline="") as f:
        f.write(content)
