"""Operator-facing progress reporting.

A Reporter wraps a rich Console and prints one line per event using the
glyphs the CLI uses everywhere else (ℹ info, ✓ success, ⚠ warning, ✗ error).
Instances are passed explicitly to the components that report progress;
there is no shared module-level reporter.
"""

from typing import Optional

from rich.console import Console
from rich.markup import escape


class Reporter:
    """Console reporter with info/success/warning/error severities."""

    def __init__(self, console: Optional[Console] = None, quiet: bool = False):
        """Initialize reporter.

        Args:
            console: Console to write to (a new stdout console if omitted)
            quiet: Suppress info and success lines; warnings and errors still print
        """
        self.console = console or Console(highlight=False)
        self.quiet = quiet

    def info(self, msg: str) -> None:
        if not self.quiet:
            self.console.print("[blue]ℹ[/blue]", escape(msg))

    def success(self, msg: str) -> None:
        if not self.quiet:
            self.console.print("[green]✓[/green]", escape(msg))

    def warn(self, msg: str) -> None:
        self.console.print("[yellow]⚠[/yellow]", escape(msg))

    def error(self, msg: str) -> None:
        self.console.print("[red]✗[/red]", escape(msg))

    def step(self, current: int, total: int, msg: str) -> None:
        if not self.quiet:
            self.console.print(f"[cyan]\\[{current}/{total}][/cyan]", escape(msg))

    def header(self, msg: str) -> None:
        self.console.print()
        self.console.print(f"[bold underline]{escape(msg)}[/bold underline]")
        self.console.print()
