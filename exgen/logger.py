"""Console logging capability for exgen.

There is no module-level logger: ``cli.main`` builds one ``ConsoleLogger`` per
invocation and passes it to every collaborator.  Anything that only needs the
five levels and a spinner should accept the ``Logger`` protocol so tests can hand in a
recording double.
"""

from __future__ import annotations

from contextlib import contextmanager
from typing import ContextManager, Iterator, Protocol

from rich.console import Console
from rich.markup import escape
from rich.rule import Rule
from rich.table import Table


class Logger(Protocol):
    """The logging capability threaded through every collaborator."""

    def info(self, message: str) -> None: ...

    def warn(self, message: str) -> None: ...

    def error(self, message: str) -> None: ...

    def success(self, message: str) -> None: ...

    def debug(self, message: str) -> None: ...

    def status(self, message: str) -> ContextManager[None]: ...


class ConsoleLogger:
    """Rich-based implementation of :class:`Logger` with a few layout helpers."""

    def __init__(self, verbose: bool = False, console: Console | None = None) -> None:
        self.verbose = verbose
        self.console = console or Console()

    # -- Levels ------------------------------------------------------------

    def info(self, message: str) -> None:
        self.console.print(f"[blue]ℹ[/blue] {escape(message)}")

    def warn(self, message: str) -> None:
        self.console.print(f"[yellow]⚠[/yellow] {escape(message)}")

    def error(self, message: str) -> None:
        self.console.print(f"[bold red]✖[/bold red] {escape(message)}")

    def success(self, message: str) -> None:
        self.console.print(f"[green]✓[/green] {escape(message)}")

    def debug(self, message: str) -> None:
        if self.verbose:
            self.console.print(f"[dim]» {escape(message)}[/dim]")

    # -- Layout ------------------------------------------------------------

    def step(self, step: int, total: int, message: str) -> None:
        """Print a ``[step/total]`` progress line."""
        self.info(f"[{step}/{total}] {message}")

    def header(self, title: str) -> None:
        """Print a prominent full-width header."""
        self.console.print()
        self.console.print(Rule(f"[bold cyan] {title.upper()} [/bold cyan]", style="cyan"))
        self.console.print()

    def table(self, rows: list[tuple[str, str]], title: str = "Summary") -> None:
        """Print a two-column label/value table."""
        table = Table(title=title, show_header=False, title_style="bold cyan")
        table.add_column("Item", style="dim", no_wrap=True)
        table.add_column("Value")
        for label, value in rows:
            table.add_row(escape(label), escape(str(value)))
        self.console.print(table)
        self.console.print()

    def exception(self, exc: BaseException) -> None:
        """Report a fatal error; the traceback is only shown in verbose mode."""
        self.console.print(f"\n[bold red]Error:[/bold red] {escape(str(exc))}")
        if self.verbose:
            self.console.print_exception()

    @contextmanager
    def status(self, message: str) -> Iterator[None]:
        """Show a spinner while the wrapped block runs."""
        with self.console.status(message, spinner="dots"):
            yield
