# git-helper Console Output
# Rich-based console output for user-friendly display

from typing import Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for command results and errors.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
        """
        self.verbose = verbose
        self._console = RichConsole(no_color=not colored, highlight=False, soft_wrap=True)

    @property
    def rich(self) -> RichConsole:
        """Underlying Rich console, shared with the step logger."""
        return self._console

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_text(self, text: str) -> None:
        """Print text verbatim, without markup."""
        self._console.print(text, markup=False)

    def print_error(self, message: str, detail: Optional[str] = None) -> None:
        """Print error message, with the tool's own output underneath."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")
        if detail:
            self._console.print(detail, markup=False)

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{escape(message)}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{escape(message)}[/blue]")

    def print_commit_list(self, entries: list[str]) -> None:
        """
        Print commits numbered from 1, in the form used by rollback.

        Args:
            entries: ``<hash> <subject>`` lines, newest first.
        """
        if not entries:
            self._console.print("[dim]No commits found[/dim]")
            return

        for number, entry in enumerate(entries, start=1):
            commit_hash, _, subject = entry.partition(" ")
            self._console.print(f"{number:>2}  [yellow]{escape(commit_hash)}[/yellow] {escape(subject)}")

    def print_stash_list(self, entries: list[str]) -> None:
        """Print stash entries, one per line."""
        if not entries:
            self._console.print("[dim]No stash entries[/dim]")
            return

        for entry in entries:
            self._console.print(entry, markup=False)

    def print_operation_index(self, operations: dict[str, str]) -> None:
        """
        Print the available commands.

        Args:
            operations: Dict of command name to one-line description.
        """
        table = Table(title="Available Git Helper Commands", show_header=True, header_style="bold")
        table.add_column("Command", style="cyan", no_wrap=True)
        table.add_column("Description", style="dim")

        for name, description in operations.items():
            table.add_row(name, description)

        self._console.print(table)

    def print_operation_help(self, name: str, usage: str, description: str) -> None:
        """Print one command's usage and help text in a panel."""
        self._console.print(
            Panel(
                f"[bold]{escape(usage)}[/bold]\n\n{escape(description)}",
                title=name,
                title_align="left",
                border_style="blue",
            )
        )

    def print_config_summary(self, config_path: str, exists: bool) -> None:
        """Print configuration summary."""
        state = "" if exists else " [dim](not created, using defaults)[/dim]"
        self._console.print(
            Panel(
                f"Config: {escape(config_path)}{state}",
                title="git-helper Configuration",
                border_style="blue",
            )
        )


def create_console(*, verbose: bool = False, colored: bool = True) -> Console:
    """
    Create a console instance.

    Args:
        verbose: Enable verbose output.
        colored: Enable colored output.

    Returns:
        Console instance.
    """
    return Console(verbose=verbose, colored=colored)
