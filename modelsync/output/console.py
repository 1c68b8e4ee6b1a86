# modelsync Console Output
# Rich-based console output and the console process listener

from typing import Optional

from rich.console import Console as RichConsole
from rich.markup import escape
from rich.panel import Panel
from rich.table import Table

from modelsync.output.merge import show_conflicts_table
from modelsync.process.actions import RepositoryStatus
from modelsync.process.events import EventKind, ProcessEvent, PullStatus


class Console:
    """
    Console output manager using Rich.

    Provides formatted output for synchronization runs.
    """

    def __init__(self, *, verbose: bool = False, colored: bool = True, rich_console: Optional[RichConsole] = None):
        """
        Initialize console.

        Args:
            verbose: Enable verbose output.
            colored: Enable colored output.
            rich_console: Use this Rich console instead of creating one.
        """
        self.verbose = verbose
        self._console = rich_console or RichConsole(force_terminal=colored, no_color=not colored)

    @property
    def rich(self) -> RichConsole:
        return self._console

    def print(self, *args, **kwargs) -> None:
        """Print to console."""
        self._console.print(*args, **kwargs)

    def print_error(self, message: str) -> None:
        """Print error message."""
        self._console.print(f"[red]Error:[/red] {escape(message)}")

    def print_warning(self, message: str) -> None:
        """Print warning message."""
        self._console.print(f"[yellow]Warning:[/yellow] {escape(message)}")

    def print_success(self, message: str) -> None:
        """Print success message."""
        self._console.print(f"[green]{message}[/green]")

    def print_info(self, message: str) -> None:
        """Print info message."""
        self._console.print(f"[blue]{message}[/blue]")

    def print_detail(self, message: str) -> None:
        for line in message.splitlines():
            self._console.print(f"    [dim]{escape(line)}[/dim]", highlight=False)

    def print_pull_status(self, status: PullStatus, summary: str) -> None:
        """Show the outcome of a pull in a panel."""
        styles = {
            PullStatus.OK: "green",
            PullStatus.UP_TO_DATE: "green",
            PullStatus.MERGE_CANCELLED: "yellow",
            PullStatus.ERROR: "red",
        }
        style = styles[status]
        self._console.print(Panel(f"[{style}]{summary}[/{style}]", title="Pull", border_style=style))

    def print_repository_status(self, name: str, status: RepositoryStatus) -> None:
        """
        Print the synchronization state of a repository.

        Args:
            name: Repository folder shown in the title.
            status: State to display.
        """
        table = Table(title=name, show_header=False)
        table.add_column("Property", style="bold")
        table.add_column("Value")

        table.add_row("Remote", status.remote_url or "[dim]none[/dim]")

        branch_status = status.branch_status
        if branch_status is None:
            table.add_row("Branch", "[red]detached[/red]")
        else:
            table.add_row("Branch", branch_status.current_local_branch.full_name)
            remote_branch = branch_status.current_remote_branch
            table.add_row("Tracking", remote_branch.full_name if remote_branch else "[dim]none[/dim]")

        table.add_row(
            "Model",
            "[yellow]changed since last sync[/yellow]" if status.model_changed else "[green]unchanged[/green]",
        )
        table.add_row(
            "Working tree",
            "[yellow]uncommitted changes[/yellow]" if status.has_uncommitted_changes else "[green]clean[/green]",
        )
        self._console.print(table)

    def print_config_summary(self, config_path: str, remote: str, strategy: str) -> None:
        """Print configuration summary."""
        self._console.print(
            Panel(
                f"Config: {config_path}\n" f"Remote: {remote}\n" f"Conflicts: {strategy}",
                title="modelsync Configuration",
                border_style="blue",
            )
        )

    def confirm(self, message: str, default: bool = False) -> bool:
        """
        Ask for confirmation.

        Args:
            message: Confirmation message.
            default: Default value if user just presses enter.

        Returns:
            True if confirmed.
        """
        suffix = " [Y/n]" if default else " [y/N]"
        response = self._console.input(f"{message}{suffix}: ").strip().lower()

        if not response:
            return default

        return response in ("y", "yes", "j", "ja")


class ConsoleProgress:
    """Progress monitor printing sub-tasks in verbose mode."""

    def __init__(self, console: Console):
        self.console = console

    def sub_task(self, label: str) -> None:
        if self.console.verbose:
            self.console.print(f"[dim]… {label}[/dim]", highlight=False)


class ConsoleListener:
    """
    Process listener rendering events on a Console.

    Every event is also kept in ``events``; ``error_count`` counts the
    errors reported during the run.
    """

    def __init__(self, console: Console, *, assume_yes: bool = False):
        self.console = console
        self.assume_yes = assume_yes
        self.events: list[ProcessEvent] = []
        self.error_count = 0

    def notify_event(self, kind: EventKind, prefix: str, summary: str, detail: Optional[str]) -> None:
        self.events.append(ProcessEvent(kind=kind, prefix=prefix, summary=summary, detail=detail))
        label = f"{prefix} " if prefix else ""

        if kind == EventKind.LOG_ERROR:
            self.error_count += 1
            self.console.print_error(f"{label}{summary}")
            if detail:
                self.console.print_detail(detail)
        elif kind == EventKind.LOG_MESSAGE:
            self.console.print_info(escape(summary))
        elif kind in (EventKind.START_COMMIT, EventKind.START_PULL, EventKind.START_PUSH):
            self.console.print(f"[dim]{escape(label + summary)}[/dim]")
        elif kind == EventKind.END_COMMIT:
            commit_id = f" ({detail[:7]})" if detail else ""
            self.console.print_success(f"✓ {escape(summary)}{commit_id}")
        elif kind == EventKind.END_PULL:
            self.console.print_pull_status(PullStatus(detail), escape(summary))
        elif kind == EventKind.END_PUSH:
            self.console.print_success(f"✓ {escape(summary)}")

    def resolve_conflicts(self, handler) -> bool:
        """Show the chosen resolutions and ask whether to complete the merge."""
        conflicts = handler.list_conflicts()
        self.console.print(f"\n[bold red]{len(conflicts)} conflict(s)[/bold red] with {handler.remote_ref}")
        show_conflicts_table(conflicts, self.console.rich)

        if self.assume_yes:
            return True
        return self.console.confirm("Complete the merge with these resolutions?", default=True)

    @property
    def pull_status(self) -> Optional[PullStatus]:
        """Status reported by the last pull, if any."""
        for event in reversed(self.events):
            if event.kind == EventKind.PULL_STATUS:
                return PullStatus(event.detail)
        return None


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
