# modelsync Conflict Display
# Side-by-side presentation of a conflicting path and the resolution prompt

import difflib
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from rich.console import Console as RichConsole
from rich.panel import Panel
from rich.syntax import Syntax
from rich.table import Table

from modelsync.merge.handler import ConflictSide, MergeConflict


@dataclass
class DiffHunk:
    """A single hunk of differences between the local and remote side."""

    tag: str  # 'equal', 'replace', 'insert', 'delete'
    local_lines: list[str]
    remote_lines: list[str]

    @property
    def is_change(self) -> bool:
        return self.tag != "equal"


def _detect_syntax(path: str) -> str:
    ext = Path(path).suffix.lower()
    syntax_map = {
        ".yaml": "yaml",
        ".yml": "yaml",
        ".json": "json",
    }
    return syntax_map.get(ext, "text")


def split_into_hunks(local_content: str, remote_content: str) -> list[DiffHunk]:
    """
    Split both sides of a conflict into hunks using SequenceMatcher.

    Args:
        local_content: Our version of the path.
        remote_content: Their version of the path.

    Returns:
        List of DiffHunk objects. Equal hunks are included for context.
    """
    local_lines = local_content.splitlines(keepends=True)
    remote_lines = remote_content.splitlines(keepends=True)

    matcher = difflib.SequenceMatcher(None, remote_lines, local_lines)
    return [
        DiffHunk(tag=tag, remote_lines=remote_lines[i1:i2], local_lines=local_lines[j1:j2])
        for tag, i1, i2, j1, j2 in matcher.get_opcodes()
    ]


def format_hunks(hunks: list[DiffHunk]) -> str:
    """Render change hunks as diff text: remote lines with '-', local with '+'."""
    diff_lines = []
    for hunk in hunks:
        if not hunk.is_change:
            continue
        for line in hunk.remote_lines:
            diff_lines.append(f"- {line.rstrip()}")
        for line in hunk.local_lines:
            diff_lines.append(f"+ {line.rstrip()}")
    return "\n".join(diff_lines)


def show_conflict(
    conflict: MergeConflict,
    index: int,
    total: int,
    remote_ref: str,
    console: RichConsole,
) -> None:
    """
    Display one conflict.

    A path deleted on one side is shown with its remaining content;
    otherwise the changed hunks are shown as a diff.
    """
    title = f"Conflict {index}/{total}: [bold]{conflict.path}[/bold]"

    if conflict.local_content is None or conflict.remote_content is None:
        deleted_by = "local" if conflict.local_content is None else "remote"
        kept = conflict.remote_content if conflict.local_content is None else conflict.local_content
        title += f" [red](deleted in {deleted_by})[/red]"
        body = Syntax(kept or "", _detect_syntax(conflict.path), theme="monokai")
    else:
        hunks = split_into_hunks(conflict.local_content, conflict.remote_content)
        body = Syntax(format_hunks(hunks) or "(whitespace only)", "diff", theme="monokai")

    console.print(Panel(body, title=title, subtitle=f"- {remote_ref}  + local", border_style="yellow"))


def show_conflicts_table(conflicts: list[MergeConflict], console: RichConsole) -> None:
    """List conflicts with the side chosen for each."""
    table = Table(title="Merge Conflicts", show_header=True, header_style="bold")
    table.add_column("Path")
    table.add_column("Resolution")

    for conflict in conflicts:
        if conflict.resolution == ConflictSide.LOCAL:
            resolution = "[yellow]local[/yellow]"
        elif conflict.resolution == ConflictSide.REMOTE:
            resolution = "[cyan]remote[/cyan]"
        else:
            resolution = "[dim]unresolved[/dim]"
        table.add_row(conflict.path, resolution)

    console.print(table)


def prompt_conflict_resolution(console: RichConsole) -> Optional[ConflictSide]:
    """
    Prompt user for a conflict resolution choice.

    Returns:
        The side to keep, or None to abort the merge.
    """
    console.print("[bold]Choose:[/bold]")
    console.print("  [yellow]l[/yellow] - Keep [bold]local[/bold] version")
    console.print("  [cyan]r[/cyan] - Keep [bold]remote[/bold] version")
    console.print("  [red]a[/red] - [bold]Abort[/bold] merge")

    while True:
        choice = console.input("[bold]Choice [l/r/a]: [/bold]").strip().lower()

        if choice in ("l", "local"):
            return ConflictSide.LOCAL
        elif choice in ("r", "remote"):
            return ConflictSide.REMOTE
        elif choice in ("a", "abort"):
            return None
        else:
            console.print("[red]Invalid choice. Please enter l, r, or a.[/red]")
