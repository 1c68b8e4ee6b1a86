# modelsync Output Module
# Rich console output, the console listener and conflict display

from modelsync.output.console import Console, ConsoleListener, ConsoleProgress, create_console
from modelsync.output.log import setup_logging
from modelsync.output.merge import prompt_conflict_resolution, show_conflict, show_conflicts_table, split_into_hunks

__all__ = [
    "Console",
    "ConsoleListener",
    "ConsoleProgress",
    "create_console",
    "setup_logging",
    "show_conflict",
    "show_conflicts_table",
    "prompt_conflict_resolution",
    "split_into_hunks",
]
