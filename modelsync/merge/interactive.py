# modelsync Interactive Conflict Handler
# Presents each conflict on the console and asks which side to keep

from typing import Optional

from rich.console import Console as RichConsole

from modelsync.errors import MergeCancelledError
from modelsync.git.repository import ModelRepository
from modelsync.git.results import MergeResult
from modelsync.merge.handler import MergeConflictHandler
from modelsync.output.merge import prompt_conflict_resolution, show_conflict


class InteractiveMergeConflictHandler(MergeConflictHandler):
    """
    Ask the user for a side per conflict while staging.

    Choosing *abort* cancels initialization with ``MergeCancelledError``.
    """

    def __init__(
        self,
        merge_result: MergeResult,
        remote_ref: str,
        repository: ModelRepository,
        *,
        console: Optional[RichConsole] = None,
    ):
        super().__init__(merge_result, remote_ref, repository)
        self.console = console or RichConsole()

    def _choose_resolutions(self) -> None:
        total = len(self._conflicts)
        for index, conflict in enumerate(self._conflicts, start=1):
            show_conflict(conflict, index, total, self.remote_ref, self.console)
            choice = prompt_conflict_resolution(self.console)
            if choice is None:
                raise MergeCancelledError("Merge cancelled by user")
            conflict.resolution = choice
