# modelsync Headless Conflict Handler
# Resolves every conflict with a fixed policy, without user interaction

from modelsync.git.repository import ModelRepository
from modelsync.git.results import MergeResult
from modelsync.merge.handler import ConflictSide, MergeConflictHandler


class HeadlessMergeConflictHandler(MergeConflictHandler):
    """Keep one side (local by default) for every conflict not resolved otherwise."""

    def __init__(
        self,
        merge_result: MergeResult,
        remote_ref: str,
        repository: ModelRepository,
        *,
        policy: ConflictSide = ConflictSide.LOCAL,
    ):
        super().__init__(merge_result, remote_ref, repository)
        self.default_side = ConflictSide(policy)

    @property
    def policy(self) -> ConflictSide:
        return self.default_side
