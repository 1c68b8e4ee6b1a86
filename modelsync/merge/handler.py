# modelsync Merge Conflict Handler
# Stages conflicting paths of a failed merge and applies chosen resolutions

import logging
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from modelsync.errors import MergeCancelledError, MergeConflictError
from modelsync.git.repository import LOCAL_STAGE, REMOTE_STAGE, ModelRepository
from modelsync.git.results import MergeResult, MergeStatus

logger = logging.getLogger(__name__)


class ConflictSide(str, Enum):
    """Which version of a conflicting path to keep."""

    LOCAL = "local"
    REMOTE = "remote"


@dataclass(eq=False)
class MergeConflict:
    """
    One conflicting path.

    A side's content is None when that side deleted the path.
    """

    path: str
    local_content: Optional[str] = None
    remote_content: Optional[str] = None
    resolution: Optional[ConflictSide] = None

    @property
    def is_resolved(self) -> bool:
        return self.resolution is not None

    def content_for(self, side: ConflictSide) -> Optional[str]:
        return self.local_content if side == ConflictSide.LOCAL else self.remote_content


class MergeConflictHandler:
    """
    Conflict session for one failed pull.

    Lifecycle: ``initialize()`` stages the conflicts, ``resolve()`` records a
    side per conflict, then either ``merge()`` completes the merge commit or
    ``reset_to_local_state()`` abandons it and restores the pre-pull commit.
    Subclasses decide how resolutions are chosen in ``_choose_resolutions``;
    conflicts still unresolved at merge time take ``default_side``.
    """

    default_side: Optional[ConflictSide] = None

    def __init__(self, merge_result: MergeResult, remote_ref: str, repository: ModelRepository):
        self.merge_result = merge_result
        self.remote_ref = remote_ref
        self.repository = repository
        self._conflicts: list[MergeConflict] = []
        self._initialized = False

    def initialize(self, progress=None) -> None:
        """
        Read both sides of every conflicting path.

        Raises:
            MergeCancelledError: If staging was interrupted by the user.
            MergeConflictError: If the merge result is not a conflict.
        """
        if self.merge_result.status != MergeStatus.CONFLICTING:
            raise MergeConflictError(f"Merge with {self.remote_ref} has no conflicts to handle")

        if progress is not None:
            progress.sub_task(f"Reading conflicts with {self.remote_ref}")

        try:
            paths = self.repository.get_unmerged_paths() or list(self.merge_result.conflicts)
            self._conflicts = [
                MergeConflict(
                    path=path,
                    local_content=self.repository.read_conflict_side(path, LOCAL_STAGE),
                    remote_content=self.repository.read_conflict_side(path, REMOTE_STAGE),
                )
                for path in paths
            ]
            self._choose_resolutions()
        except KeyboardInterrupt as e:
            raise MergeCancelledError("Merge cancelled") from e

        self._initialized = True
        logger.debug("%d conflict(s) staged against %s", len(self._conflicts), self.remote_ref)

    def _choose_resolutions(self) -> None:
        """Hook for variants that pick resolutions while staging."""

    def list_conflicts(self) -> list[MergeConflict]:
        return list(self._conflicts)

    def resolve(self, conflict: MergeConflict, side: ConflictSide | str) -> None:
        if conflict not in self._conflicts:
            raise MergeConflictError(f"Unknown conflict: {conflict.path}")
        conflict.resolution = ConflictSide(side)

    def merge(self) -> str:
        """
        Apply every resolution and commit the merge.

        Returns:
            The merge commit id.

        Raises:
            MergeConflictError: If not initialized or a conflict is unresolved.
        """
        if not self._initialized:
            raise MergeConflictError("Conflict handler has not been initialized")

        if self.default_side is not None:
            for conflict in self._conflicts:
                if not conflict.is_resolved:
                    conflict.resolution = self.default_side

        unresolved = [c.path for c in self._conflicts if not c.is_resolved]
        if unresolved:
            raise MergeConflictError(f"Unresolved conflicts: {', '.join(unresolved)}")

        for conflict in self._conflicts:
            self.repository.apply_conflict_resolution(conflict.path, conflict.content_for(conflict.resolution))

        return self.repository.complete_merge()

    def reset_to_local_state(self) -> None:
        """Abandon the merge and return the working tree to the pre-pull commit."""
        self.repository.reset_to_ref(self.merge_result.orig_head or "HEAD")
        self._conflicts = []
        self._initialized = False
