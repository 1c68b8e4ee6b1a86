# modelsync Merge Module
# Conflict handlers for pulls that end in merge conflicts

from modelsync.merge.handler import ConflictSide, MergeConflict, MergeConflictHandler
from modelsync.merge.headless import HeadlessMergeConflictHandler

__all__ = [
    "ConflictSide",
    "MergeConflict",
    "MergeConflictHandler",
    "HeadlessMergeConflictHandler",
    "InteractiveMergeConflictHandler",
]


def __getattr__(name: str):
    """Lazy import; the interactive handler pulls in the console output package."""
    if name == "InteractiveMergeConflictHandler":
        from modelsync.merge.interactive import InteractiveMergeConflictHandler

        return InteractiveMergeConflictHandler
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
