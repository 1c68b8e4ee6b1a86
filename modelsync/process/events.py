# modelsync Process Events
# Process kinds, lifecycle events and the listener interface

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Protocol, runtime_checkable


class ProcessKind(str, Enum):
    """What a synchronization run does after exporting and committing."""

    COMMIT = "commit"
    REFRESH = "refresh"
    PUBLISH = "publish"


class EventKind(str, Enum):
    """Lifecycle notifications sent to a listener, in the order they can occur."""

    LOG_MESSAGE = "log_message"
    LOG_ERROR = "log_error"
    START_COMMIT = "start_commit"
    END_COMMIT = "end_commit"
    START_PULL = "start_pull"
    PULL_STATUS = "pull_status"
    END_PULL = "end_pull"
    START_PUSH = "start_push"
    END_PUSH = "end_push"


class PullStatus(str, Enum):
    """
    Outcome of a pull.

    Every finer git outcome (fast-forward, merge, missing remote branch,
    rejected merge, ...) is collapsed into one of these four.
    """

    OK = "ok"
    UP_TO_DATE = "up_to_date"
    MERGE_CANCELLED = "merge_cancelled"
    ERROR = "error"


@dataclass(frozen=True)
class ProcessEvent:
    """A single notification as delivered to a listener."""

    kind: EventKind
    prefix: str = ""
    summary: str = ""
    detail: Optional[str] = None


@runtime_checkable
class ProcessListener(Protocol):
    """Receives process notifications and decides on conflict resolution."""

    def notify_event(self, kind: EventKind, prefix: str, summary: str, detail: Optional[str]) -> None:
        ...

    def resolve_conflicts(self, handler) -> bool:
        """Return True to complete the merge with the handler's resolutions, False to abandon it."""
        ...


@runtime_checkable
class ProgressMonitor(Protocol):
    """Receives sub-task labels while a process runs."""

    def sub_task(self, label: str) -> None:
        ...


class NullProgressMonitor:
    """Progress monitor that discards everything."""

    def sub_task(self, label: str) -> None:
        pass
