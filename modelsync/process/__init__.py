# modelsync Process Module
# Synchronization runs, their events and one-shot repository actions

from modelsync.process.actions import (
    FIRST_COMMIT_MESSAGE,
    RepositoryStatus,
    abort_changes,
    create_repo_from_model,
    get_repository_status,
)
from modelsync.process.events import (
    EventKind,
    NullProgressMonitor,
    ProcessEvent,
    ProcessKind,
    ProcessListener,
    ProgressMonitor,
    PullStatus,
)
from modelsync.process.messages import PULL_SUMMARIES
from modelsync.process.process import ConflictHandlerFactory, RepositoryModelProcess, error_message

__all__ = [
    "RepositoryModelProcess",
    "ConflictHandlerFactory",
    "error_message",
    "ProcessKind",
    "EventKind",
    "PullStatus",
    "PULL_SUMMARIES",
    "ProcessEvent",
    "ProcessListener",
    "ProgressMonitor",
    "NullProgressMonitor",
    "RepositoryStatus",
    "FIRST_COMMIT_MESSAGE",
    "abort_changes",
    "create_repo_from_model",
    "get_repository_status",
]
