# modelsync Git Module
# Repository handle, transports and git command execution

from modelsync.git.operations import GitError, GitInternalError, is_git_repo
from modelsync.git.repository import ModelRepository, get_local_repository_folder_for_model
from modelsync.git.results import (
    BranchInfo,
    BranchStatus,
    FetchResult,
    MergeResult,
    MergeStatus,
    PullResult,
    PushResult,
    RefUpdateStatus,
    RemoteRefUpdate,
    TrackingRefUpdate,
)
from modelsync.git.transport import (
    TransportConfig,
    TransportKind,
    UsernamePassword,
    is_http,
    is_ssh,
    transport_for,
    transport_session,
)

__all__ = [
    # Operations
    "GitError",
    "GitInternalError",
    "is_git_repo",
    # Repository
    "ModelRepository",
    "get_local_repository_folder_for_model",
    # Results
    "BranchInfo",
    "BranchStatus",
    "FetchResult",
    "MergeResult",
    "MergeStatus",
    "PullResult",
    "PushResult",
    "RefUpdateStatus",
    "RemoteRefUpdate",
    "TrackingRefUpdate",
    # Transport
    "TransportConfig",
    "TransportKind",
    "UsernamePassword",
    "is_http",
    "is_ssh",
    "transport_for",
    "transport_session",
]
