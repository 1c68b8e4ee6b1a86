# modelsync Errors
# Exception hierarchy shared by the git, model and merge layers


class ModelSyncError(Exception):
    """Base class for all modelsync errors."""


class RepositoryError(ModelSyncError):
    """A repository precondition was not met."""


class TransportError(ModelSyncError):
    """No usable transport could be configured for a remote."""


class ModelLoadError(ModelSyncError):
    """The model could not be exported to or reloaded from the working tree."""


class MergeConflictError(ModelSyncError):
    """A conflict handler was used incorrectly (unknown item, unresolved conflict)."""


class MergeCancelledError(ModelSyncError):
    """Conflict staging was cancelled by the user."""


class MergeFailedError(ModelSyncError):
    """A merge failed without producing conflicts."""

    def __init__(self, message: str, detail: str = ""):
        self.detail = detail
        super().__init__(message)
