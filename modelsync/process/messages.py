# modelsync Process Messages
# User-facing texts emitted by the synchronization process

from modelsync.process.events import ProcessKind, PullStatus

PROCESS_NAMES = {
    ProcessKind.COMMIT: "Commit",
    ProcessKind.REFRESH: "Refresh",
    ProcessKind.PUBLISH: "Publish",
}

NOT_ENABLED = "Model is not in a local repository"
EXPORT_FAILED = "Could not export model to working tree"
COMMIT_FAILED = "Could not commit changes"
PULL_FAILED = "Could not pull from remote"
PUSH_FAILED = "Could not push to remote"
PUSH_REJECTED = "Some references were not pushed"
CHECKSUM_FAILED = "Could not save checksum"
UNEXPECTED_ERROR = "Unexpected error"
NO_CONFLICT_RESOLVER = "Merge conflicts cannot be resolved without a listener"

START_COMMIT = "Committing changes"
END_COMMIT = "Changes committed"
START_PULL = "Pulling from {url}"
START_PUSH = "Pushing to {url}"
END_PUSH = "Pushed to {url}"

MERGE_COMMIT_MESSAGE = "Merged remote changes into '{branch}'"
RESTORED_OBJECTS_HEADER = "Restored objects:"

# Keyed by every PullStatus value
PULL_SUMMARIES = {
    PullStatus.OK: "Model updated from remote",
    PullStatus.UP_TO_DATE: "Model is up to date",
    PullStatus.MERGE_CANCELLED: "Merge cancelled, local model kept",
    PullStatus.ERROR: "Pull failed",
}
