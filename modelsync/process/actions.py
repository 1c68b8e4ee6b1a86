# modelsync Repository Actions
# One-shot operations around a model repository: create, abort and status

import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

from modelsync.config.schema import ModelSyncConfig
from modelsync.errors import RepositoryError
from modelsync.git import operations as git
from modelsync.git.repository import ModelRepository
from modelsync.git.results import BranchStatus, PushResult
from modelsync.git.transport import TransportKind, UsernamePassword, transport_kind, transport_session
from modelsync.model.document import ModelDocument
from modelsync.process.events import NullProgressMonitor, ProgressMonitor
from modelsync.utils.paths import ensure_dir, folder_name_from_url, get_unique_folder

logger = logging.getLogger(__name__)

FIRST_COMMIT_MESSAGE = "First commit"


@dataclass
class RepositoryStatus:
    """Synchronization state of a model repository."""

    model_changed: bool
    has_uncommitted_changes: bool
    branch_status: Optional[BranchStatus]
    remote_url: Optional[str]


def abort_changes(document: ModelDocument, repository: ModelRepository) -> Optional[str]:
    """
    Discard every change since the last commit.

    The working tree is reset to HEAD and the document reloaded from it.

    Returns:
        The restored-objects report of the reload.
    """
    repository.reset_to_ref("HEAD")
    restored = repository.load_model(document)
    repository.save_checksum()
    logger.info("Reset %s to HEAD", repository.local_repository_folder)
    return restored


def create_repo_from_model(
    document: ModelDocument,
    url: str,
    credentials: Optional[UsernamePassword] = None,
    config: Optional[ModelSyncConfig] = None,
    progress: Optional[ProgressMonitor] = None,
) -> tuple[ModelRepository, list[PushResult]]:
    """
    Put a model under version control and publish it to an empty remote.

    A new folder named after the URL is created below the configured
    repositories root. The model file moves to the repository's temporary
    model file, is exported, committed and pushed.

    Args:
        document: Model to publish. Its ``file`` is updated.
        url: Remote repository URL.
        credentials: Required for HTTP remotes.
        config: Configuration (defaults if None).
        progress: Optional progress monitor.

    Returns:
        Tuple of (repository, push results).

    Raises:
        RepositoryError: If the URL or credentials are unusable.
        TransportError: If no transport can be configured.
        GitError: If a git command fails.
    """
    config = config or ModelSyncConfig()
    progress = progress or NullProgressMonitor()

    if not url:
        raise RepositoryError("Repository URL is empty")
    if transport_kind(url) == TransportKind.HTTP and (credentials is None or not credentials.is_set()):
        raise RepositoryError(f"User name or password required for {url}")

    repos_root = ensure_dir(Path(config.repository.repos_root))
    folder = get_unique_folder(repos_root, folder_name_from_url(url))

    progress.sub_task(f"Creating repository in {folder}")
    repository = ModelRepository(folder, remote=config.repository.remote)
    repository.create_new_local_git_repository(url)

    old_file = document.file
    document.file = repository.temp_model_file
    document.save()
    if old_file is not None and Path(old_file).is_file() and Path(old_file) != document.file:
        Path(old_file).unlink()

    progress.sub_task("Exporting model")
    repository.export_model(document)
    repository.commit_changes(FIRST_COMMIT_MESSAGE)

    with transport_session(url, credentials, config.transport) as transport:
        results = repository.push_to_remote(transport, progress)

    repository.save_checksum()
    return repository, results


def get_repository_status(repository: ModelRepository) -> RepositoryStatus:
    """
    Collect the synchronization state of a repository without changing it.

    Raises:
        RepositoryError: If the folder is not a git working copy.
    """
    if not git.is_git_repo(repository.local_repository_folder):
        raise RepositoryError(f"Not a git repository: {repository.local_repository_folder}")

    try:
        branch_status = repository.get_branch_status()
    except RepositoryError:
        branch_status = None

    return RepositoryStatus(
        model_changed=repository.has_changes_since_last_checksum(),
        has_uncommitted_changes=repository.has_changes_to_commit(),
        branch_status=branch_status,
        remote_url=repository.get_online_repository_url(),
    )
