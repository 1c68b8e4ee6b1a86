# modelsync Model Repository
# A local working copy bound to a remote, holding a model's flat-file export

import logging
from pathlib import Path
from typing import Optional

from modelsync.errors import MergeFailedError, RepositoryError
from modelsync.git import operations as git
from modelsync.git.results import (
    BranchInfo,
    BranchStatus,
    FetchResult,
    MergeResult,
    MergeStatus,
    PullResult,
    PushResult,
    parse_push_porcelain,
)
from modelsync.git.transport import TransportConfig
from modelsync.model.document import ModelDocument
from modelsync.utils.hashing import file_hash, read_checksum, write_checksum
from modelsync.utils.paths import atomic_write, is_empty_dir

logger = logging.getLogger(__name__)

TEMP_MODEL_FILE = "model.yaml"
CHECKSUM_FILE = "checksum"

# Stage numbers of the two sides of a conflicted path in the index
LOCAL_STAGE = 2
REMOTE_STAGE = 3


def get_local_repository_folder_for_model(model_file: Optional[Path]) -> Optional[Path]:
    """
    Return the repository folder a model file belongs to.

    A synchronized model lives in ``<repository>/.git/model.yaml``; any
    other location means the model is not under version control.
    """
    if model_file is None:
        return None
    model_file = Path(model_file)
    if model_file.parent.name != ".git":
        return None
    return model_file.parent.parent


class ModelRepository:
    """
    Handle on a local repository folder.

    The remote URL is read once from the configured remote and does not
    change for the lifetime of the handle.
    """

    def __init__(self, local_folder: Path, *, remote: str = "origin"):
        self.local_repository_folder = Path(local_folder)
        self.remote = remote
        self._remote_url: Optional[str] = None
        self._remote_url_read = False

    @classmethod
    def for_model(cls, document: ModelDocument, *, remote: str = "origin") -> Optional["ModelRepository"]:
        """Return the repository holding document, or None if it is not in one."""
        folder = get_local_repository_folder_for_model(getattr(document, "file", None))
        if folder is None:
            return None
        return cls(folder, remote=remote)

    @property
    def git_folder(self) -> Path:
        return self.local_repository_folder / ".git"

    @property
    def temp_model_file(self) -> Path:
        """Where the working copy of the model is kept."""
        return self.git_folder / TEMP_MODEL_FILE

    @property
    def checksum_file(self) -> Path:
        return self.git_folder / CHECKSUM_FILE

    def exists(self) -> bool:
        return self.local_repository_folder.is_dir()

    def get_online_repository_url(self) -> Optional[str]:
        if not self._remote_url_read:
            self._remote_url = git.get_remote_url(self.local_repository_folder, remote=self.remote)
            self._remote_url_read = True
        return self._remote_url

    # Local state

    def create_new_local_git_repository(self, url: str) -> None:
        """
        Initialise an empty repository in the local folder bound to url.

        Raises:
            RepositoryError: If the folder already has content.
        """
        folder = self.local_repository_folder
        if not is_empty_dir(folder):
            raise RepositoryError(f"Folder is not empty: {folder}")

        git.init_repo(folder)
        git.add_remote(url, folder, remote=self.remote)
        self._remote_url = url
        self._remote_url_read = True

    def export_model(self, document: ModelDocument) -> None:
        document.export_to_working_tree(self.local_repository_folder)

    def load_model(self, document: ModelDocument) -> Optional[str]:
        """Reload document from the working tree; returns the restored-objects report."""
        return document.reload_from_working_tree(self.local_repository_folder)

    def has_changes_to_commit(self) -> bool:
        return git.has_uncommitted_changes(self.local_repository_folder)

    def commit_changes(self, message: str, amend: bool = False) -> str:
        """Stage everything and commit. Returns the new commit id."""
        git.stage_all(self.local_repository_folder)
        return git.commit(message, self.local_repository_folder, amend=amend)

    def reset_to_ref(self, ref: str = "HEAD") -> None:
        git.reset_hard(ref, self.local_repository_folder)

    def get_current_local_branch(self) -> Optional[BranchInfo]:
        branch = git.get_current_branch(self.local_repository_folder)
        if branch is None:
            return None
        return BranchInfo(f"refs/heads/{branch}")

    def get_branch_status(self) -> BranchStatus:
        """
        Current local branch and its remote-tracking branch.

        Raises:
            RepositoryError: If HEAD is detached.
        """
        local_branch = self.get_current_local_branch()
        if local_branch is None:
            raise RepositoryError(f"No current branch in {self.local_repository_folder}")

        tracking = self._tracking_ref(local_branch.short_name)
        remote_branch = None
        if git.rev_parse(tracking, self.local_repository_folder) is not None:
            remote_branch = BranchInfo(tracking)

        return BranchStatus(current_local_branch=local_branch, current_remote_branch=remote_branch)

    def _tracking_ref(self, branch: str) -> str:
        upstream = git.get_upstream_ref(self.local_repository_folder)
        if upstream:
            return upstream
        return f"refs/remotes/{self.remote}/{branch}"

    # Remote operations

    def pull_from_remote(self, transport: TransportConfig, progress=None) -> PullResult:
        """
        Fetch and merge the upstream of the current branch.

        A remote that does not have the branch yields a result with
        ``ref_advertised=False`` and no merge.

        Raises:
            RepositoryError: If HEAD is detached.
            GitError: If fetching fails.
            MergeFailedError: If the merge fails without conflicts.
        """
        folder = self.local_repository_folder
        branch = git.get_current_branch(folder)
        if branch is None:
            raise RepositoryError(f"No current branch in {folder}")

        tracking_prefix = f"refs/remotes/{self.remote}/"
        if progress is not None:
            progress.sub_task(f"Fetching from {self.remote}")
        before = git.list_refs(folder, prefix=tracking_prefix)
        git.fetch(folder, remote=self.remote, env=transport.environment())
        after = git.list_refs(folder, prefix=tracking_prefix)
        fetch_result = FetchResult.from_snapshots(before, after)

        upstream = self._tracking_ref(branch)
        upstream_id = git.rev_parse(upstream, folder)
        if upstream_id is None:
            logger.info("Remote does not advertise %s", upstream)
            return PullResult(fetch_result=fetch_result, ref_advertised=False)

        return PullResult(fetch_result=fetch_result, merge_result=self._merge(upstream, upstream_id))

    def _merge(self, upstream: str, upstream_id: str) -> MergeResult:
        folder = self.local_repository_folder
        orig_head = git.rev_parse("HEAD", folder)

        if orig_head is not None and git.is_ancestor(upstream_id, orig_head, folder):
            return MergeResult(
                status=MergeStatus.ALREADY_UP_TO_DATE, merged_ref=upstream, orig_head=orig_head, new_head=orig_head
            )

        result = git.merge(upstream, folder)
        if result.returncode == 0:
            new_head = git.rev_parse("HEAD", folder)
            status = MergeStatus.FAST_FORWARD if new_head == upstream_id else MergeStatus.MERGED
            return MergeResult(status=status, merged_ref=upstream, orig_head=orig_head, new_head=new_head)

        conflicts = git.get_unmerged_paths(folder)
        output = "\n".join(part.strip() for part in (result.stdout, result.stderr) if part and part.strip())
        if conflicts:
            return MergeResult(
                status=MergeStatus.CONFLICTING,
                merged_ref=upstream,
                orig_head=orig_head,
                conflicts=conflicts,
                message=output,
            )

        raise MergeFailedError(f"Merge of {upstream} failed", detail=output)

    def push_to_remote(self, transport: TransportConfig, progress=None) -> list[PushResult]:
        """
        Push all local branches.

        Rejected refs are reported in the result, not raised.

        Raises:
            GitError: If git reports a failure without any ref updates.
        """
        if progress is not None:
            progress.sub_task(f"Pushing to {self.remote}")
        result = git.push(self.local_repository_folder, remote=self.remote, env=transport.environment())
        updates = parse_push_porcelain(result.stdout or "")
        messages = (result.stderr or "").strip()

        if result.returncode != 0 and not updates:
            raise git.GitError(
                f"Push to {self.remote} failed",
                returncode=result.returncode,
                stderr=messages,
            )

        return [PushResult(remote=transport.url, remote_updates=updates, messages=messages)]

    # Conflict support

    def get_unmerged_paths(self) -> list[str]:
        return git.get_unmerged_paths(self.local_repository_folder)

    def read_conflict_side(self, path: str, stage: int) -> Optional[str]:
        return git.show_index_stage(path, stage, self.local_repository_folder)

    def apply_conflict_resolution(self, path: str, content: Optional[str]) -> None:
        """Write the chosen content for a conflicted path and stage it; None deletes it."""
        if content is None:
            git.remove_files([path], self.local_repository_folder)
            return
        atomic_write(self.local_repository_folder / path, content)
        git.stage_files([path], self.local_repository_folder)

    def complete_merge(self) -> str:
        return git.commit_merge(self.local_repository_folder)

    # Checksum

    def save_checksum(self) -> Optional[str]:
        """Store the checksum of the temporary model file, if there is one."""
        return write_checksum(self.temp_model_file, self.checksum_file)

    def has_changes_since_last_checksum(self) -> bool:
        """True if the model file differs from the one last synchronized."""
        current = file_hash(self.temp_model_file)
        if current is None:
            return False
        return current != read_checksum(self.checksum_file)

    def __repr__(self) -> str:
        return f"ModelRepository({str(self.local_repository_folder)!r})"
