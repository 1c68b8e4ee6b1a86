# modelsync Synchronization Process
# Export, commit, pull with conflict resolution, reload and push of a model

import logging
from typing import Callable, Optional

from modelsync.config.schema import TransportSettings
from modelsync.errors import MergeCancelledError, MergeFailedError
from modelsync.git.operations import GitError, GitInternalError
from modelsync.git.repository import ModelRepository
from modelsync.git.results import BranchStatus, MergeResult, MergeStatus
from modelsync.git.transport import TransportConfig, UsernamePassword, transport_session
from modelsync.merge.handler import MergeConflictHandler
from modelsync.merge.headless import HeadlessMergeConflictHandler
from modelsync.model.document import ModelDocument
from modelsync.process import messages
from modelsync.process.events import (
    EventKind,
    NullProgressMonitor,
    ProcessKind,
    ProcessListener,
    ProgressMonitor,
    PullStatus,
)

logger = logging.getLogger(__name__)

ConflictHandlerFactory = Callable[[MergeResult, str, ModelRepository], MergeConflictHandler]


def _as_kind(kind) -> Optional[ProcessKind]:
    try:
        return ProcessKind(kind)
    except ValueError:
        return None


def error_message(error: BaseException) -> str:
    """
    Text to report for an exception.

    A ``GitInternalError`` is reported by its cause. Output captured from
    git is appended to the message.
    """
    if isinstance(error, GitInternalError) and error.__cause__ is not None:
        error = error.__cause__

    message = str(error) or type(error).__name__
    if isinstance(error, GitError) and error.stderr:
        message = f"{message}\n{error.stderr}"
    elif isinstance(error, MergeFailedError) and error.detail:
        message = f"{message}\n{error.detail}"
    return message


class RepositoryModelProcess:
    """
    One synchronization run of a model with its repository.

    All three kinds export the document and commit local changes. Refresh
    then pulls from the remote, resolving conflicts through the conflict
    handler and the listener; publish additionally pushes when the pull
    left the model current.

    ``run()`` never raises: every outcome is reported to the listener.
    """

    def __init__(
        self,
        kind: ProcessKind,
        document: ModelDocument,
        listener: Optional[ProcessListener] = None,
        progress: Optional[ProgressMonitor] = None,
        credentials: Optional[UsernamePassword] = None,
        commit_message: str = "",
        amend: bool = False,
        *,
        repository: Optional[ModelRepository] = None,
        transport_settings: Optional[TransportSettings] = None,
        conflict_handler_factory: Optional[ConflictHandlerFactory] = None,
    ):
        self._kind = _as_kind(kind)
        self._document = document
        self._listener = listener
        self._progress = progress or NullProgressMonitor()
        self.credentials = credentials
        self._commit_message = commit_message
        self._amend = amend
        self._repository = repository if repository is not None else ModelRepository.for_model(document)
        self._transport_settings = transport_settings or TransportSettings()
        self._conflict_handler_factory = conflict_handler_factory or HeadlessMergeConflictHandler

    @property
    def kind(self) -> Optional[ProcessKind]:
        return self._kind

    @property
    def document(self) -> ModelDocument:
        return self._document

    @property
    def repository(self) -> Optional[ModelRepository]:
        return self._repository

    @property
    def enabled(self) -> bool:
        return self._kind is not None and self._repository is not None and self._repository.exists()

    @property
    def prefix(self) -> str:
        return messages.PROCESS_NAMES.get(self._kind, "")

    def run(self) -> None:
        if not self.enabled:
            folder = self._repository.local_repository_folder if self._repository is not None else None
            detail = str(folder) if folder is not None else None
            self._log_error(messages.NOT_ENABLED, detail=detail)
            return

        try:
            self._run()
        except Exception as e:
            logger.debug("Process %s failed", self.prefix, exc_info=True)
            self._log_error(messages.UNEXPECTED_ERROR, e)

    def _run(self) -> None:
        self._progress.sub_task("Exporting model")
        try:
            self._repository.export_model(self._document)
        except Exception as e:
            self._log_error(messages.EXPORT_FAILED, e)
            return

        self._commit_local_changes()

        if self._kind == ProcessKind.COMMIT:
            return

        url = self._repository.get_online_repository_url()
        try:
            with transport_session(url, self.credentials, self._transport_settings) as transport:
                status = self._run_pull(transport)
                if self._kind == ProcessKind.PUBLISH and status in (PullStatus.OK, PullStatus.UP_TO_DATE):
                    self._run_push(transport)
        finally:
            self._save_checksum()

    # Commit

    def _commit_local_changes(self) -> None:
        try:
            if not self._repository.has_changes_to_commit():
                return
            self._notify(EventKind.START_COMMIT, messages.START_COMMIT)
            self._progress.sub_task(messages.START_COMMIT)
            commit_id = self._repository.commit_changes(self._commit_message, amend=self._amend)
            self._save_checksum()
            self._notify(EventKind.END_COMMIT, messages.END_COMMIT, commit_id)
        except Exception as e:
            self._log_error(messages.COMMIT_FAILED, e)

    # Pull

    def _run_pull(self, transport: TransportConfig) -> PullStatus:
        self._notify(EventKind.START_PULL, messages.START_PULL.format(url=transport.url))
        try:
            status = self._pull(transport)
        except Exception as e:
            self._log_error(messages.PULL_FAILED, e)
            status = PullStatus.ERROR

        self._notify(EventKind.PULL_STATUS, status.value, status.value)
        self._notify(EventKind.END_PULL, messages.PULL_SUMMARIES[status], status.value)
        return status

    def _pull(self, transport: TransportConfig) -> PullStatus:
        result = self._repository.pull_from_remote(transport, self._progress)

        if not result.ref_advertised:
            return PullStatus.OK

        merge_result = result.merge_result
        if merge_result.status == MergeStatus.ALREADY_UP_TO_DATE:
            return PullStatus.OK if result.has_tracking_ref_updates else PullStatus.UP_TO_DATE

        branch_status = self._repository.get_branch_status()

        if merge_result.status == MergeStatus.CONFLICTING:
            try:
                restored = self._resolve_conflicts(merge_result, branch_status)
            except MergeCancelledError:
                return PullStatus.MERGE_CANCELLED
        else:
            self._progress.sub_task("Reloading model")
            restored = self._repository.load_model(self._document)

        self._commit_merged_changes(branch_status, restored)
        return PullStatus.OK

    def _resolve_conflicts(self, merge_result: MergeResult, branch_status: BranchStatus) -> Optional[str]:
        """
        Hand a conflicting merge to a conflict handler.

        Returns:
            The restored-objects report of reloading the merged model.

        Raises:
            MergeCancelledError: If the merge was abandoned; the working
                tree is back at the pre-pull commit.
        """
        remote_branch = branch_status.current_remote_branch
        remote_ref = remote_branch.full_name if remote_branch is not None else merge_result.merged_ref
        handler = self._conflict_handler_factory(merge_result, remote_ref, self._repository)

        try:
            handler.initialize(self._progress)
        except Exception:
            handler.reset_to_local_state()
            raise

        try:
            proceed = self._ask_listener(handler)
            if proceed:
                handler.merge()
                self._progress.sub_task("Reloading model")
                return self._repository.load_model(self._document)
        except Exception:
            handler.reset_to_local_state()
            raise

        handler.reset_to_local_state()
        raise MergeCancelledError("Merge abandoned")

    def _ask_listener(self, handler: MergeConflictHandler) -> bool:
        if self._listener is None:
            logger.warning(messages.NO_CONFLICT_RESOLVER)
            return False
        return bool(self._listener.resolve_conflicts(handler))

    def _commit_merged_changes(self, branch_status: BranchStatus, restored: Optional[str]) -> None:
        if not self._repository.has_changes_to_commit():
            return

        message = messages.MERGE_COMMIT_MESSAGE.format(branch=branch_status.current_local_branch.short_name)
        if restored:
            message += f"\n\n{messages.RESTORED_OBJECTS_HEADER}\n{restored}"
        self._repository.commit_changes(message, amend=False)

    # Push

    def _run_push(self, transport: TransportConfig) -> None:
        self._notify(EventKind.START_PUSH, messages.START_PUSH.format(url=transport.url))
        try:
            results = self._repository.push_to_remote(transport, self._progress)
        except Exception as e:
            self._log_error(messages.PUSH_FAILED, e)
            return

        rejected = [update.describe() for result in results for update in result.remote_updates if not update.is_ok]
        if rejected:
            self._log_error(messages.PUSH_REJECTED, detail="\n".join(rejected))

        self._notify(EventKind.END_PUSH, messages.END_PUSH.format(url=transport.url))

    # Reporting

    def _save_checksum(self) -> None:
        try:
            self._repository.save_checksum()
        except Exception as e:
            self._log_error(messages.CHECKSUM_FAILED, e)

    def _log_error(self, summary: str, error: Optional[BaseException] = None, detail: Optional[str] = None) -> None:
        if error is not None:
            detail = error_message(error)
        # Errors reach the user through the listener when there is one
        log = logger.debug if self._listener is not None else logger.error
        log("%s: %s", summary, detail or "")
        self._notify(EventKind.LOG_ERROR, summary, detail)

    def _notify(self, kind: EventKind, summary: str = "", detail: Optional[str] = None) -> None:
        if self._listener is None:
            return
        try:
            self._listener.notify_event(kind, self.prefix, summary, detail)
        except Exception:
            logger.exception("Listener failed on %s", kind.value)
