# Tests for modelsync.output.console
# Rich-based console output, the console listener and logging setup

import logging
from io import StringIO
from pathlib import Path
from unittest.mock import MagicMock

import pytest
from rich.console import Console as RichConsole
from rich.logging import RichHandler

from modelsync.git.results import BranchInfo, BranchStatus
from modelsync.merge import ConflictSide, MergeConflict
from modelsync.output.console import Console, ConsoleListener, ConsoleProgress, create_console
from modelsync.output.log import setup_logging
from modelsync.process.actions import RepositoryStatus
from modelsync.process.events import EventKind, PullStatus


def _make_console(verbose: bool = False) -> Console:
    """Create a console with captured output."""
    return Console(verbose=verbose, colored=False, rich_console=RichConsole(file=StringIO(), no_color=True, width=120))


def _get_output(console: Console) -> str:
    """Get captured output from console."""
    console.rich.file.seek(0)
    return console.rich.file.read()


class TestConsoleBasic:
    """Tests for basic console methods."""

    def test_print(self):
        c = _make_console()
        c.print("hello world")
        assert "hello world" in _get_output(c)

    def test_print_error(self):
        c = _make_console()
        c.print_error("something failed")
        output = _get_output(c)
        assert "Error:" in output
        assert "something failed" in output

    def test_print_warning(self):
        c = _make_console()
        c.print_warning("be careful")
        output = _get_output(c)
        assert "Warning:" in output
        assert "be careful" in output

    def test_print_success(self):
        c = _make_console()
        c.print_success("all good")
        assert "all good" in _get_output(c)

    def test_print_detail(self):
        c = _make_console()
        c.print_detail("line one\nline two")
        assert _get_output(c).splitlines() == ["    line one", "    line two"]

    def test_confirm(self):
        c = _make_console()
        c.rich.input = MagicMock(side_effect=["y", "", "nope"])

        assert c.confirm("Proceed?") is True
        assert c.confirm("Proceed?", default=True) is True
        assert c.confirm("Proceed?", default=True) is False
        assert c.rich.input.call_args_list[0].args[0] == "Proceed? [y/N]: "


class TestConsoleStatus:
    """Tests for status panels and tables."""

    @pytest.mark.parametrize("status", list(PullStatus))
    def test_pull_status(self, status: PullStatus):
        c = _make_console()
        c.print_pull_status(status, "summary text")
        output = _get_output(c)
        assert "Pull" in output
        assert "summary text" in output

    def test_repository_status(self):
        c = _make_console()
        status = RepositoryStatus(
            model_changed=True,
            has_uncommitted_changes=False,
            branch_status=BranchStatus(BranchInfo("refs/heads/main"), BranchInfo("refs/remotes/origin/main")),
            remote_url="git@example.com:team/model.git",
        )

        c.print_repository_status("archisurance", status)

        output = _get_output(c)
        assert "archisurance" in output
        assert "git@example.com:team/model.git" in output
        assert "refs/heads/main" in output
        assert "refs/remotes/origin/main" in output
        assert "changed since last sync" in output
        assert "clean" in output

    def test_detached_repository_status(self):
        c = _make_console()
        status = RepositoryStatus(
            model_changed=False, has_uncommitted_changes=True, branch_status=None, remote_url=None
        )

        c.print_repository_status("model", status)

        output = _get_output(c)
        assert "detached" in output
        assert "none" in output
        assert "uncommitted changes" in output

    def test_config_summary(self):
        c = _make_console()
        c.print_config_summary("/etc/modelsync.yaml", "origin", "remote")
        output = _get_output(c)
        assert "/etc/modelsync.yaml" in output
        assert "Conflicts: remote" in output


class TestConsoleProgress:
    def test_quiet(self):
        c = _make_console()
        ConsoleProgress(c).sub_task("Exporting model")
        assert _get_output(c) == ""

    def test_verbose(self):
        c = _make_console(verbose=True)
        ConsoleProgress(c).sub_task("Exporting model")
        assert "Exporting model" in _get_output(c)


class TestConsoleListener:
    """Tests for rendering process events."""

    def test_records_events(self):
        listener = ConsoleListener(_make_console())
        listener.notify_event(EventKind.START_PULL, "Refresh", "Pulling from /srv/model.git", None)

        assert listener.events[0].kind == EventKind.START_PULL
        assert listener.events[0].prefix == "Refresh"
        assert "Pulling from /srv/model.git" in _get_output(listener.console)

    def test_errors_counted(self):
        c = _make_console()
        listener = ConsoleListener(c)

        listener.notify_event(EventKind.LOG_ERROR, "Publish", "Could not push", "refs/heads/main: rejected")
        listener.notify_event(EventKind.LOG_ERROR, "Publish", "Could not pull", None)

        assert listener.error_count == 2
        output = _get_output(c)
        assert "Error: Publish Could not push" in output
        assert "    refs/heads/main: rejected" in output

    def test_end_commit_shows_short_id(self):
        c = _make_console()
        ConsoleListener(c).notify_event(EventKind.END_COMMIT, "Commit", "Changes committed", "0123456789abcdef")
        assert "✓ Changes committed (0123456)" in _get_output(c)

    @pytest.mark.parametrize("kind", [EventKind.END_COMMIT, EventKind.END_PUSH, EventKind.LOG_MESSAGE])
    def test_summary_brackets_printed_literally(self, kind):
        """Square brackets in remote paths are not read as Rich markup."""
        c = _make_console()
        ConsoleListener(c).notify_event(kind, "Publish", "Pushed to /srv/[bold]team[/bold]/model.git", None)
        assert "Pushed to /srv/[bold]team[/bold]/model.git" in _get_output(c)

    def test_end_pull(self):
        c = _make_console()
        listener = ConsoleListener(c)
        listener.notify_event(EventKind.PULL_STATUS, "Refresh", "merge_cancelled", "merge_cancelled")
        listener.notify_event(EventKind.END_PULL, "Refresh", "Merge cancelled, local model kept", "merge_cancelled")

        assert listener.pull_status == PullStatus.MERGE_CANCELLED
        assert "Merge cancelled, local model kept" in _get_output(c)

    def test_no_pull_status(self):
        assert ConsoleListener(_make_console()).pull_status is None

    def test_pull_status_event_not_rendered(self):
        c = _make_console()
        ConsoleListener(c).notify_event(EventKind.PULL_STATUS, "Refresh", "ok", "ok")
        assert _get_output(c) == ""

    def _handler(self) -> MagicMock:
        handler = MagicMock()
        handler.remote_ref = "refs/remotes/origin/main"
        handler.list_conflicts.return_value = [
            MergeConflict("model/BusinessActor/actor-1.yaml", "a", "b", resolution=ConflictSide.REMOTE),
            MergeConflict("model/BusinessActor/actor-2.yaml", "a", None),
        ]
        return handler

    def test_resolve_conflicts_assume_yes(self):
        c = _make_console()
        c.rich.input = MagicMock()
        listener = ConsoleListener(c, assume_yes=True)

        assert listener.resolve_conflicts(self._handler()) is True

        c.rich.input.assert_not_called()
        output = _get_output(c)
        assert "2 conflict(s)" in output
        assert "refs/remotes/origin/main" in output
        assert "model/BusinessActor/actor-1.yaml" in output
        assert "remote" in output
        assert "unresolved" in output

    @pytest.mark.parametrize("answer,expected", [("", True), ("y", True), ("n", False)])
    def test_resolve_conflicts_asks(self, answer: str, expected: bool):
        c = _make_console()
        c.rich.input = MagicMock(return_value=answer)

        assert ConsoleListener(c).resolve_conflicts(self._handler()) is expected


class TestCreateConsole:
    """Tests for create_console."""

    def test_default(self):
        c = create_console()
        assert c.verbose is False

    def test_verbose(self):
        c = create_console(verbose=True)
        assert c.verbose is True

    def test_no_color(self):
        c = create_console(colored=False)
        assert c.rich.no_color is True


@pytest.fixture
def modelsync_logger():
    """The modelsync logger, restored after the test."""
    logger = logging.getLogger("modelsync")
    saved = (logger.level, logger.propagate, logger.handlers[:])
    yield logger
    for handler in logger.handlers[:]:
        logger.removeHandler(handler)
        handler.close()
    logger.setLevel(saved[0])
    logger.propagate = saved[1]
    for handler in saved[2]:
        logger.addHandler(handler)


class TestSetupLogging:
    """Tests for setup_logging."""

    def test_console_handler(self, modelsync_logger):
        setup_logging()

        (handler,) = modelsync_logger.handlers
        assert isinstance(handler, RichHandler)
        assert handler.level == logging.WARNING
        assert modelsync_logger.propagate is False

    def test_verbose(self, modelsync_logger):
        setup_logging(verbose=True)
        assert modelsync_logger.handlers[0].level == logging.DEBUG

    def test_repeated_calls_replace_handlers(self, modelsync_logger):
        setup_logging()
        setup_logging()
        assert len(modelsync_logger.handlers) == 1

    def test_log_file(self, modelsync_logger, temp_dir: Path):
        log_file = temp_dir / "logs" / "modelsync.log"
        rich = RichConsole(file=StringIO())
        setup_logging(log_file=str(log_file), console=rich)

        logging.getLogger("modelsync.git.operations").debug("git fetch origin")
        for handler in modelsync_logger.handlers:
            handler.flush()

        assert "modelsync.git.operations - DEBUG - git fetch origin" in log_file.read_text(encoding="utf-8")
        assert rich.file.getvalue() == ""

    def test_warnings_reach_console(self, modelsync_logger):
        rich = RichConsole(file=StringIO(), width=120)
        setup_logging(console=rich)

        logging.getLogger("modelsync.process.process").warning("No listener to resolve conflicts")

        assert "No listener to resolve conflicts" in rich.file.getvalue()
