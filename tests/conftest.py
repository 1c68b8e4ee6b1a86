# modelsync Test Fixtures
# Pytest fixtures for modelsync tests

import shutil
import subprocess
import tempfile
from collections.abc import Generator
from pathlib import Path
from typing import Optional

import pytest

from modelsync.config.schema import ModelSyncConfig, RepositoryConfig
from modelsync.git.repository import ModelRepository
from modelsync.model.document import ModelObject, YamlModelDocument
from modelsync.process.actions import create_repo_from_model
from modelsync.process.events import EventKind, ProcessEvent

requires_git = pytest.mark.skipif(shutil.which("git") is None, reason="git is not installed")


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def isolated_environment(temp_home: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Fixed git identity, no user or system git config, no modelsync config."""
    monkeypatch.setenv("GIT_AUTHOR_NAME", "Test User")
    monkeypatch.setenv("GIT_AUTHOR_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_COMMITTER_NAME", "Test User")
    monkeypatch.setenv("GIT_COMMITTER_EMAIL", "test@example.com")
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("MODELSYNC_CONFIG", str(temp_home / ".config" / "modelsync" / "config.yaml"))
    monkeypatch.delenv("MODELSYNC_ADDITIONAL_HEADER", raising=False)
    monkeypatch.delenv("MODELSYNC_PASSWORD", raising=False)


def git(*args: str, cwd: Path) -> str:
    """Run git in a test repository and return stdout."""
    result = subprocess.run(["git", *args], cwd=cwd, check=True, capture_output=True, text=True)
    return result.stdout.strip()


def make_document(file: Optional[Path] = None) -> YamlModelDocument:
    """A small model: two actors and a relation between them."""
    return YamlModelDocument(
        file,
        model_id="archisurance",
        name="ArchiSurance",
        objects=[
            ModelObject(id="actor-1", type="BusinessActor", name="Customer"),
            ModelObject(id="actor-2", type="BusinessActor", name="Insurer"),
            ModelObject(
                id="rel-1",
                type="ServingRelationship",
                name="serves",
                refs=["actor-2", "actor-1"],
            ),
        ],
    )


def clone_model(url: str, folder: Path) -> tuple[ModelRepository, YamlModelDocument]:
    """Clone a published model and load it like a second user would."""
    subprocess.run(["git", "clone", "--quiet", url, str(folder)], check=True, capture_output=True, text=True)
    repository = ModelRepository(folder)
    document = YamlModelDocument(repository.temp_model_file)
    document.reload_from_working_tree(folder)
    repository.save_checksum()
    return repository, document


class RecordingListener:
    """Listener that records events and answers conflict requests with a fixed value."""

    def __init__(self, answer: bool = True):
        self.answer = answer
        self.events: list[ProcessEvent] = []
        self.handlers: list = []
        self.conflicts: list = []

    def notify_event(self, kind: EventKind, prefix: str, summary: str, detail: Optional[str]) -> None:
        self.events.append(ProcessEvent(kind=kind, prefix=prefix, summary=summary, detail=detail))

    def resolve_conflicts(self, handler) -> bool:
        self.handlers.append(handler)
        self.conflicts = handler.list_conflicts()
        return self.answer

    @property
    def kinds(self) -> list[EventKind]:
        return [event.kind for event in self.events]

    def of_kind(self, kind: EventKind) -> list[ProcessEvent]:
        return [event for event in self.events if event.kind == kind]


@pytest.fixture
def listener() -> RecordingListener:
    return RecordingListener()


@pytest.fixture
def remote_url(temp_dir: Path) -> str:
    """An empty bare repository acting as the remote."""
    remote = temp_dir / "remote.git"
    subprocess.run(
        ["git", "init", "--quiet", "--bare", "--initial-branch=main", str(remote)],
        check=True,
        capture_output=True,
    )
    return str(remote)


@pytest.fixture
def sync_config(temp_dir: Path) -> ModelSyncConfig:
    return ModelSyncConfig(repository=RepositoryConfig(repos_root=str(temp_dir / "repos")))


@pytest.fixture
def published(
    temp_dir: Path, remote_url: str, sync_config: ModelSyncConfig
) -> tuple[ModelRepository, YamlModelDocument]:
    """A model published to the remote; returns the first user's repository and document."""
    model_file = temp_dir / "archisurance.yaml"
    document = make_document(model_file)
    document.save()
    repository, _ = create_repo_from_model(document, remote_url, config=sync_config)
    return repository, document
