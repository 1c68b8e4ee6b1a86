# Tests for modelsync.cli
# CLI commands using Click testing

import os
from pathlib import Path
from unittest.mock import patch

import pytest
import yaml
from click.testing import CliRunner

from modelsync.cli import cli
from modelsync.model import YamlModelDocument
from modelsync.process import ProcessKind, RepositoryModelProcess

from .conftest import clone_model, git, make_document, requires_git


def _invoke(*args: str, input: str = None):
    return CliRunner().invoke(cli, ["--no-color", *args], input=input)


@pytest.fixture
def config_path() -> Path:
    return Path(os.environ["MODELSYNC_CONFIG"])


@pytest.fixture
def repos_config(config_path: Path, temp_dir: Path) -> Path:
    """Configuration creating repositories below the test directory."""
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        yaml.dump({"repository": {"repos_root": str(temp_dir / "repos")}, "conflicts": {"strategy": "local"}}),
        encoding="utf-8",
    )
    return config_path


class TestCliGroup:
    """Tests for main CLI group."""

    def test_help(self):
        result = CliRunner().invoke(cli, ["--help"])
        assert result.exit_code == 0
        assert "modelsync" in result.output
        assert "Workflows" in result.output
        for command in ("commit", "refresh", "publish", "abort", "create", "status", "config"):
            assert command in result.output

    def test_version(self):
        result = CliRunner().invoke(cli, ["--version"])
        assert result.exit_code == 0
        assert "modelsync" in result.output
        assert "1.0.0" in result.output

    @pytest.mark.parametrize("command", ["commit", "refresh", "publish", "abort", "status"])
    def test_missing_repository(self, command: str, temp_dir: Path):
        result = _invoke(command, str(temp_dir / "missing"))
        assert result.exit_code == 2

    def test_folder_without_model(self, temp_dir: Path):
        folder = temp_dir / "empty"
        folder.mkdir()

        result = _invoke("commit", str(folder))

        assert result.exit_code == 1
        assert "Model file not found" in result.output

    def test_invalid_configuration(self, config_path: Path, temp_dir: Path):
        config_path.parent.mkdir(parents=True, exist_ok=True)
        config_path.write_text("conflicts:\n  strategy: theirs\n", encoding="utf-8")

        result = _invoke("status", str(temp_dir))

        assert result.exit_code == 1
        assert "Invalid configuration" in result.output


class TestConfigCommands:
    """Tests for the config group."""

    def test_init(self, config_path: Path):
        result = _invoke("config", "init")
        assert result.exit_code == 0
        assert "Created configuration" in result.output
        assert config_path.is_file()

        result = _invoke("config", "init")
        assert "already exists" in result.output

    def test_init_force(self, config_path: Path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text("conflicts:\n  strategy: local\n", encoding="utf-8")

        result = _invoke("config", "init", "--force")

        assert result.exit_code == 0
        assert "strategy: prompt" in config_path.read_text(encoding="utf-8")

    def test_show_missing(self):
        result = _invoke("config", "show")
        assert result.exit_code == 0
        assert "Configuration file not found" in result.output

    def test_show(self, repos_config: Path):
        result = _invoke("config", "show")
        assert result.exit_code == 0
        assert "Conflicts: local" in result.output
        assert "strategy: local" in result.output

    def test_validate(self, repos_config: Path):
        result = _invoke("config", "validate")
        assert result.exit_code == 0
        assert "Configuration is valid" in result.output

    def test_validate_errors(self, config_path: Path):
        config_path.parent.mkdir(parents=True)
        config_path.write_text("output:\n  verbose: maybe\n", encoding="utf-8")

        result = _invoke("config", "validate")

        assert result.exit_code == 1
        assert "Configuration has 1 errors" in result.output
        assert "output -> verbose" in result.output


@requires_git
class TestSyncCommands:
    """Commit, refresh and publish against a local bare remote."""

    def test_commit(self, published):
        repository, document = published
        folder = repository.local_repository_folder
        document.get("actor-1").name = "Client"
        document.save()

        result = _invoke("commit", str(folder), "-m", "Rename customer")

        assert result.exit_code == 0, result.output
        assert "Changes committed" in result.output
        assert git("log", "-1", "--format=%s", cwd=folder) == "Rename customer"

        result = _invoke("commit", str(folder))
        assert result.exit_code == 0
        assert "Nothing to commit" in result.output

    def test_commit_amend(self, published):
        repository, document = published
        folder = repository.local_repository_folder
        count = git("rev-list", "--count", "HEAD", cwd=folder)
        document.get("actor-2").name = "Carrier"
        document.save()

        result = _invoke("commit", str(folder), "-m", "Amended", "--amend")

        assert result.exit_code == 0, result.output
        assert git("rev-list", "--count", "HEAD", cwd=folder) == count
        assert git("log", "-1", "--format=%s", cwd=folder) == "Amended"

    def test_publish_up_to_date(self, published):
        repository, _ = published

        result = _invoke("publish", str(repository.local_repository_folder))

        assert result.exit_code == 0, result.output
        assert "Model is up to date" in result.output

    def test_refresh_fast_forward(self, published, temp_dir: Path, remote_url: str):
        repository, _ = published
        _, other_document = clone_model(remote_url, temp_dir / "other")
        other_document.get("actor-1").name = "Client"
        RepositoryModelProcess(ProcessKind.PUBLISH, other_document, commit_message="Client").run()

        result = _invoke("refresh", str(repository.local_repository_folder))

        assert result.exit_code == 0, result.output
        assert "Model updated from remote" in result.output
        assert YamlModelDocument.load(repository.temp_model_file).get("actor-1").name == "Client"

    @pytest.fixture
    def diverged(self, published, temp_dir: Path, remote_url: str):
        """Both users renamed the customer; the remote has the other user's name."""
        repository, document = published
        _, other_document = clone_model(remote_url, temp_dir / "other")
        other_document.get("actor-1").name = "Client"
        RepositoryModelProcess(ProcessKind.PUBLISH, other_document, commit_message="Client").run()

        document.get("actor-1").name = "Buyer"
        document.save()
        return repository

    def test_publish_remote_strategy(self, diverged, remote_url: str):
        result = _invoke("publish", str(diverged.local_repository_folder), "--strategy", "remote", "--yes")

        assert result.exit_code == 0, result.output
        assert "model/BusinessActor/actor-1.yaml" in result.output
        assert "Model updated from remote" in result.output
        assert YamlModelDocument.load(diverged.temp_model_file).get("actor-1").name == "Client"
        assert git("rev-parse", "main", cwd=Path(remote_url)) == git(
            "rev-parse", "HEAD", cwd=diverged.local_repository_folder
        )

    def test_publish_prompt_keeps_local(self, diverged):
        result = _invoke("publish", str(diverged.local_repository_folder), "-s", "prompt", input="x\nl\ny\n")

        assert result.exit_code == 0, result.output
        assert "Invalid choice" in result.output
        assert YamlModelDocument.load(diverged.temp_model_file).get("actor-1").name == "Buyer"

    def test_publish_prompt_abort(self, diverged, remote_url: str):
        remote_head = git("rev-parse", "main", cwd=Path(remote_url))

        result = _invoke("publish", str(diverged.local_repository_folder), "-s", "prompt", input="a\n")

        assert result.exit_code == 0, result.output
        assert "Merge cancelled, local model kept" in result.output
        assert YamlModelDocument.load(diverged.temp_model_file).get("actor-1").name == "Buyer"
        assert git("rev-parse", "main", cwd=Path(remote_url)) == remote_head

    def test_decline_completion(self, diverged):
        result = _invoke("refresh", str(diverged.local_repository_folder), "-s", "local", input="n\n")

        assert result.exit_code == 0, result.output
        assert "Merge cancelled, local model kept" in result.output
        assert git("status", "--porcelain", cwd=diverged.local_repository_folder) == ""

    def test_pull_failure_exits(self, published, remote_url: str, temp_dir: Path):
        repository, _ = published
        Path(remote_url).rename(temp_dir / "moved.git")

        result = _invoke("publish", str(repository.local_repository_folder))

        assert result.exit_code == 1
        assert "Pull failed" in result.output


@requires_git
class TestRepositoryCommands:
    """Tests for create, status and abort."""

    def test_create(self, repos_config: Path, temp_dir: Path, remote_url: str):
        model_file = temp_dir / "archisurance.yaml"
        make_document(model_file).save()

        result = _invoke("create", str(model_file), remote_url)

        assert result.exit_code == 0, result.output
        assert "Created repository in" in result.output
        assert (temp_dir / "repos" / "remote" / ".git" / "model.yaml").is_file()
        assert not model_file.exists()

    def test_create_http_without_credentials(self, repos_config: Path, temp_dir: Path):
        model_file = temp_dir / "archisurance.yaml"
        make_document(model_file).save()

        result = _invoke("create", str(model_file), "https://example.com/team/model.git")

        assert result.exit_code == 1
        assert "required" in result.output
        assert model_file.exists()

    def test_create_prompts_for_password(self, repos_config: Path, temp_dir: Path):
        model_file = temp_dir / "archisurance.yaml"
        make_document(model_file).save()

        with patch("modelsync.cli.create_repo_from_model", side_effect=RuntimeError("stop")) as create:
            CliRunner().invoke(
                cli,
                ["create", str(model_file), "https://example.com/m.git", "-u", "alice"],
                input="secret\n",
            )

        credentials = create.call_args.args[2]
        assert credentials.username == "alice"
        assert credentials.password == "secret"

    def test_status(self, published):
        repository, document = published
        document.get("actor-1").name = "Client"
        document.save()

        result = _invoke("status", str(repository.local_repository_folder))

        assert result.exit_code == 0, result.output
        assert "refs/heads/main" in result.output
        assert "changed since last sync" in result.output

    def test_abort(self, published):
        repository, document = published
        document.get("actor-1").name = "Client"
        document.save()

        result = _invoke("abort", str(repository.local_repository_folder), "--yes")

        assert result.exit_code == 0, result.output
        assert "Model reset to the last commit" in result.output
        assert YamlModelDocument.load(repository.temp_model_file).get("actor-1").name == "Customer"

    def test_abort_declined(self, published):
        repository, document = published
        document.get("actor-1").name = "Client"
        document.save()

        result = _invoke("abort", str(repository.local_repository_folder), input="n\n")

        assert result.exit_code == 0
        assert "Aborted" in result.output
        assert YamlModelDocument.load(repository.temp_model_file).get("actor-1").name == "Client"

    def test_status_outside_repository(self, temp_dir: Path):
        folder = temp_dir / "plain"
        folder.mkdir()

        result = _invoke("status", str(folder))

        assert result.exit_code == 1
        assert "Not a git repository" in result.output
