"""Click-based CLI for modelsync - model synchronization with git remotes."""

from __future__ import annotations

import sys
from functools import partial
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError

from modelsync import __version__
from modelsync.config import (
    ConflictStrategy,
    ModelSyncConfig,
    ensure_config_exists,
    get_config_path,
    load_config_or_default,
    validate_config_file,
)
from modelsync.errors import ModelSyncError
from modelsync.git import ModelRepository, UsernamePassword
from modelsync.merge import ConflictSide, HeadlessMergeConflictHandler, InteractiveMergeConflictHandler
from modelsync.model import YamlModelDocument
from modelsync.output import Console, ConsoleListener, ConsoleProgress, create_console, setup_logging
from modelsync.process import (
    EventKind,
    ProcessKind,
    RepositoryModelProcess,
    abort_changes,
    create_repo_from_model,
    error_message,
    get_repository_status,
)

REPO_ARGUMENT = click.argument("repo", type=click.Path(exists=True, file_okay=False, path_type=Path))


def _credential_options(func):
    func = click.option(
        "--password",
        envvar="MODELSYNC_PASSWORD",
        default=None,
        help="Password or token for HTTP remotes (env: MODELSYNC_PASSWORD)",
    )(func)
    func = click.option("--username", "-u", default=None, help="User name for HTTP remotes")(func)
    return func


def _console(ctx: click.Context, config: Optional[ModelSyncConfig] = None) -> Console:
    options = ctx.find_root().params
    verbose = options.get("verbose", False) or (config is not None and config.output.verbose)
    colored = not options.get("no_color", False) and (config is None or config.output.colored)
    return create_console(verbose=verbose, colored=colored)


def _setup(ctx: click.Context) -> tuple[ModelSyncConfig, Console]:
    """Load configuration, create the console and install logging; exits on an invalid config file."""
    try:
        config = load_config_or_default()
    except (ValidationError, yaml.YAMLError) as e:
        _console(ctx).print_error(f"Invalid configuration {get_config_path()}:\n{e}")
        sys.exit(1)

    console = _console(ctx, config)
    setup_logging(verbose=console.verbose, log_file=config.output.log_file, console=console.rich)
    return config, console


def _credentials(username: Optional[str], password: Optional[str]) -> Optional[UsernamePassword]:
    if username and password is None:
        password = click.prompt(f"Password for {username}", hide_input=True, default="", show_default=False)
    if not username and not password:
        return None
    return UsernamePassword(username=username or "", password=password or "")


def _open_model(repo: Path, config: ModelSyncConfig, console: Console) -> tuple[ModelRepository, YamlModelDocument]:
    repository = ModelRepository(repo, remote=config.repository.remote)
    try:
        document = YamlModelDocument.load(repository.temp_model_file)
    except ModelSyncError as e:
        console.print_error(str(e))
        sys.exit(1)
    return repository, document


def _conflict_handler_factory(strategy: ConflictStrategy, console: Console):
    if strategy == ConflictStrategy.PROMPT:
        return partial(InteractiveMergeConflictHandler, console=console.rich)
    return partial(HeadlessMergeConflictHandler, policy=ConflictSide(strategy.value))


@click.group()
@click.version_option(version=__version__, prog_name="modelsync")
@click.option("--verbose", "-v", is_flag=True, help="Show detailed output")
@click.option("--no-color", is_flag=True, help="Disable colored output")
def cli(verbose: bool, no_color: bool) -> None:
    """modelsync - synchronize models with git repositories.

    A model lives in <repo>/.git/model.yaml and is exported to one YAML
    file per object below <repo>/model/ for version control.

    \b
    Workflows:
      commit   Export and commit local model changes
      refresh  Commit, then merge changes from the remote
      publish  Refresh, then push to the remote
    """
    pass


@cli.command()
@REPO_ARGUMENT
@click.option("--message", "-m", default=None, help="Commit message (default from config)")
@click.option("--amend", is_flag=True, help="Amend the last commit instead of creating a new one")
@click.pass_context
def commit(ctx: click.Context, repo: Path, message: Optional[str], amend: bool) -> None:
    """Export the model and commit local changes.

    \b
    Examples:
      modelsync commit ~/.modelsync/repositories/archisurance -m "Add actors"
      modelsync commit ./my-model --amend
    """
    config, console = _setup(ctx)
    repository, document = _open_model(repo, config, console)
    listener = ConsoleListener(console)

    process = RepositoryModelProcess(
        ProcessKind.COMMIT,
        document,
        listener,
        ConsoleProgress(console),
        commit_message=message if message is not None else config.repository.commit_message,
        amend=amend,
        repository=repository,
    )
    process.run()

    if listener.error_count:
        sys.exit(1)
    if not any(event.kind == EventKind.END_COMMIT for event in listener.events):
        console.print_info("Nothing to commit")


def _run_remote_process(
    ctx: click.Context,
    kind: ProcessKind,
    repo: Path,
    username: Optional[str],
    password: Optional[str],
    strategy: Optional[str],
    yes: bool,
) -> None:
    config, console = _setup(ctx)
    repository, document = _open_model(repo, config, console)
    listener = ConsoleListener(console, assume_yes=yes)
    chosen = ConflictStrategy(strategy) if strategy else config.conflicts.strategy

    process = RepositoryModelProcess(
        kind,
        document,
        listener,
        ConsoleProgress(console),
        _credentials(username, password),
        commit_message=config.repository.commit_message,
        repository=repository,
        transport_settings=config.transport,
        conflict_handler_factory=_conflict_handler_factory(chosen, console),
    )
    process.run()

    if listener.error_count:
        sys.exit(1)


@cli.command()
@REPO_ARGUMENT
@_credential_options
@click.option(
    "--strategy",
    "-s",
    type=click.Choice([s.value for s in ConflictStrategy]),
    default=None,
    help="How to resolve merge conflicts (default from config)",
)
@click.option("--yes", "-y", is_flag=True, help="Complete merges without asking")
@click.pass_context
def refresh(
    ctx: click.Context,
    repo: Path,
    username: Optional[str],
    password: Optional[str],
    strategy: Optional[str],
    yes: bool,
) -> None:
    """Commit local changes and merge changes from the remote.

    \b
    Examples:
      modelsync refresh ./my-model
      modelsync refresh ./my-model -u alice --strategy remote --yes
    """
    _run_remote_process(ctx, ProcessKind.REFRESH, repo, username, password, strategy, yes)


@cli.command()
@REPO_ARGUMENT
@_credential_options
@click.option(
    "--strategy",
    "-s",
    type=click.Choice([s.value for s in ConflictStrategy]),
    default=None,
    help="How to resolve merge conflicts (default from config)",
)
@click.option("--yes", "-y", is_flag=True, help="Complete merges without asking")
@click.pass_context
def publish(
    ctx: click.Context,
    repo: Path,
    username: Optional[str],
    password: Optional[str],
    strategy: Optional[str],
    yes: bool,
) -> None:
    """Refresh from the remote, then push all local branches.

    Nothing is pushed when the merge was cancelled or failed.

    \b
    Examples:
      modelsync publish ./my-model
      MODELSYNC_PASSWORD=token modelsync publish ./my-model -u alice
    """
    _run_remote_process(ctx, ProcessKind.PUBLISH, repo, username, password, strategy, yes)


@cli.command()
@REPO_ARGUMENT
@click.option("--yes", "-y", is_flag=True, help="Skip confirmation prompt")
@click.pass_context
def abort(ctx: click.Context, repo: Path, yes: bool) -> None:
    """Discard all model changes since the last commit.

    \b
    Examples:
      modelsync abort ./my-model --yes
    """
    config, console = _setup(ctx)
    repository, document = _open_model(repo, config, console)

    if not yes and not console.confirm("Discard all changes since the last commit?"):
        console.print_info("Aborted")
        return

    try:
        restored = abort_changes(document, repository)
    except ModelSyncError as e:
        console.print_error(error_message(e))
        sys.exit(1)

    console.print_success("✓ Model reset to the last commit")
    if restored:
        console.print_warning("Restored objects:")
        console.print_detail(restored)


@cli.command()
@click.argument("model_file", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("url")
@_credential_options
@click.pass_context
def create(ctx: click.Context, model_file: Path, url: str, username: Optional[str], password: Optional[str]) -> None:
    """Create a repository for a model and push it to an empty remote.

    The model file is moved into the new repository.

    \b
    Examples:
      modelsync create model.yaml git@github.com:team/model.git
      modelsync create model.yaml https://example.com/team/model.git -u alice
    """
    config, console = _setup(ctx)

    try:
        document = YamlModelDocument.load(model_file)
        repository, results = create_repo_from_model(
            document,
            url,
            _credentials(username, password),
            config,
            ConsoleProgress(console),
        )
    except ModelSyncError as e:
        console.print_error(error_message(e))
        sys.exit(1)

    rejected = [update.describe() for result in results for update in result.remote_updates if not update.is_ok]
    console.print_success(f"✓ Created repository in {repository.local_repository_folder}")
    if rejected:
        console.print_error("Some references were not pushed")
        console.print_detail("\n".join(rejected))
        sys.exit(1)


@cli.command()
@REPO_ARGUMENT
@click.pass_context
def status(ctx: click.Context, repo: Path) -> None:
    """Show synchronization status of a model repository.

    \b
    Examples:
      modelsync status ./my-model
    """
    config, console = _setup(ctx)
    repository = ModelRepository(repo, remote=config.repository.remote)

    try:
        repository_status = get_repository_status(repository)
    except ModelSyncError as e:
        console.print_error(error_message(e))
        sys.exit(1)

    console.print_repository_status(str(repo), repository_status)


@cli.group("config")
def config_group() -> None:
    """Configuration management.

    \b
    The configuration file lives in ~/.config/modelsync/config.yaml
    (override with MODELSYNC_CONFIG). Sections: repository, transport,
    conflicts, output.
    """
    pass


@config_group.command("init")
@click.option("--force", "-f", is_flag=True, help="Overwrite an existing configuration")
@click.pass_context
def config_init(ctx: click.Context, force: bool) -> None:
    """Create a configuration file with default values."""
    console = _console(ctx)
    path, created = ensure_config_exists(force=force)
    if created:
        console.print_success(f"✓ Created configuration: {path}")
    else:
        console.print_warning(f"Configuration already exists: {path} (use --force to overwrite)")


@config_group.command("show")
@click.pass_context
def config_show(ctx: click.Context) -> None:
    """Show the configuration file."""
    console = _console(ctx)
    path = get_config_path()

    if not path.exists():
        console.print_warning(f"Configuration file not found: {path}")
        console.print("[dim]Run 'modelsync config init' to create one.[/dim]")
        return

    try:
        loaded = load_config_or_default(path)
    except (ValidationError, yaml.YAMLError) as e:
        console.print_error(f"Invalid configuration: {e}")
        sys.exit(1)

    console.print_config_summary(str(path), loaded.repository.remote, loaded.conflicts.strategy.value)
    console.print(path.read_text(encoding="utf-8"), highlight=False, markup=False)


@config_group.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate the configuration file."""
    console = _console(ctx)
    is_valid, errors = validate_config_file()

    if is_valid:
        console.print_success(f"✓ Configuration is valid: {get_config_path()}")
        return

    console.print_error(f"Configuration has {len(errors)} errors:")
    for error in errors:
        console.print(f"  [red]•[/red] {error}", highlight=False)
    sys.exit(1)


if __name__ == "__main__":
    cli()
