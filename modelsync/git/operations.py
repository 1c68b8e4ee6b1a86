# modelsync Git Operations
# Git command execution and low-level repository queries

import logging
import os
import subprocess
from pathlib import Path
from typing import Optional

from modelsync.errors import ModelSyncError

logger = logging.getLogger(__name__)

# Environment applied to every git invocation: never open an editor or
# prompt on the terminal, the process runs unattended.
BASE_ENV = {
    "GIT_TERMINAL_PROMPT": "0",
    "GIT_MERGE_AUTOEDIT": "no",
    "GIT_EDITOR": "true",
}


class GitError(ModelSyncError):
    """Exception raised for git operation errors."""

    def __init__(self, message: str, returncode: int = 1, stderr: str = ""):
        self.message = message
        self.returncode = returncode
        self.stderr = stderr
        super().__init__(message)


class GitInternalError(GitError):
    """git could not be executed at all; wraps the underlying OS error."""


def _run_git(
    *args: str,
    cwd: Optional[Path] = None,
    check: bool = True,
    capture_output: bool = True,
    env: Optional[dict[str, str]] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command.

    Args:
        *args: Git command arguments.
        cwd: Working directory.
        check: Whether to raise on non-zero exit.
        capture_output: Whether to capture stdout/stderr.
        env: Extra environment variables (e.g. from a transport).

    Returns:
        CompletedProcess with result.

    Raises:
        GitError: If command fails and check is True.
        GitInternalError: If git could not be started.
    """
    cmd = ["git", *args]
    run_env = {**os.environ, **BASE_ENV, **(env or {})}
    logger.debug("git %s (cwd=%s)", " ".join(args), cwd)
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            capture_output=capture_output,
            text=True,
            env=run_env,
        )
    except FileNotFoundError:
        raise GitError("git command not found. Is git installed?")
    except OSError as e:
        raise GitInternalError(f"Could not run {' '.join(cmd)}") from e

    if check and result.returncode != 0:
        raise GitError(
            f"Git command failed: {' '.join(cmd)}",
            returncode=result.returncode,
            stderr=result.stderr.strip() if result.stderr else "",
        )
    return result


def get_repo_root(path: Optional[Path] = None) -> Optional[Path]:
    """
    Get the root directory of a git repository.

    Args:
        path: Starting path (defaults to current directory).

    Returns:
        Path to repo root, or None if not in a repo.
    """
    try:
        result = _run_git("rev-parse", "--show-toplevel", cwd=path)
        return Path(result.stdout.strip())
    except GitError:
        return None


def is_git_repo(path: Optional[Path] = None) -> bool:
    """Check if path is within a git repository."""
    return get_repo_root(path) is not None


def git_status(path: Optional[Path] = None) -> str:
    """Return machine-readable ``git status`` output."""
    result = _run_git("status", "--porcelain", cwd=path)
    return result.stdout


def has_uncommitted_changes(path: Optional[Path] = None) -> bool:
    """
    Check if repository has uncommitted changes (including untracked files).

    Args:
        path: Repository path.

    Returns:
        True if there are uncommitted changes.
    """
    return len(git_status(path).strip()) > 0


def get_current_branch(path: Optional[Path] = None) -> Optional[str]:
    """
    Get current branch name.

    Works on a branch without commits yet.

    Returns:
        Branch name or None if detached or not a repository.
    """
    try:
        result = _run_git("symbolic-ref", "--quiet", "--short", "HEAD", cwd=path)
        return result.stdout.strip() or None
    except GitError:
        return None


def get_upstream_ref(path: Optional[Path] = None) -> Optional[str]:
    """
    Get the full name of the configured upstream of the current branch.

    Returns:
        e.g. ``refs/remotes/origin/main``, or None without upstream.
    """
    try:
        result = _run_git("rev-parse", "--symbolic-full-name", "@{upstream}", cwd=path)
        return result.stdout.strip() or None
    except GitError:
        return None


def rev_parse(ref: str, path: Optional[Path] = None) -> Optional[str]:
    """Resolve ref to a commit id, or None if it does not exist."""
    result = _run_git("rev-parse", "--verify", "--quiet", f"{ref}^{{commit}}", cwd=path, check=False)
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def list_refs(path: Optional[Path] = None, *, prefix: str = "refs/") -> dict[str, str]:
    """
    List refs below prefix.

    Returns:
        Dict of full ref name to object id.
    """
    result = _run_git("for-each-ref", "--format=%(refname) %(objectname)", prefix, cwd=path)
    refs: dict[str, str] = {}
    for line in result.stdout.splitlines():
        if not line.strip():
            continue
        name, _, object_id = line.partition(" ")
        refs[name] = object_id.strip()
    return refs


def is_ancestor(ancestor: str, descendant: str, path: Optional[Path] = None) -> bool:
    """True if ``ancestor`` is reachable from ``descendant``."""
    result = _run_git("merge-base", "--is-ancestor", ancestor, descendant, cwd=path, check=False)
    return result.returncode == 0


def stage_files(files: list[str], path: Optional[Path] = None) -> None:
    """Stage the given paths (relative to the repository root)."""
    if not files:
        return
    _run_git("add", "--", *files, cwd=path)


def stage_all(path: Optional[Path] = None) -> None:
    """Stage all changes, including deletions and untracked files."""
    _run_git("add", "-A", cwd=path)


def remove_files(files: list[str], path: Optional[Path] = None) -> None:
    """Remove paths from index and working tree."""
    if not files:
        return
    _run_git("rm", "-q", "-f", "--ignore-unmatch", "--", *files, cwd=path)


def commit(
    message: str,
    path: Optional[Path] = None,
    *,
    amend: bool = False,
) -> str:
    """
    Create a commit of everything staged.

    Args:
        message: Commit message.
        path: Repository path.
        amend: Amend the most recent commit instead of creating a new one.

    Returns:
        The new commit hash.

    Raises:
        GitError: If the commit fails.
    """
    args = ["commit", "--allow-empty-message", "-m", message]

    if amend:
        args.append("--amend")

    _run_git(*args, cwd=path)
    result = _run_git("rev-parse", "HEAD", cwd=path)
    return result.stdout.strip()


def commit_merge(path: Optional[Path] = None) -> str:
    """Conclude an in-progress merge with git's prepared merge message."""
    _run_git("commit", "--no-edit", cwd=path)
    result = _run_git("rev-parse", "HEAD", cwd=path)
    return result.stdout.strip()


def init_repo(path: Path, *, initial_branch: str = "main") -> None:
    """Initialize a new git repository, creating the directory if needed."""
    path.mkdir(parents=True, exist_ok=True)
    _run_git("init", "--quiet", f"--initial-branch={initial_branch}", cwd=path)


def add_remote(url: str, path: Optional[Path] = None, *, remote: str = "origin") -> None:
    """Register a remote."""
    _run_git("remote", "add", remote, url, cwd=path)


def get_remote_url(path: Optional[Path] = None, *, remote: str = "origin") -> Optional[str]:
    """Get the URL of a remote, or None if it is not configured."""
    result = _run_git("config", "--get", f"remote.{remote}.url", cwd=path, check=False)
    if result.returncode != 0:
        return None
    return result.stdout.strip() or None


def fetch(
    path: Optional[Path] = None,
    *,
    remote: str = "origin",
    env: Optional[dict[str, str]] = None,
) -> None:
    """
    Fetch from remote, pruning tracking refs the remote no longer has.

    Raises:
        GitError: If the fetch fails.
    """
    _run_git("fetch", "--prune", remote, cwd=path, env=env)


def merge(ref: str, path: Optional[Path] = None) -> subprocess.CompletedProcess[str]:
    """
    Merge ref into the current branch.

    Does not raise on failure; callers inspect the return code and the
    index to tell conflicts from other failures.
    """
    return _run_git("merge", "--no-edit", ref, cwd=path, check=False)


def get_unmerged_paths(path: Optional[Path] = None) -> list[str]:
    """List paths with unresolved merge conflicts."""
    result = _run_git("diff", "--name-only", "--diff-filter=U", "-z", cwd=path)
    return sorted(p for p in result.stdout.split("\0") if p)


def show_index_stage(file: str, stage: int, path: Optional[Path] = None) -> Optional[str]:
    """
    Read one side of a conflicted path from the index.

    Args:
        file: Path relative to the repository root.
        stage: 1 (common ancestor), 2 (ours) or 3 (theirs).

    Returns:
        File content, or None if that side does not have the file.
    """
    result = _run_git("show", f":{stage}:{file}", cwd=path, check=False)
    if result.returncode != 0:
        return None
    return result.stdout


def reset_hard(ref: str = "HEAD", path: Optional[Path] = None) -> None:
    """Reset index and working tree to ref, discarding local changes."""
    _run_git("reset", "--quiet", "--hard", ref, cwd=path)


def push(
    path: Optional[Path] = None,
    *,
    remote: str = "origin",
    env: Optional[dict[str, str]] = None,
) -> subprocess.CompletedProcess[str]:
    """
    Push all local branches to remote, setting upstreams.

    Uses ``--porcelain`` output and does not raise on a non-zero exit:
    rejected refs are reported per ref and parsed by the caller.
    """
    return _run_git("push", "--porcelain", "--all", "--set-upstream", remote, cwd=path, env=env, check=False)
