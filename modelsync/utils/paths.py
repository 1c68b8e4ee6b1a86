# modelsync Path Utilities
# Atomic writes and folder helpers for repositories and exports

import os
import re
import tempfile
from pathlib import Path


def ensure_dir(path: Path) -> Path:
    """Ensure directory exists, creating if necessary."""
    path.mkdir(parents=True, exist_ok=True)
    return path


def atomic_write(path: Path, content: str | bytes, *, encoding: str = "utf-8") -> None:
    """
    Atomically write content to file.

    Uses a temporary file in the target directory and an atomic rename.

    Args:
        path: Target file path.
        content: Content to write (str or bytes).
        encoding: Encoding for string content (default utf-8).
    """
    ensure_dir(path.parent)

    fd, temp_path = tempfile.mkstemp(dir=path.parent, prefix=f".{path.name}.", suffix=".tmp")
    try:
        if isinstance(content, str):
            with os.fdopen(fd, "w", encoding=encoding, newline="\n") as f:
                f.write(content)
        else:
            with os.fdopen(fd, "wb") as f:
                f.write(content)
        os.replace(temp_path, path)
    except Exception:
        try:
            os.unlink(temp_path)
        except OSError:
            pass
        raise


def is_empty_dir(path: Path) -> bool:
    """True if path is missing or an empty directory."""
    if not path.exists():
        return True
    return path.is_dir() and not any(path.iterdir())


def remove_empty_dirs(root: Path) -> int:
    """
    Remove empty directories below root (root itself is kept).

    Returns:
        Number of directories removed.
    """
    removed = 0
    if not root.is_dir():
        return removed

    # Deepest first so parents become empty after their children go
    for directory in sorted((p for p in root.rglob("*") if p.is_dir()), key=lambda p: len(p.parts), reverse=True):
        if not any(directory.iterdir()):
            directory.rmdir()
            removed += 1
    return removed


def folder_name_from_url(url: str) -> str:
    """
    Derive a local folder name from a repository URL.

    ``https://host/team/Project.git`` and ``git@host:team/project`` both
    become ``project``.
    """
    name = url.rstrip("/").replace("\\", "/")
    name = re.split(r"[/:]", name)[-1]
    if name.endswith(".git"):
        name = name[: -len(".git")]
    name = re.sub(r"[^A-Za-z0-9._-]+", "_", name).strip("._").lower()
    return name or "repository"


def get_unique_folder(base: Path, name: str) -> Path:
    """
    Return a folder below base named ``name`` that does not exist yet.

    Appends ``_1``, ``_2``... until a free name is found.
    """
    candidate = base / name
    index = 1
    while candidate.exists():
        candidate = base / f"{name}_{index}"
        index += 1
    return candidate
