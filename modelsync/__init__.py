"""modelsync - synchronize models with git repositories.

Exports a model to one YAML file per object, commits it, merges changes
from the remote (delegating conflicts to a conflict handler), reloads the
model and pushes the result.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "RepositoryModelProcess",
    "ProcessKind",
    "PullStatus",
    "EventKind",
    "ModelRepository",
    "YamlModelDocument",
    "UsernamePassword",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name in ("RepositoryModelProcess", "ProcessKind", "PullStatus", "EventKind"):
        from modelsync import process

        return getattr(process, name)
    if name in ("ModelRepository", "UsernamePassword"):
        from modelsync import git

        return getattr(git, name)
    if name == "YamlModelDocument":
        from modelsync.model import YamlModelDocument

        return YamlModelDocument
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
