"""git-helper - convenience commands around git.

Composite git workflows (stage-commit-push, pull-request style merges,
branch checkout-or-create, rollbacks) with sensible defaults.
"""

__version__ = "1.0.0"

__all__ = [
    "__version__",
    "CommandDispatcher",
    "GitBackend",
    "InMemoryGit",
    "MergeStrategy",
    "StashMode",
]


def __getattr__(name: str):
    """Lazy import to avoid loading dependencies during setup."""
    if name == "CommandDispatcher":
        from githelper.dispatcher import CommandDispatcher

        return CommandDispatcher
    if name in ("GitBackend", "InMemoryGit", "MergeStrategy", "StashMode"):
        from githelper import git

        return getattr(git, name)
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
