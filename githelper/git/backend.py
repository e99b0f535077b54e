# git-helper Backend Interface
# Capability interface over the version-control tool

from abc import ABC, abstractmethod
from enum import Enum
from typing import Optional


class MergeStrategy(str, Enum):
    """Conflict resolution preference passed to ``merge -X``."""

    OURS = "ours"  # keep current
    THEIRS = "theirs"  # keep incoming


class StashMode(str, Enum):
    """What the stash operation should do."""

    PUSH = "push"
    CLEAR = "clear"
    APPLY = "apply"
    UPDATE = "update"
    LIST = "list"


class VcsBackend(ABC):
    """
    Abstract repository handle.

    Every mutating method raises ExternalToolFailure when the underlying
    tool reports a failure. Query methods answering yes/no never raise for
    a negative answer.
    """

    @abstractmethod
    def current_branch(self) -> Optional[str]:
        """Return the checked-out branch name, or None on a detached HEAD."""
        raise NotImplementedError("current_branch() not implemented")

    @abstractmethod
    def stage_all(self) -> None:
        """Stage every change in the working tree, including untracked files."""
        raise NotImplementedError("stage_all() not implemented")

    @abstractmethod
    def commit(self, message: str) -> None:
        """Commit the index with the given message."""
        raise NotImplementedError("commit() not implemented")

    @abstractmethod
    def push(
        self,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        *,
        set_upstream: bool = False,
    ) -> None:
        """
        Push to a remote.

        Args:
            remote: Remote name. None pushes the current branch to its upstream.
            branch: Branch to push.
            set_upstream: Record the remote branch as upstream.
        """
        raise NotImplementedError("push() not implemented")

    @abstractmethod
    def pull(self, remote: Optional[str] = None, branch: Optional[str] = None) -> None:
        """Fetch and merge. Without arguments, pulls the current branch's upstream."""
        raise NotImplementedError("pull() not implemented")

    @abstractmethod
    def fetch(
        self,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        *,
        all_remotes: bool = False,
    ) -> None:
        """Fetch remote refs without merging."""
        raise NotImplementedError("fetch() not implemented")

    @abstractmethod
    def merge(self, ref: str, strategy: Optional[MergeStrategy] = None) -> None:
        """Merge ``ref`` into the current branch, optionally preferring one side on conflicts."""
        raise NotImplementedError("merge() not implemented")

    @abstractmethod
    def abort_merge(self) -> None:
        """Abort an in-progress merge."""
        raise NotImplementedError("abort_merge() not implemented")

    @abstractmethod
    def reset(self, ref: str, *, hard: bool = False) -> None:
        """Move the current branch to ``ref``. A hard reset also rewrites the working tree."""
        raise NotImplementedError("reset() not implemented")

    @abstractmethod
    def stash_push(self) -> None:
        raise NotImplementedError("stash_push() not implemented")

    @abstractmethod
    def stash_apply(self) -> None:
        raise NotImplementedError("stash_apply() not implemented")

    @abstractmethod
    def stash_clear(self) -> None:
        raise NotImplementedError("stash_clear() not implemented")

    @abstractmethod
    def stash_list(self) -> list[str]:
        raise NotImplementedError("stash_list() not implemented")

    @abstractmethod
    def local_branch_exists(self, name: str) -> bool:
        """Exact match against ``refs/heads/<name>``."""
        raise NotImplementedError("local_branch_exists() not implemented")

    @abstractmethod
    def remote_branch_exists(self, name: str, remote: str = "origin") -> bool:
        """Ask the remote itself whether it has a branch called ``name``."""
        raise NotImplementedError("remote_branch_exists() not implemented")

    @abstractmethod
    def checkout(self, name: str) -> None:
        raise NotImplementedError("checkout() not implemented")

    @abstractmethod
    def checkout_new(self, name: str, start_point: Optional[str] = None) -> None:
        """Create branch ``name`` at ``start_point`` (default HEAD) and switch to it."""
        raise NotImplementedError("checkout_new() not implemented")

    @abstractmethod
    def log_oneline(self, count: int) -> list[str]:
        """Return up to ``count`` commits, newest first, as ``<hash> <subject>`` lines."""
        raise NotImplementedError("log_oneline() not implemented")

    @abstractmethod
    def log_graph(self, count: Optional[int] = None) -> str:
        """Return a decorated graph of all branches."""
        raise NotImplementedError("log_graph() not implemented")
