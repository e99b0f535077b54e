"""Command dispatcher for git-helper.

Each public method validates its arguments and then issues an ordered
sequence of calls against a :class:`~githelper.git.backend.VcsBackend`,
stopping at the first failure.
"""

from __future__ import annotations

from typing import Optional, Union

from githelper.config.schema import GitSettings
from githelper.errors import (
    AlreadyTargetError,
    ExternalToolFailure,
    InvalidArgumentError,
    InvalidIndexError,
    UsageError,
)
from githelper.git.backend import MergeStrategy, StashMode, VcsBackend
from githelper.logger import StepLogger


def parse_strategy(value: Optional[str]) -> Optional[MergeStrategy]:
    """Turn a user-supplied strategy name into a MergeStrategy.

    Args:
        value: "ours", "theirs" or None

    Returns:
        MergeStrategy, or None when no value was given

    Raises:
        InvalidArgumentError: For any other value
    """
    if value is None:
        return None
    try:
        return MergeStrategy(value)
    except ValueError:
        raise InvalidArgumentError("Strategy must be 'ours' or 'theirs'.") from None


class CommandDispatcher:
    """Sequences git calls for each git-helper operation."""

    def __init__(
        self,
        backend: VcsBackend,
        *,
        settings: Optional[GitSettings] = None,
        logger: Optional[StepLogger] = None,
    ):
        """Initialize dispatcher.

        Args:
            backend: Repository handle all calls are issued against
            settings: Remote, default branch and rollback depth
            logger: Step logger for progress messages
        """
        self.git = backend
        self.settings = settings or GitSettings()
        self.logger = logger or StepLogger()

    @property
    def remote(self) -> str:
        return self.settings.remote

    def _current_branch(self) -> str:
        branch = self.git.current_branch()
        if not branch:
            raise InvalidArgumentError("Could not determine current branch.")
        return branch

    # ------------------------------------------------------------------
    # Commit and stash
    # ------------------------------------------------------------------

    def stage_commit(self, message: Optional[str]) -> None:
        """Stage every change and commit it with ``message``."""
        if not message:
            raise UsageError("A commit message is required.")

        self.logger.debug("Staging all changes")
        self.git.stage_all()
        self.git.commit(message)
        self.logger.success(f"Committed: {message}")

    def stage_commit_push(self, message: Optional[str]) -> None:
        """Stage, commit and push the current branch to its upstream.

        A failed commit stops the sequence before the push.
        """
        self.stage_commit(message)
        self.logger.info("Pushing to remote...")
        self.git.push()

    def stash(self, mode: Union[StashMode, str, None] = None) -> Optional[list[str]]:
        """Run one stash mode.

        Returns:
            The stash entries for ``StashMode.LIST``, otherwise None
        """
        mode = StashMode(mode) if mode else StashMode.PUSH

        if mode is StashMode.CLEAR:
            self.logger.info("Clearing all stashes...")
            self.git.stash_clear()
            self.git.reset("HEAD", hard=True)
        elif mode is StashMode.APPLY:
            self.logger.info("Applying latest stash...")
            self.git.stash_apply()
        elif mode is StashMode.UPDATE:
            self.logger.info("Updating stash with current changes...")
            self.git.stash_apply()
            self.git.stage_all()
            self.git.stash_push()
        elif mode is StashMode.LIST:
            self.logger.info("Listing all stashes...")
            return self.git.stash_list()
        else:
            self.logger.info("Stashing changes...")
            self.git.stash_push()
        return None

    # ------------------------------------------------------------------
    # Merging
    # ------------------------------------------------------------------

    def merge(self, branch: Optional[str] = None, *, abort: bool = False) -> None:
        """Merge ``origin/<branch>`` into the current branch, or abort a merge."""
        if abort:
            self.logger.info("Aborting current merge...")
            self.git.abort_merge()
            return

        branch = branch or self.settings.default_branch

        self.logger.info("Pulling and fetching latest changes...")
        self.git.pull()
        self.git.fetch()

        self.logger.info(f"Merging {self.remote}/{branch} into current branch...")
        self.git.merge(f"{self.remote}/{branch}")

    def pull_request(
        self,
        target: Optional[str] = None,
        strategy: Union[MergeStrategy, str, None] = None,
    ) -> None:
        """Merge the current branch into ``target`` and push it.

        The caller ends up back on the branch it started from. A conflicting
        merge without a strategy resets ``target`` to its remote counterpart
        before failing.
        """
        target = target or self.settings.default_branch
        if isinstance(strategy, str):
            strategy = parse_strategy(strategy)

        current = self._current_branch()
        if current == target:
            raise AlreadyTargetError(f"You are already on '{target}'. Nothing to merge.")

        self.logger.info("Fetching latest changes...")
        self.git.fetch(all_remotes=True)
        self.git.pull(self.remote, current)

        self.logger.info(f"Checking out '{target}'...")
        try:
            self.git.checkout(target)
        except ExternalToolFailure:
            self.logger.error(f"Failed to checkout '{target}'. Returning to '{current}'.")
            self.git.checkout(current)
            raise
        self.git.pull(self.remote, target)

        self.logger.info(f"Merging {current} into {target}...")
        try:
            self.git.merge(current, strategy)
        except ExternalToolFailure:
            if strategy is not None:
                self.logger.error(f"Forced merge using strategy '{strategy.value}' failed.")
                raise
            self.logger.warning("Merge conflict detected!")
            self.logger.info(f"Resetting '{target}' to match {self.remote}/{target}...")
            self.git.reset(f"{self.remote}/{target}", hard=True)
            self.logger.info(f"Returning to '{current}'...")
            self.git.checkout(current)
            raise

        self.logger.info(f"Pushing updated '{target}' to {self.remote}...")
        self.git.push(self.remote, target)

        self.logger.info(f"Returning to {current}...")
        self.git.checkout(current)
        self.logger.success(f"Merged {current} into {target}")

    def merge_force(self, branch: Optional[str], strategy: Optional[str]) -> None:
        """Merge ``branch`` into the current branch, resolving conflicts with ``strategy``."""
        if not branch or not strategy:
            raise UsageError("A branch and a strategy are required.")
        chosen = parse_strategy(strategy)

        self.logger.info(
            f"Merging branch '{branch}' into current branch, accepting all '{chosen.value}' changes..."
        )
        self.git.fetch(self.remote, branch)
        self.git.merge(branch, chosen)

    # ------------------------------------------------------------------
    # Branches and resets
    # ------------------------------------------------------------------

    def branch_checkout_or_create(self, name: Optional[str]) -> str:
        """Check out ``name`` from local, else from the remote, else create it.

        Returns:
            "local", "remote" or "created", naming the path taken
        """
        if not name:
            raise UsageError("A branch name is required.")

        self.logger.info(f"Checking for existing branch '{name}'...")

        if self.git.local_branch_exists(name):
            self.logger.info(f"Branch '{name}' exists locally. Checking out...")
            self.git.checkout(name)
            return "local"

        if self.git.remote_branch_exists(name, self.remote):
            self.logger.info(f"Branch '{name}' exists on remote. Checking out and tracking...")
            self.git.fetch(self.remote, name)
            self.git.checkout_new(name, f"{self.remote}/{name}")
            return "remote"

        self.logger.info(f"Branch '{name}' does not exist. Creating and pushing to {self.remote}...")
        self.git.checkout_new(name)
        self.git.push(self.remote, name, set_upstream=True)
        return "created"

    def reset(self, branch: Optional[str] = None, *, origin: bool = False, hard: bool = False) -> str:
        """Reset the current branch to ``branch`` or its remote counterpart.

        Returns:
            The ref that was reset to
        """
        branch = branch or self._current_branch()

        target = branch
        if origin:
            target = f"{self.remote}/{branch}"
            self.logger.info(f"Using remote branch: {target}")
            self.git.fetch(self.remote, branch)
        else:
            self.logger.info(f"Using local branch: {target}")

        if hard:
            self.logger.info(f"Performing HARD reset on {target}...")
        else:
            self.logger.info(f"Performing SOFT reset on {target}...")
        self.git.reset(target, hard=hard)
        return target

    # ------------------------------------------------------------------
    # History
    # ------------------------------------------------------------------

    def rollback_list(self) -> list[str]:
        """Recent commits, newest first. Position ``i`` is rollback index ``i + 1``."""
        return self.git.log_oneline(self.settings.rollback_depth)

    def rollback_commit(self, index: Union[int, str, None]) -> str:
        """Hard reset to the commit at the 1-based ``index`` of :meth:`rollback_list`.

        The list is recomputed on every call, so an index taken from an
        earlier listing refers to whatever is at that position now.

        Returns:
            The commit hash reset to
        """
        if index is None or index == "":
            raise InvalidIndexError("No commit index specified. Use --list to see commit indices.")
        try:
            position = int(index)
        except (TypeError, ValueError):
            raise InvalidIndexError(f"Invalid index '{index}'. Use --list to see available commits.") from None

        entries = self.rollback_list()
        if not 1 <= position <= len(entries):
            raise InvalidIndexError(f"Invalid index {position}. Use --list to see available commits.")

        commit_hash = entries[position - 1].split()[0]
        self.logger.info(f"Rolling back to commit {commit_hash}...")
        self.git.reset(commit_hash, hard=True)
        return commit_hash

    def log(self, count: Optional[int] = None) -> str:
        """Decorated graph of every branch."""
        return self.git.log_graph(count)
