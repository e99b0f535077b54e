# git-helper Git Operations
# Git command execution against a repository on disk

import subprocess
from pathlib import Path
from typing import Optional

from githelper.errors import ExternalToolFailure
from githelper.git.backend import MergeStrategy, VcsBackend

GRAPH_FORMAT = "format:%h %ad%d %s"


def _run_git(
    *args: str,
    cwd: Optional[Path] = None,
    check: bool = True,
    capture_output: bool = True,
) -> subprocess.CompletedProcess[str]:
    """
    Run a git command.

    Args:
        *args: Git command arguments.
        cwd: Working directory.
        check: Whether to raise on non-zero exit.
        capture_output: Whether to capture stdout/stderr.

    Returns:
        CompletedProcess with result.

    Raises:
        ExternalToolFailure: If command fails and check is True.
    """
    cmd = ["git", *args]
    try:
        result = subprocess.run(
            cmd,
            cwd=cwd,
            check=False,
            capture_output=capture_output,
            text=True,
        )
        if check and result.returncode != 0:
            raise ExternalToolFailure(
                f"Git command failed: {' '.join(cmd)}",
                returncode=result.returncode,
                stderr=result.stderr.strip() if result.stderr else "",
            )
        return result
    except FileNotFoundError:
        raise ExternalToolFailure("git command not found. Is git installed?", returncode=127)


class GitBackend(VcsBackend):
    """
    Repository handle backed by the ``git`` executable.

    Queries always capture output. Mutating commands stream git's own
    output to the terminal when ``stream`` is set, so progress and
    conflict messages reach the user verbatim.
    """

    def __init__(self, path: Optional[Path] = None, *, stream: bool = False):
        """
        Initialize backend.

        Args:
            path: Repository path (defaults to current directory).
            stream: Let mutating commands write directly to the terminal.
        """
        self.path = path
        self.stream = stream

    def _query(self, *args: str, check: bool = True) -> subprocess.CompletedProcess[str]:
        return _run_git(*args, cwd=self.path, check=check)

    def _mutate(self, *args: str) -> None:
        _run_git(*args, cwd=self.path, capture_output=not self.stream)

    def current_branch(self) -> Optional[str]:
        """
        Get current branch name.

        Returns:
            Branch name or None if detached or outside a repository.
        """
        try:
            result = self._query("rev-parse", "--abbrev-ref", "HEAD")
        except ExternalToolFailure:
            return None
        branch = result.stdout.strip()
        return None if branch in ("", "HEAD") else branch

    def stage_all(self) -> None:
        self._mutate("add", "-A")

    def commit(self, message: str) -> None:
        self._mutate("commit", "-m", message)

    def push(
        self,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        *,
        set_upstream: bool = False,
    ) -> None:
        args = ["push"]

        if set_upstream:
            args.append("--set-upstream")

        if remote:
            args.append(remote)

        if branch:
            args.append(branch)

        self._mutate(*args)

    def pull(self, remote: Optional[str] = None, branch: Optional[str] = None) -> None:
        args = ["pull"]
        if remote:
            args.append(remote)
        if branch:
            args.append(branch)
        self._mutate(*args)

    def fetch(
        self,
        remote: Optional[str] = None,
        branch: Optional[str] = None,
        *,
        all_remotes: bool = False,
    ) -> None:
        args = ["fetch"]
        if all_remotes:
            args.append("--all")
        else:
            if remote:
                args.append(remote)
            if branch:
                args.append(branch)
        self._mutate(*args)

    def merge(self, ref: str, strategy: Optional[MergeStrategy] = None) -> None:
        args = ["merge"]
        if strategy is not None:
            args.extend(["-X", strategy.value])
        args.append(ref)
        self._mutate(*args)

    def abort_merge(self) -> None:
        self._mutate("merge", "--abort")

    def reset(self, ref: str, *, hard: bool = False) -> None:
        if hard:
            self._mutate("reset", "--hard", ref)
        else:
            self._mutate("reset", ref)

    def stash_push(self) -> None:
        self._mutate("stash")

    def stash_apply(self) -> None:
        self._mutate("stash", "apply")

    def stash_clear(self) -> None:
        self._mutate("stash", "clear")

    def stash_list(self) -> list[str]:
        result = self._query("stash", "list")
        return [line for line in result.stdout.splitlines() if line]

    def local_branch_exists(self, name: str) -> bool:
        result = self._query("show-ref", "--verify", "--quiet", f"refs/heads/{name}", check=False)
        return result.returncode == 0

    def remote_branch_exists(self, name: str, remote: str = "origin") -> bool:
        result = self._query("ls-remote", "--exit-code", "--heads", remote, name, check=False)
        return result.returncode == 0

    def checkout(self, name: str) -> None:
        self._mutate("checkout", name)

    def checkout_new(self, name: str, start_point: Optional[str] = None) -> None:
        args = ["checkout", "-b", name]
        if start_point:
            args.append(start_point)
        self._mutate(*args)

    def log_oneline(self, count: int) -> list[str]:
        result = self._query("log", "--oneline", "-n", str(count))
        return [line for line in result.stdout.splitlines() if line]

    def log_graph(self, count: Optional[int] = None) -> str:
        args = ["log", "--graph", "--all", "--decorate", f"--pretty={GRAPH_FORMAT}", "--date=iso"]
        if count:
            args.extend(["-n", str(count)])
        return self._query(*args).stdout
