# Tests for githelper.git.operations
# Git command construction and execution

import shutil
import subprocess
from pathlib import Path
from unittest.mock import patch

import pytest

from githelper.dispatcher import CommandDispatcher
from githelper.errors import ExternalToolFailure
from githelper.git.backend import MergeStrategy, StashMode
from githelper.git.operations import GRAPH_FORMAT, GitBackend, _run_git

REPO = Path("/repo")


def _completed(stdout: str = "", returncode: int = 0) -> subprocess.CompletedProcess:
    return subprocess.CompletedProcess(args=["git"], returncode=returncode, stdout=stdout, stderr="")


class TestExternalToolFailure:
    """Tests for ExternalToolFailure exception."""

    def test_basic_error(self):
        err = ExternalToolFailure("test message")
        assert err.message == "test message"
        assert err.returncode == 1
        assert err.stderr == ""
        assert str(err) == "test message"

    def test_error_with_details(self):
        err = ExternalToolFailure("failed", returncode=128, stderr="fatal: not a repo")
        assert err.returncode == 128
        assert err.stderr == "fatal: not a repo"
        assert err.exit_code == 128

    def test_zero_returncode_still_fails(self):
        assert ExternalToolFailure("failed", returncode=0).exit_code == 1


class TestRunGit:
    """Tests for _run_git helper."""

    @patch("githelper.git.operations.subprocess.run")
    def test_successful_command(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(
            args=["git", "status"], returncode=0, stdout="clean", stderr=""
        )
        result = _run_git("status")
        assert result.returncode == 0
        assert result.stdout == "clean"

    @patch("githelper.git.operations.subprocess.run")
    def test_failed_command_raises(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(
            args=["git", "merge", "develop"], returncode=1, stdout="", stderr="CONFLICT (content)\n"
        )
        with pytest.raises(ExternalToolFailure) as exc_info:
            _run_git("merge", "develop")
        assert exc_info.value.returncode == 1
        assert exc_info.value.stderr == "CONFLICT (content)"
        assert exc_info.value.message == "Git command failed: git merge develop"

    @patch("githelper.git.operations.subprocess.run")
    def test_failed_command_no_check(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(
            args=["git", "bad"], returncode=1, stdout="", stderr="error"
        )
        result = _run_git("bad", check=False)
        assert result.returncode == 1

    @patch("githelper.git.operations.subprocess.run")
    def test_streamed_failure_has_no_stderr(self, mock_run):
        mock_run.return_value = subprocess.CompletedProcess(
            args=["git", "push"], returncode=128, stdout=None, stderr=None
        )
        with pytest.raises(ExternalToolFailure) as exc_info:
            _run_git("push", capture_output=False)
        assert exc_info.value.returncode == 128
        assert exc_info.value.stderr == ""

    @patch("githelper.git.operations.subprocess.run", side_effect=FileNotFoundError)
    def test_git_not_found(self, mock_run):
        with pytest.raises(ExternalToolFailure, match="git command not found") as exc_info:
            _run_git("status")
        assert exc_info.value.exit_code == 127

    @patch("githelper.git.operations.subprocess.run")
    def test_passes_cwd(self, mock_run):
        mock_run.return_value = _completed()
        _run_git("status", cwd=REPO, capture_output=False)
        mock_run.assert_called_once_with(
            ["git", "status"], cwd=REPO, check=False, capture_output=False, text=True
        )


class TestGitBackendQueries:
    """Tests for read-only GitBackend methods."""

    @patch("githelper.git.operations._run_git")
    def test_current_branch(self, mock_git):
        mock_git.return_value = _completed("feature\n")
        assert GitBackend(REPO).current_branch() == "feature"
        mock_git.assert_called_once_with("rev-parse", "--abbrev-ref", "HEAD", cwd=REPO, check=True)

    @patch("githelper.git.operations._run_git")
    def test_current_branch_detached(self, mock_git):
        mock_git.return_value = _completed("HEAD\n")
        assert GitBackend(REPO).current_branch() is None

    @patch("githelper.git.operations._run_git", side_effect=ExternalToolFailure("not a repo", 128))
    def test_current_branch_outside_repo(self, mock_git):
        assert GitBackend(REPO).current_branch() is None

    @patch("githelper.git.operations._run_git")
    def test_local_branch_exists(self, mock_git):
        mock_git.return_value = _completed()
        assert GitBackend(REPO).local_branch_exists("develop") is True
        mock_git.assert_called_once_with(
            "show-ref", "--verify", "--quiet", "refs/heads/develop", cwd=REPO, check=False
        )

    @patch("githelper.git.operations._run_git")
    def test_local_branch_missing(self, mock_git):
        mock_git.return_value = _completed(returncode=1)
        assert GitBackend(REPO).local_branch_exists("develop") is False

    @patch("githelper.git.operations._run_git")
    def test_remote_branch_exists(self, mock_git):
        mock_git.return_value = _completed(returncode=2)
        assert GitBackend(REPO).remote_branch_exists("topic", "upstream") is False
        mock_git.assert_called_once_with(
            "ls-remote", "--exit-code", "--heads", "upstream", "topic", cwd=REPO, check=False
        )

    @patch("githelper.git.operations._run_git")
    def test_stash_list(self, mock_git):
        mock_git.return_value = _completed(
            "stash@{0}: WIP on main: abc1234 Fix\nstash@{1}: WIP on main: def5678 Add\n"
        )
        entries = GitBackend(REPO).stash_list()
        assert entries == ["stash@{0}: WIP on main: abc1234 Fix", "stash@{1}: WIP on main: def5678 Add"]

    @patch("githelper.git.operations._run_git")
    def test_log_oneline(self, mock_git):
        mock_git.return_value = _completed("abc1234 Fix bug\ndef5678 Add feature\n")
        assert GitBackend(REPO).log_oneline(20) == ["abc1234 Fix bug", "def5678 Add feature"]
        mock_git.assert_called_once_with("log", "--oneline", "-n", "20", cwd=REPO, check=True)

    @patch("githelper.git.operations._run_git")
    def test_log_graph(self, mock_git):
        mock_git.return_value = _completed("* abc1234 2024-01-01 (HEAD -> main) Fix\n")
        graph = GitBackend(REPO).log_graph(5)
        assert "HEAD -> main" in graph
        mock_git.assert_called_once_with(
            "log",
            "--graph",
            "--all",
            "--decorate",
            f"--pretty={GRAPH_FORMAT}",
            "--date=iso",
            "-n",
            "5",
            cwd=REPO,
            check=True,
        )


class TestGitBackendCommands:
    """Tests for mutating GitBackend methods."""

    @pytest.mark.parametrize(
        "call,expected",
        [
            (lambda git: git.stage_all(), ("add", "-A")),
            (lambda git: git.commit("Fix bug"), ("commit", "-m", "Fix bug")),
            (lambda git: git.push(), ("push",)),
            (lambda git: git.push("origin", "main"), ("push", "origin", "main")),
            (
                lambda git: git.push("origin", "feature", set_upstream=True),
                ("push", "--set-upstream", "origin", "feature"),
            ),
            (lambda git: git.pull(), ("pull",)),
            (lambda git: git.pull("origin", "feature"), ("pull", "origin", "feature")),
            (lambda git: git.fetch(), ("fetch",)),
            (lambda git: git.fetch(all_remotes=True), ("fetch", "--all")),
            (lambda git: git.fetch("origin", "develop"), ("fetch", "origin", "develop")),
            (lambda git: git.merge("origin/main"), ("merge", "origin/main")),
            (lambda git: git.merge("develop", MergeStrategy.THEIRS), ("merge", "-X", "theirs", "develop")),
            (lambda git: git.abort_merge(), ("merge", "--abort")),
            (lambda git: git.reset("origin/main"), ("reset", "origin/main")),
            (lambda git: git.reset("HEAD", hard=True), ("reset", "--hard", "HEAD")),
            (lambda git: git.stash_push(), ("stash",)),
            (lambda git: git.stash_apply(), ("stash", "apply")),
            (lambda git: git.stash_clear(), ("stash", "clear")),
            (lambda git: git.checkout("main"), ("checkout", "main")),
            (lambda git: git.checkout_new("feature-x"), ("checkout", "-b", "feature-x")),
            (
                lambda git: git.checkout_new("topic", "origin/topic"),
                ("checkout", "-b", "topic", "origin/topic"),
            ),
        ],
    )
    @patch("githelper.git.operations._run_git")
    def test_argv(self, mock_git, call, expected):
        call(GitBackend(REPO))
        mock_git.assert_called_once_with(*expected, cwd=REPO, capture_output=True)

    @patch("githelper.git.operations._run_git")
    def test_stream_does_not_capture(self, mock_git):
        GitBackend(REPO, stream=True).pull()
        mock_git.assert_called_once_with("pull", cwd=REPO, capture_output=False)

    @patch("githelper.git.operations._run_git")
    def test_failure_propagates(self, mock_git):
        mock_git.side_effect = ExternalToolFailure("Git command failed: git push", 1, "rejected")
        with pytest.raises(ExternalToolFailure, match="git push"):
            GitBackend(REPO).push()


class TestGitBackendIntegration:
    """Round trip against a real repository (requires git)."""

    @pytest.fixture
    def git_repo(self, temp_dir: Path) -> Path:
        subprocess.run(["git", "init", "-q", "-b", "main"], cwd=temp_dir, check=True)
        subprocess.run(["git", "config", "user.email", "test@example.com"], cwd=temp_dir, check=True)
        subprocess.run(["git", "config", "user.name", "Test"], cwd=temp_dir, check=True)
        return temp_dir

    @pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
    def test_commit_and_list(self, git_repo):
        git = GitBackend(git_repo)
        (git_repo / "app.py").write_text("v1\n")
        git.stage_all()
        git.commit("First")
        (git_repo / "app.py").write_text("v2\n")
        git.stage_all()
        git.commit("Second")

        entries = git.log_oneline(20)

        assert git.current_branch() == "main"
        assert [entry.split(" ", 1)[1] for entry in entries] == ["Second", "First"]
        assert git.local_branch_exists("main") is True
        assert git.local_branch_exists("nope") is False

    @pytest.mark.skipif(shutil.which("git") is None, reason="git not installed")
    def test_stash_clear(self, git_repo):
        git = GitBackend(git_repo)
        app = git_repo / "app.py"
        app.write_text("v1\n")
        git.stage_all()
        git.commit("First")
        app.write_text("first\n")
        git.stash_push()
        app.write_text("second\n")
        git.stash_push()
        app.write_text("uncommitted\n")
        (git_repo / "scratch.txt").write_text("notes\n")
        assert len(git.stash_list()) == 2

        CommandDispatcher(git).stash(StashMode.CLEAR)

        status = subprocess.run(
            ["git", "status", "--porcelain"], cwd=git_repo, capture_output=True, text=True, check=True
        )
        assert git.stash_list() == []
        assert app.read_text() == "v1\n"
        assert status.stdout == "?? scratch.txt\n"
