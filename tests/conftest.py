# git-helper Test Fixtures
# Pytest fixtures for git-helper tests

import tempfile
from collections.abc import Generator
from io import StringIO
from pathlib import Path

import pytest
import yaml
from rich.console import Console as RichConsole

from githelper.config.loader import CONFIG_ENV_VAR
from githelper.dispatcher import CommandDispatcher
from githelper.git.memory import InMemoryGit
from githelper.logger import StepLogger


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Create a temporary directory for tests."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def temp_home(temp_dir: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Create a temporary home directory."""
    home = temp_dir / "home"
    home.mkdir()
    monkeypatch.setenv("HOME", str(home))
    return home


@pytest.fixture(autouse=True)
def config_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Path:
    """Point every test at its own configuration file with colors disabled."""
    config_path = tmp_path / "git-helper" / "config.yaml"
    config_path.parent.mkdir(parents=True)
    with open(config_path, "w", encoding="utf-8") as f:
        yaml.dump({"output": {"colored": False}}, f, default_flow_style=False)
    monkeypatch.setenv(CONFIG_ENV_VAR, str(config_path))
    return config_path


@pytest.fixture
def repo() -> InMemoryGit:
    """A repository on main with one commit, in sync with origin."""
    return InMemoryGit(files={"app.py": "v1\n"})


@pytest.fixture
def feature_repo(repo: InMemoryGit) -> InMemoryGit:
    """A repository checked out on a pushed feature branch one commit ahead of main."""
    repo.checkout_new("feature")
    repo.commit_on("feature", "Add feature", {"feature.py": "print('hi')\n"})
    repo.push("origin", "feature", set_upstream=True)
    repo.calls.clear()
    return repo


@pytest.fixture
def log_output() -> StringIO:
    """Buffer receiving the dispatcher's step messages."""
    return StringIO()


@pytest.fixture
def dispatcher(repo: InMemoryGit, log_output: StringIO) -> CommandDispatcher:
    """Dispatcher over the in-memory repository."""
    console = RichConsole(file=log_output, no_color=True, highlight=False, soft_wrap=True)
    return CommandDispatcher(repo, logger=StepLogger(console))
