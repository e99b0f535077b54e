"""Click-based CLI for git-helper.

Every command is registered on the ``git-helper`` group and is also exposed
as its own console script (``git-commit``, ``git-push``, ...).

Commands run against the ``git`` executable. Programs embedding them can
supply any :class:`~githelper.git.backend.VcsBackend` instead by passing
``obj={BACKEND_KEY: backend}`` to the command (``cli.main``, or click's
``CliRunner.invoke``).
"""

from __future__ import annotations

import functools
from pathlib import Path
from typing import Optional

import click
import yaml
from pydantic import ValidationError

from githelper import __version__
from githelper.config import (
    HelperConfig,
    ensure_config_exists,
    get_config_path,
    load_config,
    validate_config_file,
)
from githelper.dispatcher import CommandDispatcher
from githelper.errors import ExternalToolFailure, HelperError, UsageError
from githelper.git import GitBackend, VcsBackend
from githelper.logger import StepLogger
from githelper.output import Console, create_console

CONTEXT_SETTINGS = {"help_option_names": ["-h", "--help"]}

_CONFIG_KEY = "githelper.config"
_CONSOLE_KEY = "githelper.console"

# ctx.obj key holding a VcsBackend to use instead of GitBackend
BACKEND_KEY = "backend"


def _config() -> HelperConfig:
    """Load configuration once per invocation."""
    ctx = click.get_current_context()
    if _CONFIG_KEY not in ctx.meta:
        ctx.meta[_CONFIG_KEY] = load_config()
    return ctx.meta[_CONFIG_KEY]


def _output() -> Console:
    """Console configured from the loaded configuration."""
    ctx = click.get_current_context()
    if _CONSOLE_KEY not in ctx.meta:
        config = _config()
        ctx.meta[_CONSOLE_KEY] = create_console(verbose=config.output.verbose, colored=config.output.colored)
    return ctx.meta[_CONSOLE_KEY]


def _dispatcher(repo: Optional[Path]) -> CommandDispatcher:
    """Build a dispatcher for the repository at ``repo``.

    A backend passed in ``ctx.obj[BACKEND_KEY]`` takes precedence over the
    real git executable.
    """
    ctx = click.get_current_context()
    config = _config()
    console = _output()

    backend = ctx.obj.get(BACKEND_KEY) if isinstance(ctx.obj, dict) else None
    if backend is None:
        backend = GitBackend(repo, stream=True)
    elif not isinstance(backend, VcsBackend):
        raise TypeError(f"{BACKEND_KEY!r} must be a VcsBackend, got {type(backend).__name__}")

    logger = StepLogger(console.rich, verbose=config.output.verbose)
    return CommandDispatcher(backend, settings=config.git, logger=logger)


def handle_errors(func):
    """Turn git-helper errors into messages and exit codes."""

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        ctx = click.get_current_context()
        try:
            return func(*args, **kwargs)
        except UsageError:
            click.echo(ctx.get_help())
            ctx.exit(0)
        except ExternalToolFailure as e:
            _output().print_error(e.message, e.stderr)
            ctx.exit(e.exit_code)
        except HelperError as e:
            _output().print_error(e.message)
            ctx.exit(e.exit_code)
        except (yaml.YAMLError, ValidationError) as e:
            click.echo(f"Error: Invalid configuration in {get_config_path()}:\n{e}", err=True)
            ctx.exit(1)

    return wrapper


def repo_option(func):
    """Add ``-C/--repo`` to a command."""
    return click.option(
        "-C",
        "--repo",
        type=click.Path(exists=True, file_okay=False, path_type=Path),
        default=None,
        help="Run as if started in this repository (default: current directory)",
    )(func)


# ============================================================================
# Commit and stash
# ============================================================================


@click.command("stage-commit", context_settings=CONTEXT_SETTINGS)
@click.argument("message", required=False)
@repo_option
@handle_errors
def stage_commit(message: Optional[str], repo: Optional[Path]) -> None:
    """Commit all staged and unstaged changes with MESSAGE.

    \b
    Example:
        git-commit "Fix bug in module"
    """
    _dispatcher(repo).stage_commit(message)


@click.command("stage-commit-push", context_settings=CONTEXT_SETTINGS)
@click.argument("message", required=False)
@repo_option
@handle_errors
def stage_commit_push(message: Optional[str], repo: Optional[Path]) -> None:
    """Commit all changes with MESSAGE and push to the remote.

    The push is skipped when the commit fails.

    \b
    Example:
        git-push "Add new feature"
    """
    _dispatcher(repo).stage_commit_push(message)


@click.command("stash", context_settings=CONTEXT_SETTINGS)
@click.option("--clear", "mode", flag_value="clear", help="Clear all stashes and hard reset the working tree.")
@click.option("--apply", "mode", flag_value="apply", help="Apply the most recent stash.")
@click.option("--update", "mode", flag_value="update", help="Apply the latest stash, then restash everything.")
@click.option("--list", "mode", flag_value="list", help="Show the list of all stashes.")
@repo_option
@handle_errors
def stash(mode: Optional[str], repo: Optional[Path]) -> None:
    """Stash current changes, or manage existing stashes.

    Without options, stashes current changes.

    \b
    Example:
        git-stash --list
    """
    entries = _dispatcher(repo).stash(mode)
    if entries is not None:
        _output().print_stash_list(entries)


# ============================================================================
# Merging
# ============================================================================


@click.command("merge", context_settings=CONTEXT_SETTINGS)
@click.argument("branch_arg", metavar="[BRANCH]", required=False)
@click.option("--branch", "-b", "branch", help="Branch to merge from (default: main).")
@click.option("--abort", is_flag=True, help="Abort the current merge (if one is in progress).")
@repo_option
@handle_errors
def merge(branch_arg: Optional[str], branch: Optional[str], abort: bool, repo: Optional[Path]) -> None:
    """Pull, fetch and merge origin/BRANCH into the current branch.

    \b
    Examples:
        git-merge                  # Merges origin/main into current branch
        git-merge --branch develop # Merges origin/develop
        git-merge --abort          # Aborts the current merge
    """
    _dispatcher(repo).merge(branch or branch_arg, abort=abort)


@click.command("pull-request", context_settings=CONTEXT_SETTINGS)
@click.option("--branch", "-b", "target", help="Target branch instead of 'main'.")
@click.option(
    "--force",
    "-f",
    "strategy",
    metavar="ours|theirs",
    help="Resolve all conflicts by keeping 'ours' or 'theirs'.",
)
@repo_option
@handle_errors
def pull_request(target: Optional[str], strategy: Optional[str], repo: Optional[Path]) -> None:
    """Merge the current branch into the target branch (default: main) and push it.

    If a merge conflict occurs without --force, the target branch is reset
    to match origin/<branch> and you are returned to your branch.

    \b
    Examples:
        git-pull-request                  # Merges current branch into main
        git-pull-request --branch develop # Merges current branch into develop
        git-pull-request --force theirs   # Merges with all changes from incoming branch
    """
    _dispatcher(repo).pull_request(target, strategy)


@click.command("merge-force", context_settings=CONTEXT_SETTINGS)
@click.argument("branch", required=False)
@click.argument("strategy", metavar="ours|theirs", required=False)
@repo_option
@handle_errors
def merge_force(branch: Optional[str], strategy: Optional[str], repo: Optional[Path]) -> None:
    """Merge BRANCH into the current branch, accepting all 'ours' or 'theirs' changes.

    \b
    ours    Keep all current branch changes (ignore incoming).
    theirs  Keep all incoming branch changes (ignore current).

    \b
    Example:
        git-merge-force develop ours
    """
    _dispatcher(repo).merge_force(branch, strategy)


# ============================================================================
# Branches, resets and history
# ============================================================================


@click.command("branch-checkout-or-create", context_settings=CONTEXT_SETTINGS)
@click.argument("branch", required=False)
@repo_option
@handle_errors
def branch_checkout_or_create(branch: Optional[str], repo: Optional[Path]) -> None:
    """Check out BRANCH if it exists locally or remotely, otherwise create it.

    A new branch is pushed to origin with upstream tracking.

    \b
    Example:
        git-branch feature-x
    """
    _dispatcher(repo).branch_checkout_or_create(branch)


@click.command("reset", context_settings=CONTEXT_SETTINGS)
@click.argument("branch", required=False)
@click.option("--origin", is_flag=True, help="Reset against remote (origin/<branch>).")
@click.option("--hard", is_flag=True, help="Force hard reset (default is soft reset).")
@repo_option
@handle_errors
def reset(branch: Optional[str], origin: bool, hard: bool, repo: Optional[Path]) -> None:
    """Reset the current branch to BRANCH (default: current branch).

    \b
    Examples:
        git-reset --origin --hard main
        git-reset --hard            # Hard reset to current branch (local)
        git-reset --origin develop  # Soft reset to origin/develop
    """
    _dispatcher(repo).reset(branch, origin=origin, hard=hard)


@click.command("rollback", context_settings=CONTEXT_SETTINGS)
@click.option("--list", "list_commits", is_flag=True, help="List recent commits with index numbers.")
@click.option(
    "--commit",
    "commit_index",
    is_flag=False,
    flag_value="",
    default=None,
    metavar="INDEX",
    help="Hard reset to the commit with the given index from --list.",
)
@repo_option
@handle_errors
def rollback(list_commits: bool, commit_index: Optional[str], repo: Optional[Path]) -> None:
    """List recent commits, or roll back (hard reset) to one of them.

    \b
    Examples:
        git-rollback --list
        git-rollback --commit 2
    """
    if list_commits:
        dispatcher = _dispatcher(repo)
        dispatcher.logger.info("Listing recent commits...")
        _output().print_commit_list(dispatcher.rollback_list())
    elif commit_index is not None:
        _dispatcher(repo).rollback_commit(commit_index)
    else:
        raise UsageError("Choose --list or --commit.")


@click.command("log", context_settings=CONTEXT_SETTINGS)
@click.option("--max-count", "-n", "count", type=click.IntRange(min=1), default=None, help="Limit the number of commits.")
@repo_option
@handle_errors
def log(count: Optional[int], repo: Optional[Path]) -> None:
    """Show a decorated graph of all branches."""
    graph = _dispatcher(repo).log(count)
    if graph:
        _output().print_text(graph)


# ============================================================================
# Help
# ============================================================================


# Console script name -> command
OPERATIONS: dict[str, click.Command] = {
    "git-commit": stage_commit,
    "git-push": stage_commit_push,
    "git-stash": stash,
    "git-merge": merge,
    "git-pull-request": pull_request,
    "git-branch": branch_checkout_or_create,
    "git-reset": reset,
    "git-merge-force": merge_force,
    "git-rollback": rollback,
    "git-log": log,
}


def _help_text(command: click.Command) -> str:
    """Command help without click's no-rewrap markers."""
    return "\n".join(line for line in (command.help or "").splitlines() if line.strip() != "\b")


@click.command("help", context_settings=CONTEXT_SETTINGS)
@click.option("--index", "-i", "--list", "index", is_flag=True, help="Only list the available commands.")
@handle_errors
def help_command(index: bool) -> None:
    """Show help for all git helper commands."""
    console = _output()

    if index:
        console.print_operation_index(
            {name: command.get_short_help_str(limit=70) for name, command in OPERATIONS.items()}
        )
        return

    console.print("[bold]Custom Git Helper Commands[/bold]")
    for name, command in OPERATIONS.items():
        ctx = click.Context(command, info_name=name)
        usage = command.get_usage(ctx).replace("Usage: ", "", 1)
        console.print_operation_help(name, usage, _help_text(command))


# ============================================================================
# Configuration
# ============================================================================


@click.group("config", context_settings=CONTEXT_SETTINGS)
def config_group() -> None:
    """Configuration management.

    \b
    Settings (~/.config/git-helper/config.yaml, or $GIT_HELPER_CONFIG):
        git.remote          remote for fetch/pull/push (default: origin)
        git.default_branch  target of merge and pull-request (default: main)
        git.rollback_depth  commits listed by rollback (default: 20)
        output.verbose      extra step messages
        output.colored      colored output
    """
    pass


@config_group.command("init")
@handle_errors
def config_init() -> None:
    """Create the configuration file with default values."""
    config_path, created = ensure_config_exists()
    console = _output()
    if created:
        console.print_success(f"Created configuration: {config_path}")
    else:
        console.print_info(f"Configuration already exists: {config_path}")


@config_group.command("show")
@handle_errors
def config_show() -> None:
    """Show the configuration file location and effective values."""
    config_path = get_config_path()
    config = _config()
    console = _output()

    console.print_config_summary(str(config_path), config_path.exists())
    data = config.model_dump(mode="json")
    console.print_text(yaml.dump(data, default_flow_style=False, sort_keys=False).rstrip())


@config_group.command("validate")
@click.pass_context
def config_validate(ctx: click.Context) -> None:
    """Validate the configuration file."""
    is_valid, errors = validate_config_file()
    console = create_console()

    if is_valid:
        console.print_success(f"Configuration is valid: {get_config_path()}")
        return

    console.print_error(f"Configuration has {len(errors)} errors:")
    for error in errors:
        console.print_text(f"  - {error}")
    ctx.exit(1)


# ============================================================================
# Group
# ============================================================================


@click.group(context_settings=CONTEXT_SETTINGS)
@click.version_option(version=__version__, prog_name="git-helper")
def cli() -> None:
    """git-helper - convenience commands around git.

    \b
    Each command is also installed as its own script:
        git-commit, git-push, git-stash, git-merge, git-pull-request,
        git-branch, git-reset, git-merge-force, git-rollback, git-log,
        git-help
    """
    pass


for _command in (
    stage_commit,
    stage_commit_push,
    stash,
    merge,
    pull_request,
    branch_checkout_or_create,
    reset,
    merge_force,
    rollback,
    log,
    help_command,
    config_group,
):
    cli.add_command(_command)


if __name__ == "__main__":
    cli()
