# git-helper Output Module
# Rich console output

from githelper.output.console import Console, create_console

__all__ = [
    "Console",
    "create_console",
]
