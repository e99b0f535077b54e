# git-helper Default Configuration
# Full default configuration as Python dict and YAML generator

from typing import Any

import yaml

DEFAULT_CONFIG: dict[str, Any] = {
    "git": {
        "remote": "origin",
        "default_branch": "main",
        "rollback_depth": 20,
    },
    "output": {
        "verbose": False,
        "colored": True,
    },
}

_HEADER = """\
# git-helper configuration
#
# git.remote          remote used for fetch/pull/push and origin/<branch> refs
# git.default_branch  target of git-merge and git-pull-request
# git.rollback_depth  commits listed by git-rollback --list
# output.verbose      show extra step messages
# output.colored      colored terminal output

"""


def generate_default_config() -> str:
    """
    Generate the default configuration file content.

    Returns:
        YAML string with a commented header.
    """
    body = yaml.dump(DEFAULT_CONFIG, default_flow_style=False, sort_keys=False, allow_unicode=True)
    return _HEADER + body
