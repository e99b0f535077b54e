# git-helper Configuration Loader
# Load, create and validate YAML configuration files

import copy
import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from githelper.config.defaults import DEFAULT_CONFIG, generate_default_config
from githelper.config.schema import HelperConfig

CONFIG_ENV_VAR = "GIT_HELPER_CONFIG"


def get_config_dir() -> Path:
    """Get the git-helper configuration directory."""
    return Path.home() / ".config" / "git-helper"


def get_config_path() -> Path:
    """Get the path to the configuration file."""
    # Allow override via environment variable
    env_path = os.environ.get(CONFIG_ENV_VAR)
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> HelperConfig:
    """
    Load configuration from YAML file.

    A missing file at the default location yields the defaults. A path
    passed explicitly must exist.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        HelperConfig: Validated configuration object.

    Raises:
        FileNotFoundError: If an explicit config file doesn't exist.
        yaml.YAMLError: If the file is not valid YAML.
        ValidationError: If config file is invalid.
    """
    if config_path is None:
        config_path = get_config_path()
        if not config_path.exists():
            return HelperConfig.model_validate(DEFAULT_CONFIG)

    if not config_path.exists():
        raise FileNotFoundError(f"Configuration file not found: {config_path}\nRun 'git-helper config init' to create one.")

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}

    if not isinstance(data, dict):
        # Let pydantic report the type error
        return HelperConfig.model_validate(data)

    return HelperConfig.model_validate(_merge_with_defaults(data))


def ensure_config_exists(config_path: Optional[Path] = None) -> tuple[Path, bool]:
    """
    Ensure configuration file exists, creating default if needed.

    Returns:
        Tuple of (config_path, was_created).
    """
    if config_path is None:
        config_path = get_config_path()

    if config_path.exists():
        return config_path, False

    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(generate_default_config(), encoding="utf-8")
    return config_path, True


def validate_config_file(config_path: Optional[Path] = None) -> tuple[bool, list[str]]:
    """
    Validate a configuration file.

    Args:
        config_path: Path to config file to validate.

    Returns:
        Tuple of (is_valid, error_messages).
    """
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        return False, [f"Configuration file not found: {config_path}"]

    try:
        with open(config_path, encoding="utf-8") as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        return False, [f"Invalid YAML syntax: {e}"]

    if data is None:
        return False, ["Configuration file is empty"]

    if not isinstance(data, dict):
        return False, ["Configuration must be a mapping"]

    try:
        HelperConfig.model_validate(data)
    except ValidationError as e:
        errors = []
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")
        return False, errors

    return True, []


def _merge_with_defaults(data: dict) -> dict:
    """Merge loaded data with default values for missing keys."""
    result = copy.deepcopy(DEFAULT_CONFIG)

    for section in ("git", "output"):
        if isinstance(data.get(section), dict):
            result[section] = {**result[section], **data[section]}
        elif section in data:
            result[section] = data[section]

    return result
