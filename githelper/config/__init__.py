# git-helper Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from githelper.config.defaults import DEFAULT_CONFIG, generate_default_config
from githelper.config.loader import (
    CONFIG_ENV_VAR,
    ensure_config_exists,
    get_config_path,
    load_config,
    validate_config_file,
)
from githelper.config.schema import GitSettings, HelperConfig, OutputConfig

__all__ = [
    # Schema
    "HelperConfig",
    "GitSettings",
    "OutputConfig",
    # Loader
    "CONFIG_ENV_VAR",
    "load_config",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    # Defaults
    "DEFAULT_CONFIG",
    "generate_default_config",
]
