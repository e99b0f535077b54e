# git-helper Config Tests
# Tests for configuration loading and validation

from pathlib import Path

import pytest
import yaml
from pydantic import ValidationError

from githelper.config.defaults import DEFAULT_CONFIG, generate_default_config
from githelper.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    validate_config_file,
)
from githelper.config.schema import GitSettings, HelperConfig


class TestHelperConfig:
    """Tests for HelperConfig schema."""

    def test_defaults(self):
        """Test default values."""
        config = HelperConfig()
        assert config.git.remote == "origin"
        assert config.git.default_branch == "main"
        assert config.git.rollback_depth == 20
        assert config.output.verbose is False
        assert config.output.colored is True

    def test_defaults_match_default_config(self):
        """Test the schema defaults and DEFAULT_CONFIG agree."""
        assert HelperConfig().model_dump() == DEFAULT_CONFIG

    def test_names_are_stripped(self):
        settings = GitSettings(remote=" upstream ", default_branch="develop\n")
        assert settings.remote == "upstream"
        assert settings.default_branch == "develop"

    @pytest.mark.parametrize("field", ["remote", "default_branch"])
    def test_blank_names_rejected(self, field):
        with pytest.raises(ValidationError):
            GitSettings(**{field: "  "})

    def test_rollback_depth_positive(self):
        with pytest.raises(ValidationError):
            GitSettings(rollback_depth=0)


class TestConfigLoader:
    """Tests for config loading."""

    def test_env_override(self, config_file: Path):
        assert get_config_path() == config_file

    def test_default_location(self, temp_home: Path, monkeypatch: pytest.MonkeyPatch):
        monkeypatch.delenv("GIT_HELPER_CONFIG")
        assert get_config_path() == temp_home / ".config" / "git-helper" / "config.yaml"

    def test_missing_default_file_uses_defaults(self, config_file: Path):
        config_file.unlink()
        config = load_config()
        assert config == HelperConfig()

    def test_missing_explicit_file(self, temp_dir: Path):
        with pytest.raises(FileNotFoundError, match="config init"):
            load_config(temp_dir / "nope.yaml")

    def test_partial_file_merges_defaults(self, temp_dir: Path):
        config_path = temp_dir / "config.yaml"
        config_path.write_text("git:\n  default_branch: develop\n")

        config = load_config(config_path)

        assert config.git.default_branch == "develop"
        assert config.git.remote == "origin"
        assert config.output.colored is True

    def test_empty_file(self, temp_dir: Path):
        config_path = temp_dir / "config.yaml"
        config_path.write_text("")
        assert load_config(config_path) == HelperConfig()

    def test_non_mapping_rejected(self, temp_dir: Path):
        config_path = temp_dir / "config.yaml"
        config_path.write_text("- just\n- a list\n")
        with pytest.raises(ValidationError):
            load_config(config_path)

    def test_invalid_yaml(self, temp_dir: Path):
        config_path = temp_dir / "config.yaml"
        config_path.write_text("git: [unclosed\n")
        with pytest.raises(yaml.YAMLError):
            load_config(config_path)

    def test_ensure_config_exists(self, temp_dir: Path):
        config_path = temp_dir / "git-helper" / "config.yaml"

        path, created = ensure_config_exists(config_path)
        assert created is True
        assert path == config_path

        _, created_again = ensure_config_exists(config_path)
        assert created_again is False


class TestValidateConfigFile:
    """Tests for validate_config_file."""

    def test_valid(self, temp_dir: Path):
        config_path = temp_dir / "config.yaml"
        config_path.write_text(generate_default_config())
        assert validate_config_file(config_path) == (True, [])

    def test_missing(self, temp_dir: Path):
        is_valid, errors = validate_config_file(temp_dir / "nope.yaml")
        assert is_valid is False
        assert "not found" in errors[0]

    def test_empty(self, temp_dir: Path):
        config_path = temp_dir / "config.yaml"
        config_path.write_text("")
        assert validate_config_file(config_path) == (False, ["Configuration file is empty"])

    def test_invalid_yaml(self, temp_dir: Path):
        config_path = temp_dir / "config.yaml"
        config_path.write_text("git: [unclosed\n")
        is_valid, errors = validate_config_file(config_path)
        assert is_valid is False
        assert errors[0].startswith("Invalid YAML syntax")

    def test_invalid_values(self, temp_dir: Path):
        config_path = temp_dir / "config.yaml"
        config_path.write_text("git:\n  rollback_depth: 0\n  remote: ''\n")
        is_valid, errors = validate_config_file(config_path)
        assert is_valid is False
        assert len(errors) == 2
        assert any(error.startswith("git -> remote") for error in errors)


class TestDefaults:
    """Tests for the generated default file."""

    def test_generate_default_config(self):
        content = generate_default_config()
        assert content.startswith("# git-helper configuration")
        assert yaml.safe_load(content) == DEFAULT_CONFIG
