# git-helper Configuration Schema
# Pydantic models for YAML configuration validation

from pydantic import BaseModel, Field, field_validator


class GitSettings(BaseModel):
    """Defaults used when composing git invocations."""

    remote: str = Field(default="origin", description="Remote used for fetch, pull, push and origin/<branch> refs")
    default_branch: str = Field(default="main", description="Target branch of merge and pull-request")
    rollback_depth: int = Field(default=20, ge=1, description="Number of commits listed by rollback")

    @field_validator("remote", "default_branch")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Reject empty names."""
        v = v.strip()
        if not v:
            raise ValueError("must not be empty")
        return v


class OutputConfig(BaseModel):
    """Output configuration."""

    verbose: bool = Field(default=False, description="Enable verbose output")
    colored: bool = Field(default=True, description="Enable colored output")


class HelperConfig(BaseModel):
    """Root configuration model for git-helper."""

    git: GitSettings = Field(default_factory=GitSettings, description="Git settings")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")
