# usermigrate Configuration Schema
# Pydantic models for YAML configuration validation

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, Field, field_validator


class MirrorBackend(str, Enum):
    """Implementation used to copy and compare directory trees."""

    RSYNC = "rsync"
    NATIVE = "native"


def _expand_optional(v: str | None) -> str | None:
    if v is None:
        return None
    return str(Path(v).expanduser())


class RsyncConfig(BaseModel):
    """Settings for the external rsync binary."""

    binary: str | None = Field(default=None, description="Path to rsync. None = auto-detect")
    partial_dir: str = Field(default=".rsync-partial", description="Staging directory for partial transfers")
    extra_args: list[str] = Field(default_factory=list, description="Additional rsync arguments for the copy phase")

    @field_validator("binary")
    @classmethod
    def expand_binary(cls, v: str | None) -> str | None:
        """Expand ~ in path."""
        return _expand_optional(v)

    @field_validator("partial_dir")
    @classmethod
    def check_partial_dir(cls, v: str) -> str:
        """Partial dir must be a single relative path component."""
        if not v or "/" in v.strip("/") or v.startswith("/"):
            raise ValueError("partial_dir must be a single directory name")
        return v.strip("/")


class OwnershipConfig(BaseModel):
    """Ownership fix applied after a real copy."""

    group: str | None = Field(default=None, description="Group for migrated files. None = platform default")
    use_sudo: bool = Field(default=True, description="Escalate with sudo when not running as root")
    chown: str = Field(default="chown", description="chown executable")
    sudo: str = Field(default="sudo", description="sudo executable")


class VerifyConfig(BaseModel):
    """Checksum verification pass."""

    enabled: bool = Field(default=True, description="Run verification after copy")
    report_extraneous: bool = Field(
        default=False,
        description="Also report files present only in the destination",
    )


class OutputConfig(BaseModel):
    """Output settings."""

    verbose: bool = Field(default=False, description="Echo copy tool output to the console")
    colored: bool = Field(default=True, description="Enable colored output")


class MigrateConfig(BaseModel):
    """Root configuration model for usermigrate."""

    homes_root: str | None = Field(default=None, description="Parent of home directories. None = platform default")
    exclude_file: str = Field(default="exclude.txt", description="Exclusion pattern file")
    log_dir: str | None = Field(default=None, description="Run log directory. None = <source home>/migration_logs")
    backend: MirrorBackend = Field(default=MirrorBackend.RSYNC, description="Copy backend")
    rsync: RsyncConfig = Field(default_factory=RsyncConfig, description="rsync settings")
    ownership: OwnershipConfig = Field(default_factory=OwnershipConfig, description="Ownership settings")
    verify: VerifyConfig = Field(default_factory=VerifyConfig, description="Verification settings")
    output: OutputConfig = Field(default_factory=OutputConfig, description="Output settings")

    @field_validator("homes_root", "log_dir")
    @classmethod
    def expand_optional_paths(cls, v: str | None) -> str | None:
        """Expand ~ in optional paths."""
        return _expand_optional(v)

    @field_validator("exclude_file")
    @classmethod
    def expand_exclude_file(cls, v: str) -> str:
        """Expand ~ in path."""
        return str(Path(v).expanduser())
