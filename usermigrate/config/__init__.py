# usermigrate Configuration Module
# Handles YAML-based configuration loading, validation, and defaults

from usermigrate.config.defaults import DEFAULT_CONFIG, default_exclusions_text, generate_default_config
from usermigrate.config.loader import (
    ensure_config_exists,
    get_config_path,
    load_config,
    validate_config_file,
    write_default_excludes,
)
from usermigrate.config.schema import (
    MigrateConfig,
    MirrorBackend,
    OutputConfig,
    OwnershipConfig,
    RsyncConfig,
    VerifyConfig,
)

__all__ = [
    # Schema
    "MigrateConfig",
    "MirrorBackend",
    "RsyncConfig",
    "OwnershipConfig",
    "VerifyConfig",
    "OutputConfig",
    # Loader
    "load_config",
    "get_config_path",
    "ensure_config_exists",
    "validate_config_file",
    "write_default_excludes",
    # Defaults
    "DEFAULT_CONFIG",
    "default_exclusions_text",
    "generate_default_config",
]
