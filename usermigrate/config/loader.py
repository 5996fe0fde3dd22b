# usermigrate Configuration Loader
# Load, validate, and create YAML configuration files

import os
from pathlib import Path
from typing import Optional

import yaml
from pydantic import ValidationError

from usermigrate.config.defaults import DEFAULT_CONFIG, default_exclusions_text, generate_default_config
from usermigrate.config.schema import MigrateConfig
from usermigrate.errors import ConfigMissing


def get_config_dir() -> Path:
    """Get the usermigrate configuration directory."""
    return Path.home() / ".config" / "usermigrate"


def get_config_path() -> Path:
    """Get the path to the configuration file."""
    # Allow override via environment variable
    env_path = os.environ.get("USERMIGRATE_CONFIG")
    if env_path:
        return Path(env_path).expanduser()
    return get_config_dir() / "config.yaml"


def load_config(config_path: Optional[Path] = None) -> MigrateConfig:
    """
    Load configuration from YAML file.

    A missing default config file yields the built-in defaults; a missing
    file that was asked for explicitly is an error.

    Args:
        config_path: Optional path to config file. Uses default if not provided.

    Returns:
        MigrateConfig: Validated configuration object.

    Raises:
        ConfigMissing: If an explicitly given config file doesn't exist.
        ValidationError: If config file is invalid.
    """
    explicit = config_path is not None
    if config_path is None:
        config_path = get_config_path()

    if not config_path.exists():
        if explicit:
            raise ConfigMissing(config_path, "configuration file")
        return MigrateConfig.model_validate(DEFAULT_CONFIG)

    with open(config_path, encoding="utf-8") as f:
        data = yaml.safe_load(f)

    if data is None:
        data = {}

    if not isinstance(data, dict):
        return MigrateConfig.model_validate(data)

    return MigrateConfig.model_validate(_merge_with_defaults(data))


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


def write_default_excludes(path: Path, *, overwrite: bool = False) -> bool:
    """
    Write the default exclusion pattern file.

    Args:
        path: Target file.
        overwrite: Replace an existing file.

    Returns:
        True if the file was written.
    """
    if path.exists() and not overwrite:
        return False

    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(default_exclusions_text(), encoding="utf-8")
    return True


def validate_config_file(config_path: Optional[Path] = None) -> tuple[bool, list[str]]:
    """
    Validate a configuration file without using it.

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

    errors: list[str] = []
    try:
        MigrateConfig.model_validate(_merge_with_defaults(data))
    except ValidationError as e:
        for error in e.errors():
            loc = " -> ".join(str(part) for part in error["loc"])
            errors.append(f"{loc}: {error['msg']}")

    return len(errors) == 0, errors


def _merge_with_defaults(data: dict) -> dict:
    """Merge loaded data with default values for missing keys."""
    result = dict(DEFAULT_CONFIG)

    for key, value in data.items():
        default = DEFAULT_CONFIG.get(key)
        if isinstance(default, dict) and isinstance(value, dict):
            result[key] = {**default, **value}
        else:
            result[key] = value

    return result
