"""
Constants for the Trellis application.

Note: These constants serve as default fallback values.
Actual values are loaded from .trellis/config.json at runtime via ConfigManager.
"""
from pathlib import Path
from typing import Any, Dict, Optional
import json

from trellis.exceptions import ConfigurationError

# =============================================================================
# Default Fallback Values
# These are used if config.json doesn't exist or doesn't specify a value.
# =============================================================================

DEFAULT_TRELLIS_DIR = ".trellis"

# Table indentation: indent = depth * unit + base
DEFAULT_INDENT_UNIT = 2
DEFAULT_INDENT_BASE = 0

# Work item defaults
DEFAULT_TITLE_MAX_LENGTH = 200

# Logging defaults
DEFAULT_LOG_LEVEL = "INFO"

# Validation error messages (not configurable)
VALIDATION_TITLE_REQUIRED = "Title is required for all work items."
VALIDATION_HYPERLINK_FORMAT = "Hyperlink must be a valid URL starting with http:// or https://"
VALIDATION_VERSION_FORMAT = "Version must follow semantic versioning format (e.g., 1.0.0)"


# =============================================================================
# Config Loader
# Load values from .trellis/config.json at runtime.
# =============================================================================

_config_manager_instance: Optional['ConfigManager'] = None


class ConfigManager:
    """
    Runtime access to .trellis/config.json, validated against ConfigFile.

    The file is read once and cached. A missing file means all defaults; a
    file that is not valid JSON or holds invalid values raises
    ConfigurationError on first access, the same as StorageManager.load_config.

    Usage:
        config = ConfigManager(trellis_dir=Path(".trellis"))
        unit = config.get_int('indent_unit', DEFAULT_INDENT_UNIT)
    """

    def __init__(self, config_path: Optional[Path] = None, trellis_dir: Optional[Path] = None) -> None:
        """
        Initialize ConfigManager.

        Args:
            config_path: Direct path to config.json file. Takes precedence over trellis_dir.
            trellis_dir: Path to .trellis/ directory. Config path will be trellis_dir/config.json.
        """
        self._settings: Optional[Dict[str, Any]] = None

        if config_path is not None:
            self._config_path = config_path
        elif trellis_dir is not None:
            self._config_path = trellis_dir / "config.json"
        else:
            self._config_path = Path(DEFAULT_TRELLIS_DIR) / "config.json"

    def _load_settings(self) -> Dict[str, Any]:
        """Read and validate config.json, caching the validated values.

        Raises:
            ConfigurationError: If the file cannot be read, is not JSON, or
                holds values ConfigFile rejects.
        """
        if self._settings is not None:
            return self._settings

        # Imported here: trellis.models.files reads its defaults from this module.
        from pydantic import ValidationError
        from trellis.models.files import ConfigFile

        if not self._config_path.exists():
            self._settings = ConfigFile().model_dump()
            return self._settings

        try:
            with open(self._config_path, "r") as f:
                raw = json.load(f)
            self._settings = ConfigFile.model_validate(raw).model_dump()
        except (json.JSONDecodeError, OSError, ValidationError) as e:
            raise ConfigurationError(f"Invalid config.json: {e}")
        return self._settings

    def get(self, key: str, default: Any = None) -> Any:
        """Get a validated config value, or default for unknown keys."""
        return self._load_settings().get(key, default)

    def get_int(self, key: str, default: int) -> int:
        """Get an integer config value."""
        value = self.get(key, default)
        return default if value is None else int(value)

    def get_str(self, key: str, default: str) -> str:
        """Get a string config value."""
        value = self.get(key, default)
        return default if value is None else str(value)

    def reload(self) -> Dict[str, Any]:
        """Force reload of config from disk."""
        self._settings = None
        return self._load_settings()

    @property
    def config_path(self) -> Path:
        """Get the config file path."""
        return self._config_path


def get_config_manager(reset: bool = False, trellis_dir: Optional[Path] = None) -> ConfigManager:
    """
    Get the singleton ConfigManager instance.

    Args:
        reset: If True, reset the singleton and create a new instance.
        trellis_dir: Directory to read config.json from when (re)creating the instance.

    Returns:
        ConfigManager singleton instance.
    """
    global _config_manager_instance
    if _config_manager_instance is None or reset:
        _config_manager_instance = ConfigManager(trellis_dir=trellis_dir)
    return _config_manager_instance


def reset_config_manager() -> None:
    """Reset the singleton ConfigManager instance (useful for testing)."""
    global _config_manager_instance
    _config_manager_instance = None


# Convenience functions for common config access
def get_indent_unit() -> int:
    """Get table indent unit from config or default."""
    return get_config_manager().get_int('indent_unit', DEFAULT_INDENT_UNIT)


def get_indent_base() -> int:
    """Get table indent base from config or default."""
    return get_config_manager().get_int('indent_base', DEFAULT_INDENT_BASE)


def get_title_max_length() -> int:
    """Get work item title max length from config or default."""
    return get_config_manager().get_int('title_max_length', DEFAULT_TITLE_MAX_LENGTH)


def get_log_level() -> str:
    """Get log level name from config or default."""
    return get_config_manager().get_str('log_level', DEFAULT_LOG_LEVEL).upper()
