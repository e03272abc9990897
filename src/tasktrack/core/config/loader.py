"""
Configuration loading with multi-layer merging.

Implements the configuration precedence chain:
    defaults < user config < project config < env vars

Env vars keep the names the deployment already uses (SMTP_HOST,
REMINDER_EMAIL, TIMEZONE, ...), so an existing .env file works unchanged.
"""

import json
import logging
import os
from pathlib import Path
from typing import Any

from dotenv import load_dotenv

from .models import TrackerConfig

logger = logging.getLogger(__name__)

# Global cache to avoid reloading config multiple times per process
_config_cache: TrackerConfig | None = None

# Simple string overrides: env var -> (section, key)
_STRING_ENV_OVERRIDES: dict[str, tuple[str, str]] = {
    "TASKTRACK_DB": ("database", "path"),
    "SMTP_HOST": ("mail", "host"),
    "SMTP_USER": ("mail", "user"),
    "SMTP_PASS": ("mail", "password"),
    "SMTP_FROM": ("mail", "sender"),
    "REMINDER_EMAIL": ("reminder", "recipient"),
    "REMINDER_TIME": ("reminder", "send_time"),
    "TIMEZONE": ("reminder", "timezone"),
}


def get_xdg_config_home() -> Path:
    """
    Get XDG config home directory.

    Returns:
        Path to config directory (defaults to ~/.config)
    """
    if xdg_home := os.environ.get("XDG_CONFIG_HOME"):
        return Path(xdg_home)
    return Path.home() / ".config"


def get_user_config_path() -> Path:
    """Path to ~/.config/tasktrack/config.json (or XDG equivalent)."""
    return get_xdg_config_home() / "tasktrack" / "config.json"


def get_project_config_path(cwd: Path | None = None) -> Path:
    """
    Get path to project configuration file.

    Args:
        cwd: Working directory to search from (defaults to current directory)

    Returns:
        Path to .tasktrack.json in the project root
    """
    if cwd is None:
        cwd = Path.cwd()
    return cwd / ".tasktrack.json"


def deep_merge(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """
    Deep merge two dictionaries.

    Values in `override` take precedence over values in `base`.
    Nested dicts are merged, not replaced.

    Example:
        >>> deep_merge({"a": 1, "b": {"x": 10}}, {"b": {"y": 30}})
        {'a': 1, 'b': {'x': 10, 'y': 30}}
    """
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def load_json_file(path: Path) -> dict[str, Any] | None:
    """
    Load a JSON file, returning None if it doesn't exist or is invalid.

    Args:
        path: Path to JSON file

    Returns:
        Parsed JSON as dict, or None if file doesn't exist or can't be parsed
    """
    if not path.exists():
        return None

    try:
        with path.open() as f:
            data = json.load(f)
            if isinstance(data, dict):
                return data
            return None
    except (json.JSONDecodeError, OSError) as e:
        logger.warning("Failed to parse config at %s: %s", path, e)
        return None


def _set(result: dict[str, Any], section: str, key: str, value: Any) -> None:
    if not isinstance(result.get(section), dict):
        result[section] = {}
    else:
        result[section] = dict(result[section])
    result[section][key] = value


def _is_truthy(value: str) -> bool:
    return value.strip().lower() not in ("false", "0", "no", "off", "")


def apply_env_overrides(config_dict: dict[str, Any]) -> dict[str, Any]:
    """
    Apply environment variable overrides to configuration.

    Env vars have the highest precedence and override all config files.

    Supported env vars:
        TASKTRACK_DB - overrides database.path
        SMTP_HOST, SMTP_PORT, SMTP_USER, SMTP_PASS, SMTP_FROM, SMTP_SECURE
            - override the mail section
        REMINDER_EMAIL - overrides reminder.recipient
        REMINDER_TIME - overrides reminder.send_time (HH:MM)
        TIMEZONE - overrides reminder.timezone
        TASKTRACK_SCHEDULER - overrides reminder.enabled

    Args:
        config_dict: Configuration dictionary to override

    Returns:
        Configuration dictionary with env var overrides applied
    """
    result = config_dict.copy()

    for env_name, (section, key) in _STRING_ENV_OVERRIDES.items():
        if value := os.environ.get(env_name):
            _set(result, section, key, value)

    if port_str := os.environ.get("SMTP_PORT"):
        try:
            _set(result, "mail", "port", int(port_str))
        except ValueError:
            logger.warning("Invalid SMTP_PORT value '%s', ignoring", port_str)

    if secure_str := os.environ.get("SMTP_SECURE"):
        _set(result, "mail", "use_tls", _is_truthy(secure_str))

    if scheduler_str := os.environ.get("TASKTRACK_SCHEDULER"):
        _set(result, "reminder", "enabled", _is_truthy(scheduler_str))

    return result


def get_default_config() -> dict[str, Any]:
    """
    Get hardcoded default configuration.

    Returns:
        Dictionary with default configuration values
    """
    return {
        "database": {"path": "tasktrack.db"},
        "mail": {"port": 587, "use_tls": False},
        "reminder": {"send_time": "20:45", "timezone": "UTC", "enabled": True},
    }


def load_env_file(project_dir: Path | None = None) -> None:
    """
    Load the project .env file into os.environ.

    Variables already exported in the shell are left alone. A missing file
    is not an error.

    Args:
        project_dir: Directory holding the .env file (defaults to cwd)
    """
    if project_dir is None:
        project_dir = Path.cwd()

    env_path = project_dir / ".env"
    if not env_path.is_file():
        return

    load_dotenv(env_path, override=False)
    logger.debug("Loaded environment from %s", env_path)


def load_config(project_dir: Path | None = None, use_cache: bool = True) -> TrackerConfig:
    """
    Load configuration with multi-layer merging.

    Configuration precedence (highest to lowest):
        1. Environment variables
        2. Project config (.tasktrack.json)
        3. User config (~/.config/tasktrack/config.json)
        4. Hardcoded defaults

    Args:
        project_dir: Project directory to load .tasktrack.json from (defaults to cwd)
        use_cache: If True, return cached config from previous load

    Returns:
        Validated TrackerConfig instance

    Raises:
        ValidationError: If the merged config fails Pydantic validation

    Example:
        >>> config = load_config()
        >>> config.reminder.send_time
        '20:45'
    """
    global _config_cache

    if use_cache and _config_cache is not None:
        return _config_cache

    merged = get_default_config()

    if user_config := load_json_file(get_user_config_path()):
        merged = deep_merge(merged, user_config)

    if project_config := load_json_file(get_project_config_path(project_dir)):
        merged = deep_merge(merged, project_config)

    merged = apply_env_overrides(merged)

    config = TrackerConfig(**merged)

    _config_cache = config

    return config


def clear_cache() -> None:
    """
    Clear the cached configuration.

    Useful for testing or when config files change during execution.
    """
    global _config_cache
    _config_cache = None
