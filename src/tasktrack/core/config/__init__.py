"""
Configuration models and loading.

This module provides Pydantic models for tasktrack configuration
with multi-layer merging: defaults < user < project < env vars.
"""

from .loader import (
    clear_cache,
    get_project_config_path,
    get_user_config_path,
    get_xdg_config_home,
    load_config,
    load_env_file,
)
from .models import (
    DEFAULT_TIMEZONE,
    DatabaseConfig,
    MailConfig,
    ReminderConfig,
    ServerConfig,
    TrackerConfig,
)

__all__ = [
    # Models
    "DEFAULT_TIMEZONE",
    "DatabaseConfig",
    "MailConfig",
    "ReminderConfig",
    "ServerConfig",
    "TrackerConfig",
    # Loader functions
    "clear_cache",
    "get_project_config_path",
    "get_user_config_path",
    "get_xdg_config_home",
    "load_config",
    "load_env_file",
]
