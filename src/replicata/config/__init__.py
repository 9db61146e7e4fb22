"""Application configuration helpers."""

from __future__ import annotations

from .env import env_flag, env_list, require_env_var, require_env_vars
from .errors import ConfigurationError, MissingConfigurationError
from .logging import configure_logging
from .replication import DEFAULT_AUTO_FIELDS, ReplicationConfig, get_replication_config
from .storage import DatabaseConfig, get_database_config

__all__ = [
    "DEFAULT_AUTO_FIELDS",
    "ConfigurationError",
    "DatabaseConfig",
    "MissingConfigurationError",
    "ReplicationConfig",
    "configure_logging",
    "env_flag",
    "env_list",
    "get_database_config",
    "get_replication_config",
    "require_env_var",
    "require_env_vars",
]
