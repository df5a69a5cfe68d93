"""Engagement artifacts configuration.

This module provides the public API for configuration management: loading
from defaults, a TOML file and environment variables, with typed access to
every section.

Example:
    >>> from engagement_artifacts.config import Config
    >>> config = Config.load()
    >>> config.repository.default_branch
    'master'
"""

from engagement_artifacts.exceptions import ConfigError, ConfigLoadError

from ._defaults import DEFAULT_CONFIG
from ._loader import (
    ENV_PREFIX,
    deep_merge,
    parse_env_vars,
    parse_string_value,
    read_toml_file,
    set_nested_key,
)
from ._models import (
    CONFIG_PATH_ENV,
    CommitConfig,
    ConcurrencyConfig,
    Config,
    EngagementsConfig,
    LogFormat,
    LoggingConfig,
    LogLevel,
    PagingConfig,
    RepositoryConfig,
    RetryConfig,
    StoreConfig,
)

__all__ = [
    "CONFIG_PATH_ENV",
    "DEFAULT_CONFIG",
    "ENV_PREFIX",
    "CommitConfig",
    "ConcurrencyConfig",
    "Config",
    "ConfigError",
    "ConfigLoadError",
    "EngagementsConfig",
    "LogFormat",
    "LogLevel",
    "LoggingConfig",
    "PagingConfig",
    "RepositoryConfig",
    "RetryConfig",
    "StoreConfig",
    "deep_merge",
    "parse_env_vars",
    "parse_string_value",
    "read_toml_file",
    "set_nested_key",
]
