# pyright: reportExplicitAny=false, reportAny=false
"""Configuration models with typed access.

Every section is an immutable Pydantic model. ``Config.load`` merges the
built-in defaults, an optional TOML file and ``ARTIFACTS_*`` environment
variables, in that order of precedence.
"""

import os
from enum import StrEnum
from pathlib import Path
from typing import Any, ClassVar, Literal, Self

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from engagement_artifacts.config._defaults import DEFAULT_CONFIG
from engagement_artifacts.config._loader import (
    ENV_PREFIX,
    deep_merge,
    parse_env_vars,
    read_toml_file,
)
from engagement_artifacts.exceptions import ConfigLoadError

CONFIG_PATH_ENV = f"{ENV_PREFIX}CONFIG"


class LogLevel(StrEnum):
    """Log level threshold values.

    Values are ordered from most verbose (debug) to least verbose (error).
    """

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"


class LogFormat(StrEnum):
    """Log output format values."""

    JSON = "json"
    TEXT = "text"


class _Section(BaseModel):
    model_config: ClassVar[ConfigDict] = ConfigDict(frozen=True, extra="ignore")


class StoreConfig(_Section):
    """Document store settings.

    Attributes:
        path: SQLite database file.
    """

    path: Path = Path("artifacts.db")


class RepositoryConfig(_Section):
    """Remote repository settings.

    Attributes:
        kind: ``gitlab`` for the GitLab REST API, ``local`` for dulwich
            repositories on disk.
        base_url: GitLab server URL.
        token: GitLab private token.
        local_root: Directory holding one git repository per project
            (``local`` kind only).
        default_branch: Branch snapshots are read from and committed to.
        artifacts_file: Snapshot file path inside each project.
        engagement_file: Legacy engagement document path.
        mirror_legacy: Also embed artifacts into the legacy engagement document.
        timeout: Request timeout in seconds.
    """

    kind: Literal["gitlab", "local"] = "gitlab"
    base_url: str = "https://gitlab.com"
    token: str = ""
    local_root: Path = Path("repositories")
    default_branch: str = "master"
    artifacts_file: str = "artifacts.json"
    engagement_file: str = "engagement.json"
    mirror_legacy: bool = True
    timeout: float = 30.0


class EngagementsConfig(_Section):
    """Engagement directory settings.

    Attributes:
        base_url: Engagement API server URL.
        timeout: Request timeout in seconds.
    """

    base_url: str = "http://localhost:8080"
    timeout: float = 30.0


class CommitConfig(_Section):
    """Defaults applied to snapshot commits.

    Attributes:
        message: Commit message prefix when the caller supplies none.
        author_name: Author name when the caller supplies none.
        author_email: Author email when the caller supplies none.
    """

    message: str = "Artifacts updated"
    author_name: str = "Artifacts Service"
    author_email: str = "artifacts@localhost"


class RetryConfig(_Section):
    """Retry policy for transient remote failures.

    Attributes:
        attempts: Total attempts, including the first call.
        delay: Fixed delay between attempts, in seconds.
    """

    attempts: int = Field(default=3, ge=1)
    delay: float = Field(default=0.5, ge=0)


class ConcurrencyConfig(_Section):
    """Bounded parallelism for fan-out operations.

    Attributes:
        refresh_workers: Engagements refreshed concurrently.
        bulk_workers: Engagement groups reconciled concurrently in bulk updates.
    """

    refresh_workers: int = Field(default=8, ge=1)
    bulk_workers: int = Field(default=4, ge=1)


class PagingConfig(_Section):
    """Query pagination settings.

    Attributes:
        default_page_size: Page size used when a request gives none or a
            non-positive one.
    """

    default_page_size: int = Field(default=20, ge=1)


class LoggingConfig(_Section):
    """Logging configuration section.

    Attributes:
        level: Log level threshold.
        format: Log output format.
        file: Path to log file (empty logs to stderr).
    """

    level: LogLevel = LogLevel.INFO
    format: LogFormat = LogFormat.JSON
    file: str = ""


class Config(_Section):
    """Configuration container with typed access.

    Use ``Config.load()`` to build an instance from all sources; the
    constructor alone gives built-in defaults.
    """

    store: StoreConfig = Field(default_factory=StoreConfig)
    repository: RepositoryConfig = Field(default_factory=RepositoryConfig)
    engagements: EngagementsConfig = Field(default_factory=EngagementsConfig)
    commit: CommitConfig = Field(default_factory=CommitConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    concurrency: ConcurrencyConfig = Field(default_factory=ConcurrencyConfig)
    paging: PagingConfig = Field(default_factory=PagingConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @classmethod
    def from_dict(cls, data: dict[str, Any]) -> Self:
        """Validate a configuration dictionary.

        Args:
            data: Nested configuration values.

        Returns:
            The validated configuration.

        Raises:
            ConfigLoadError: If a value has the wrong type or is out of range.
        """
        try:
            return cls.model_validate(data)
        except ValidationError as e:
            msg = f"Invalid configuration: {e}"
            raise ConfigLoadError(msg) from e

    @classmethod
    def load(
        cls,
        path: Path | None = None,
        *,
        include_env: bool = True,
        environ: dict[str, str] | None = None,
    ) -> Self:
        """Load configuration from defaults, a TOML file and the environment.

        Args:
            path: TOML file to read. Falls back to the ``ARTIFACTS_CONFIG``
                environment variable; no file is read when neither is set.
            include_env: Apply ``ARTIFACTS_*`` environment overrides.
            environ: Mapping to read instead of ``os.environ``.

        Returns:
            The merged configuration.

        Raises:
            ConfigLoadError: If the file cannot be read or a value is invalid.
        """
        source = os.environ if environ is None else environ
        data: dict[str, Any] = dict(DEFAULT_CONFIG)

        config_path = path
        if config_path is None and source.get(CONFIG_PATH_ENV):
            config_path = Path(source[CONFIG_PATH_ENV])
        if config_path is not None:
            data = deep_merge(data, read_toml_file(config_path))

        if include_env:
            data = deep_merge(data, parse_env_vars(ENV_PREFIX, dict(source)))

        return cls.from_dict(data)
