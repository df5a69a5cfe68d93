"""Engagement artifacts exceptions."""

from pathlib import Path


class ArtifactsError(Exception):
    """Base exception for engagement artifacts errors."""


# =============================================================================
# Validation Exceptions
# =============================================================================


class ArtifactValidationError(ArtifactsError, ValueError):
    """Raised when submitted artifacts or query options are invalid.

    Attributes:
        artifact_id: The uuid of the artifact that failed validation.
        field: The field that failed validation (if applicable).
    """

    def __init__(
        self,
        message: str,
        *,
        artifact_id: str | None = None,
        field: str | None = None,
    ) -> None:
        """Initialize with error message and validation context.

        Args:
            message: Human-readable error message.
            artifact_id: The uuid of the artifact that failed validation.
            field: The field that failed validation.
        """
        super().__init__(message)
        self.artifact_id: str | None = artifact_id
        self.field: str | None = field


class FilterConflictError(ArtifactValidationError):
    """Raised when mutually exclusive query filters are combined."""


class SnapshotFormatError(ArtifactsError, ValueError):
    """Raised when snapshot file content cannot be parsed.

    Attributes:
        path: Repository path of the offending file.
    """

    def __init__(self, message: str, *, path: str | None = None) -> None:
        """Initialize with error message and file context."""
        super().__init__(message)
        self.path: str | None = path


# =============================================================================
# Store Exceptions
# =============================================================================


class StoreError(ArtifactsError):
    """Raised when the document store cannot complete an operation."""


# =============================================================================
# Remote Exceptions
# =============================================================================


class RemoteError(ArtifactsError):
    """Base exception for repository and engagement directory failures.

    Attributes:
        status_code: HTTP status code, if the failure carried one.
        url: The URL (or repository path) of the failed call.
    """

    def __init__(
        self,
        message: str,
        *,
        status_code: int | None = None,
        url: str | None = None,
    ) -> None:
        """Initialize with error message and request context.

        Args:
            message: Human-readable error message.
            status_code: HTTP status code, if any.
            url: The URL of the failed call.
        """
        super().__init__(message)
        self.status_code: int | None = status_code
        self.url: str | None = url


class TransientRemoteError(RemoteError):
    """Connection-level failure that is safe to retry."""


class FatalRemoteError(RemoteError):
    """Remote failure that must not be retried."""


class RemoteNotFoundError(FatalRemoteError):
    """The requested remote resource does not exist."""


class EngagementNotFoundError(RemoteNotFoundError):
    """No engagement is known for the given uuid.

    Attributes:
        engagement_uuid: The uuid that was looked up.
    """

    def __init__(
        self,
        message: str,
        *,
        engagement_uuid: str,
        status_code: int | None = 404,
        url: str | None = None,
    ) -> None:
        """Initialize with error message and engagement context."""
        super().__init__(message, status_code=status_code, url=url)
        self.engagement_uuid: str = engagement_uuid


# =============================================================================
# Configuration Exceptions
# =============================================================================


class ConfigError(ArtifactsError):
    """Base exception for configuration errors."""


class ConfigLoadError(ConfigError):
    """Raised when configuration cannot be loaded or parsed."""

    def __init__(
        self,
        message: str,
        *,
        path: Path | None = None,
        line: int | None = None,
        column: int | None = None,
    ) -> None:
        """Initialize with error message and optional location context."""
        super().__init__(message)
        self.path: Path | None = path
        self.line: int | None = line
        self.column: int | None = column
