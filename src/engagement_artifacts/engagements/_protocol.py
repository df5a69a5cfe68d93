"""Engagement directory protocol for type-safe dependency injection."""

from typing import Protocol, runtime_checkable

from engagement_artifacts.artifacts import Engagement


@runtime_checkable
class EngagementDirectoryProtocol(Protocol):
    """Protocol for looking up engagements and reporting artifact counts."""

    async def list_engagements(self) -> list[Engagement]:
        """Return every known engagement, including entries without a uuid."""
        ...

    async def get_engagement(self, engagement_uuid: str) -> Engagement:
        """Look up one engagement.

        Raises:
            EngagementNotFoundError: If no engagement has this uuid.
            RemoteError: On any other failure.
        """
        ...

    async def update_artifact_count(self, engagement_uuid: str, count: int) -> None:
        """Report the engagement's current number of artifacts."""
        ...

    async def aclose(self) -> None:
        """Release connections."""
        ...
