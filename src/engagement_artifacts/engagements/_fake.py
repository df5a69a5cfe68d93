"""Fake engagement directory for testing."""

from collections.abc import Iterable
from dataclasses import dataclass, field

from engagement_artifacts.artifacts import Engagement
from engagement_artifacts.exceptions import EngagementNotFoundError, RemoteError


@dataclass(slots=True)
class FakeEngagementDirectory:
    """In-memory engagement directory.

    Engagements without a uuid may be listed but never looked up. Reported
    counts are recorded in ``count_updates`` in call order.

    Example:
        >>> directory = FakeEngagementDirectory.of(Engagement(uuid="e1", project_id=1))
        >>> await directory.update_artifact_count("e1", 3)
        >>> directory.count_updates
        [('e1', 3)]
    """

    engagements: list[Engagement] = field(default_factory=list)
    count_updates: list[tuple[str, int]] = field(default_factory=list)
    list_error: RemoteError | None = None
    update_error: RemoteError | None = None

    @classmethod
    def of(cls, *engagements: Engagement) -> "FakeEngagementDirectory":
        return cls(engagements=list(engagements))

    def add(self, engagements: Iterable[Engagement]) -> None:
        self.engagements.extend(engagements)

    async def list_engagements(self) -> list[Engagement]:
        if self.list_error is not None:
            raise self.list_error
        return list(self.engagements)

    async def get_engagement(self, engagement_uuid: str) -> Engagement:
        for engagement in self.engagements:
            if engagement.uuid == engagement_uuid:
                return engagement
        msg = f"Engagement {engagement_uuid} not found"
        raise EngagementNotFoundError(msg, engagement_uuid=engagement_uuid)

    async def update_artifact_count(self, engagement_uuid: str, count: int) -> None:
        if self.update_error is not None:
            raise self.update_error
        self.count_updates.append((engagement_uuid, count))

    async def aclose(self) -> None:
        """Close the directory (no-op for fake)."""
