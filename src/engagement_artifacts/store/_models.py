"""Document store query types."""

from dataclasses import dataclass
from enum import StrEnum
from typing import Final

from engagement_artifacts.artifacts import Artifact

# Artifact attributes a store can filter, sort or group on
STORE_FIELDS: Final = frozenset(
    {
        "uuid",
        "engagement_uuid",
        "title",
        "description",
        "type",
        "link_address",
        "region",
        "created",
        "modified",
    }
)


class SortDirection(StrEnum):
    """Sort direction for one sort key."""

    ASC = "asc"
    DESC = "desc"


@dataclass(frozen=True, slots=True)
class SortField:
    """One key of an ordered sort specification.

    Attributes:
        field: Artifact attribute name (snake_case, one of ``STORE_FIELDS``).
        direction: Ascending or descending.
    """

    field: str
    direction: SortDirection = SortDirection.ASC


@dataclass(frozen=True, slots=True)
class ArtifactQuery:
    """Filter criteria for store reads.

    Every criterion that is set must match. An empty query matches all
    artifacts.

    Attributes:
        engagement_uuid: Match artifacts of this engagement.
        type: Match artifacts of this type.
        regions: Match artifacts whose region is one of these.
    """

    engagement_uuid: str | None = None
    type: str | None = None
    regions: tuple[str, ...] = ()

    def matches(self, artifact: Artifact) -> bool:
        """Check an artifact against every set criterion.

        Args:
            artifact: The artifact to test.

        Returns:
            True if the artifact satisfies the query.
        """
        if self.engagement_uuid is not None and artifact.engagement_uuid != self.engagement_uuid:
            return False
        if self.type is not None and artifact.type != self.type:
            return False
        return not self.regions or artifact.region in self.regions
