"""Read-side artifact queries."""

from collections.abc import Sequence
from typing import Final

from structlog.typing import FilteringBoundLogger

from engagement_artifacts.artifacts import Artifact, ArtifactCount
from engagement_artifacts.service._options import (
    ENGAGEMENT_DEFAULT_SORT,
    FilterOptions,
    ListOptions,
    with_uuid_tiebreaker,
)
from engagement_artifacts.store import ArtifactQuery, ArtifactStoreProtocol
from engagement_artifacts.utils import create_service_logger

# Upper bound for the per-engagement listing
ENGAGEMENT_LISTING_LIMIT: Final = 1000


class QueryService:
    """Filtered, paginated and aggregated artifact reads.

    Example:
        >>> service = QueryService(MemoryArtifactStore())
        >>> await service.count_artifacts(FilterOptions(type="Demo"))
        ArtifactCount(count=0, type=None)
    """

    def __init__(
        self,
        store: ArtifactStoreProtocol,
        *,
        default_page_size: int = 20,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._store: ArtifactStoreProtocol = store
        self._default_page_size: int = default_page_size
        self._logger: FilteringBoundLogger = logger or create_service_logger(
            component="query"
        )

    @property
    def default_page_size(self) -> int:
        return self._default_page_size

    async def get_artifacts(self, options: ListOptions) -> list[Artifact]:
        """Return one page of artifacts.

        Raises:
            FilterConflictError: If type and engagement are both given.
            ArtifactValidationError: If the sort names an unknown field.
        """
        query = options.to_query()
        sort = options.sort_fields()
        page = options.effective_page
        page_size = options.effective_page_size(self._default_page_size)
        self._logger.debug(
            "artifacts_listed",
            engagement_uuid=query.engagement_uuid,
            type=query.type,
            regions=list(query.regions),
            page=page,
            page_size=page_size,
        )
        return await self._store.find(query, page=page, page_size=page_size, sort=sort)

    async def count_artifacts(self, options: FilterOptions) -> ArtifactCount:
        """Count artifacts matching the filter.

        Raises:
            FilterConflictError: If type and engagement are both given.
        """
        return ArtifactCount(count=await self._store.count(options.to_query()))

    async def get_artifacts_by_engagement(self, engagement_uuid: str) -> list[Artifact]:
        """Return an engagement's most recently modified artifacts."""
        return await self._store.find(
            ArtifactQuery(engagement_uuid=engagement_uuid),
            page=0,
            page_size=ENGAGEMENT_LISTING_LIMIT,
            sort=with_uuid_tiebreaker(ENGAGEMENT_DEFAULT_SORT),
        )

    async def get_type_summary(self, regions: Sequence[str] = ()) -> list[ArtifactCount]:
        """Count artifacts per type, largest first, ties by type name."""
        return await self._store.count_by_field("type", regions=tuple(regions))

    async def get_types(self, regions: Sequence[str] = ()) -> list[str]:
        """Return the distinct artifact types, sorted."""
        summary = await self.get_type_summary(regions)
        return sorted(count.type for count in summary if count.type is not None)

    async def get_engagement_counts(self) -> dict[str, int]:
        """Map each engagement uuid to its number of artifacts."""
        counts = await self._store.count_by_field("engagement_uuid")
        return {count.type: count.count for count in counts if count.type is not None}
