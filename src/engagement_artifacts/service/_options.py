"""Query options for artifact reads.

``FilterOptions`` selects artifacts; ``ListOptions`` adds pagination and a
client sort specification of the form ``field|DIRECTION,field|DIRECTION``.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from typing import Final

from engagement_artifacts.exceptions import ArtifactValidationError, FilterConflictError
from engagement_artifacts.store import ArtifactQuery, SortDirection, SortField

# Public (JSON) field names accepted in sort specifications
SORT_FIELDS: Final = {
    "uuid": "uuid",
    "engagementUuid": "engagement_uuid",
    "title": "title",
    "description": "description",
    "type": "type",
    "linkAddress": "link_address",
    "region": "region",
    "created": "created",
    "updated": "modified",
    "modified": "modified",
}

UUID_SORT: Final = SortField("uuid")
MODIFIED_DESC: Final = SortField("modified", SortDirection.DESC)

ENGAGEMENT_DEFAULT_SORT: Final = (MODIFIED_DESC,)
ALL_DEFAULT_SORT: Final = (MODIFIED_DESC, SortField("engagement_uuid"))
FILTERED_DEFAULT_SORT: Final = (UUID_SORT,)


def with_uuid_tiebreaker(sort: Sequence[SortField]) -> tuple[SortField, ...]:
    if any(key.field == "uuid" for key in sort):
        return tuple(sort)
    return (*sort, UUID_SORT)


def parse_sort(spec: str) -> tuple[SortField, ...]:
    """Parse a client sort specification.

    ``DESC`` (exactly) selects descending order; any other direction, or
    none, is ascending. ``uuid`` ascending is appended as a final
    tie-breaker unless the specification already sorts on it.

    Args:
        spec: Comma separated ``field|DIRECTION`` entries.

    Returns:
        The ordered sort keys.

    Raises:
        ArtifactValidationError: If a field is not sortable.

    Example:
        >>> parse_sort("type|DESC,title")
        (SortField(field='type', direction=<SortDirection.DESC: 'desc'>),
         SortField(field='title', direction=<SortDirection.ASC: 'asc'>),
         SortField(field='uuid', direction=<SortDirection.ASC: 'asc'>))
    """
    keys: list[SortField] = []
    for entry in spec.split(","):
        if not entry.strip():
            continue
        name, _, direction = entry.strip().partition("|")
        field = SORT_FIELDS.get(name.strip())
        if field is None:
            msg = f"Cannot sort on unknown field '{name.strip()}'"
            raise ArtifactValidationError(msg, field=name.strip())
        keys.append(
            SortField(
                field,
                SortDirection.DESC if direction.strip() == "DESC" else SortDirection.ASC,
            )
        )
    return with_uuid_tiebreaker(keys)


@dataclass(frozen=True, slots=True)
class FilterOptions:
    """Filter criteria for artifact reads and counts.

    Attributes:
        engagement_uuid: Only artifacts of this engagement.
        type: Only artifacts of this type. Cannot be combined with
            ``engagement_uuid``.
        regions: Only artifacts in one of these regions.
    """

    engagement_uuid: str | None = None
    type: str | None = None
    regions: tuple[str, ...] = ()

    def validate(self) -> None:
        """Reject unsupported filter combinations.

        Raises:
            FilterConflictError: If both ``type`` and ``engagement_uuid`` are set.
        """
        if self.type and self.engagement_uuid:
            msg = "Type and engagement together is not supported"
            raise FilterConflictError(msg, field="type")

    def to_query(self) -> ArtifactQuery:
        """Map the options onto a store query.

        Regions and type together filter on both; regions alone filter on
        regions only; otherwise type, then engagement, then nothing.

        Raises:
            FilterConflictError: If the combination is unsupported.
        """
        self.validate()
        if self.regions:
            return ArtifactQuery(type=self.type or None, regions=self.regions)
        if self.type:
            return ArtifactQuery(type=self.type)
        if self.engagement_uuid:
            return ArtifactQuery(engagement_uuid=self.engagement_uuid)
        return ArtifactQuery()

    @property
    def default_sort(self) -> tuple[SortField, ...]:
        """Sort applied when the client gives none."""
        if self.regions or self.type:
            return FILTERED_DEFAULT_SORT
        if self.engagement_uuid:
            return with_uuid_tiebreaker(ENGAGEMENT_DEFAULT_SORT)
        return with_uuid_tiebreaker(ALL_DEFAULT_SORT)


@dataclass(frozen=True, slots=True)
class ListOptions(FilterOptions):
    """Filter criteria plus pagination and sorting.

    Attributes:
        page: Zero-based page index. Negative values read the first page.
        page_size: Artifacts per page. Non-positive values use the
            configured default.
        sort: Client sort specification, or None for the default order.
    """

    page: int = 0
    page_size: int = 0
    sort: str | None = None

    @property
    def effective_page(self) -> int:
        return max(self.page, 0)

    def effective_page_size(self, default: int) -> int:
        return self.page_size if self.page_size > 0 else default

    def sort_fields(self) -> tuple[SortField, ...]:
        """Resolve the sort order for this listing.

        Raises:
            ArtifactValidationError: If the sort names an unknown field.
        """
        if self.sort is None or not self.sort.strip():
            return self.default_sort
        return parse_sort(self.sort)
