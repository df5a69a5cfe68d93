"""Artifact services: queries, reconciliation and refresh.

Classes:
    QueryService: Filtered, paginated and aggregated reads.
    ReconciliationEngine: Targeted and bulk updates plus the refresh upsert path.
    SnapshotWriter: Snapshot reads and commits against the remote repository.
    RefreshOrchestrator: Purge and rebuild of the document store.
    KeyedLock: Per-engagement mutual exclusion.
    ArtifactServices: All services wired from configuration.

Options:
    FilterOptions / ListOptions: Query filters, pagination and sorting.

Example:
    >>> from engagement_artifacts.service import FilterOptions, QueryService
    >>> await QueryService(store).count_artifacts(FilterOptions(regions=("na",)))
"""

from engagement_artifacts.service._container import (
    ArtifactServices,
    build_repository,
    open_services,
)
from engagement_artifacts.service._locks import KeyedLock
from engagement_artifacts.service._options import (
    ALL_DEFAULT_SORT,
    ENGAGEMENT_DEFAULT_SORT,
    FILTERED_DEFAULT_SORT,
    SORT_FIELDS,
    FilterOptions,
    ListOptions,
    parse_sort,
    with_uuid_tiebreaker,
)
from engagement_artifacts.service._query import ENGAGEMENT_LISTING_LIMIT, QueryService
from engagement_artifacts.service._reconcile import (
    BulkUpdateResult,
    ReconciliationEngine,
    build_commit_message,
)
from engagement_artifacts.service._refresh import RefreshOrchestrator, RefreshResult
from engagement_artifacts.service._snapshot import SnapshotWriter, WriteResult

__all__ = [
    "ALL_DEFAULT_SORT",
    "ENGAGEMENT_DEFAULT_SORT",
    "ENGAGEMENT_LISTING_LIMIT",
    "FILTERED_DEFAULT_SORT",
    "SORT_FIELDS",
    "ArtifactServices",
    "BulkUpdateResult",
    "FilterOptions",
    "KeyedLock",
    "ListOptions",
    "QueryService",
    "ReconciliationEngine",
    "RefreshOrchestrator",
    "RefreshResult",
    "SnapshotWriter",
    "WriteResult",
    "build_commit_message",
    "build_repository",
    "open_services",
    "parse_sort",
    "with_uuid_tiebreaker",
]
