"""Artifact document stores.

Classes:
    ArtifactStoreProtocol: Runtime-checkable protocol for dependency injection.
    SqliteArtifactStore: Store persisted in a SQLite database file.
    MemoryArtifactStore: Dictionary-backed store for tests and development.

Models:
    ArtifactQuery: Filter criteria for store reads.
    SortField: One key of an ordered sort specification.
    SortDirection: Ascending or descending.

Example:
    >>> from engagement_artifacts.store import ArtifactQuery, SqliteArtifactStore
    >>> store = SqliteArtifactStore("artifacts.db")
    >>> store.initialize()
    >>> await store.count(ArtifactQuery(type="Demo"))
    0
"""

from engagement_artifacts.store._memory import MemoryArtifactStore
from engagement_artifacts.store._models import (
    STORE_FIELDS,
    ArtifactQuery,
    SortDirection,
    SortField,
)
from engagement_artifacts.store._protocol import ArtifactStoreProtocol
from engagement_artifacts.store._sqlite import SqliteArtifactStore

__all__ = [
    "STORE_FIELDS",
    "ArtifactQuery",
    "ArtifactStoreProtocol",
    "MemoryArtifactStore",
    "SortDirection",
    "SortField",
    "SqliteArtifactStore",
]
