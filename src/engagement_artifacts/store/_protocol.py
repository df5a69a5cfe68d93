"""Document store protocol for type-safe dependency injection.

This module defines the runtime-checkable Protocol every artifact document
store satisfies, so the reconciliation engine and query service can run
against SQLite in production and an in-memory store in tests.
"""

from collections.abc import Sequence
from typing import Protocol, runtime_checkable

from engagement_artifacts.artifacts import Artifact, ArtifactCount
from engagement_artifacts.store._models import ArtifactQuery, SortField


@runtime_checkable
class ArtifactStoreProtocol(Protocol):
    """Protocol for the queryable artifact document store.

    Artifacts are unique by ``uuid``. Stores assign the internal ``id`` key
    on create and keep it stable across updates.
    """

    async def find_by_uuid(self, uuid: str) -> Artifact | None:
        """Look up one artifact by identity.

        Args:
            uuid: Artifact uuid.

        Returns:
            The stored artifact, or None if absent.
        """
        ...

    async def list_by_engagement(self, engagement_uuid: str) -> list[Artifact]:
        """List every artifact of one engagement in insertion order.

        Args:
            engagement_uuid: Engagement uuid.

        Returns:
            The engagement's artifacts.
        """
        ...

    async def create(self, artifact: Artifact) -> Artifact:
        """Insert a new artifact.

        Args:
            artifact: Artifact with a uuid not yet present in the store.

        Returns:
            The stored artifact with its ``id`` assigned.

        Raises:
            StoreError: If the uuid already exists or the write fails.
        """
        ...

    async def update(self, artifact: Artifact) -> Artifact:
        """Replace an existing artifact, located by its ``id``.

        Args:
            artifact: Artifact carrying the ``id`` of the stored record.

        Returns:
            The stored artifact.

        Raises:
            StoreError: If no record has that id or the write fails.
        """
        ...

    async def delete_by_uuid(self, uuid: str) -> int:
        """Delete one artifact by identity.

        Args:
            uuid: Artifact uuid.

        Returns:
            Number of records removed (0 or 1).
        """
        ...

    async def delete_all(self) -> int:
        """Remove every artifact.

        Returns:
            Number of records removed.
        """
        ...

    async def find(
        self,
        query: ArtifactQuery,
        *,
        page: int,
        page_size: int,
        sort: Sequence[SortField],
    ) -> list[Artifact]:
        """Return one page of artifacts matching a query.

        Args:
            query: Filter criteria.
            page: Zero-based page index.
            page_size: Number of artifacts per page.
            sort: Ordered sort keys.

        Returns:
            The artifacts on the requested page.
        """
        ...

    async def count(self, query: ArtifactQuery) -> int:
        """Count artifacts matching a query.

        Args:
            query: Filter criteria.

        Returns:
            Number of matching artifacts.
        """
        ...

    async def count_by_field(
        self,
        field: str,
        *,
        regions: Sequence[str] = (),
    ) -> list[ArtifactCount]:
        """Count artifacts grouped by one attribute.

        Args:
            field: Attribute to group on (``type`` or ``engagement_uuid``).
            regions: Only count artifacts in these regions, if given.

        Returns:
            One count per distinct value, sorted by count descending then
            value ascending. The value is reported in ``ArtifactCount.type``.
        """
        ...
