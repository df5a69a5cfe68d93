"""In-memory artifact store.

This module provides a MemoryArtifactStore that implements
ArtifactStoreProtocol without a database. It backs unit tests and
single-process development servers.
"""

from collections import Counter
from collections.abc import Sequence
from dataclasses import dataclass, field

from engagement_artifacts.artifacts import Artifact, ArtifactCount
from engagement_artifacts.exceptions import StoreError
from engagement_artifacts.store._models import (
    STORE_FIELDS,
    ArtifactQuery,
    SortDirection,
    SortField,
)


@dataclass(slots=True)
class MemoryArtifactStore:
    """Dictionary-backed artifact store.

    Records are kept in insertion order keyed by uuid. The store can be
    seeded directly for tests:

    Example:
        >>> store = MemoryArtifactStore()
        >>> store.seed([Artifact(uuid="a", engagement_uuid="e1", title="Demo")])
        >>> len(store)
        1
    """

    _records: dict[str, Artifact] = field(default_factory=dict)
    _next_id: int = field(default=1)

    def __len__(self) -> int:
        return len(self._records)

    def seed(self, artifacts: Sequence[Artifact]) -> None:
        """Insert artifacts synchronously, assigning ids as create would.

        Args:
            artifacts: Artifacts with unique uuids.
        """
        for artifact in artifacts:
            self._insert(artifact)

    def _insert(self, artifact: Artifact) -> Artifact:
        if not artifact.uuid:
            msg = "Cannot store an artifact without a uuid"
            raise StoreError(msg)
        if artifact.uuid in self._records:
            msg = f"Artifact '{artifact.uuid}' already exists"
            raise StoreError(msg)
        stored = artifact.model_copy(update={"id": self._next_id})
        self._next_id += 1
        self._records[artifact.uuid] = stored
        return stored

    # =========================================================================
    # ArtifactStoreProtocol Methods
    # =========================================================================

    async def find_by_uuid(self, uuid: str) -> Artifact | None:
        return self._records.get(uuid)

    async def list_by_engagement(self, engagement_uuid: str) -> list[Artifact]:
        return [
            artifact
            for artifact in self._records.values()
            if artifact.engagement_uuid == engagement_uuid
        ]

    async def create(self, artifact: Artifact) -> Artifact:
        return self._insert(artifact)

    async def update(self, artifact: Artifact) -> Artifact:
        current = next(
            (uuid for uuid, stored in self._records.items() if stored.id == artifact.id),
            None,
        )
        if artifact.id is None or current is None:
            msg = f"No stored artifact with id {artifact.id}"
            raise StoreError(msg)
        if artifact.uuid != current:
            msg = f"Artifact id {artifact.id} belongs to '{current}', not '{artifact.uuid}'"
            raise StoreError(msg)
        self._records[current] = artifact
        return artifact

    async def delete_by_uuid(self, uuid: str) -> int:
        return 1 if self._records.pop(uuid, None) is not None else 0

    async def delete_all(self) -> int:
        removed = len(self._records)
        self._records.clear()
        return removed

    async def find(
        self,
        query: ArtifactQuery,
        *,
        page: int,
        page_size: int,
        sort: Sequence[SortField],
    ) -> list[Artifact]:
        matches = [a for a in self._records.values() if query.matches(a)]
        # Stable sorts applied from the least significant key outward
        for sort_field in reversed(sort):
            _check_field(sort_field.field)
            matches.sort(
                key=lambda a, name=sort_field.field: _sort_key(getattr(a, name)),
                reverse=sort_field.direction is SortDirection.DESC,
            )
        start = page * page_size
        return matches[start : start + page_size]

    async def count(self, query: ArtifactQuery) -> int:
        return sum(1 for artifact in self._records.values() if query.matches(artifact))

    async def count_by_field(
        self,
        field: str,
        *,
        regions: Sequence[str] = (),
    ) -> list[ArtifactCount]:
        _check_field(field)
        query = ArtifactQuery(regions=tuple(regions))
        counts = Counter(
            value
            for artifact in self._records.values()
            if query.matches(artifact) and (value := getattr(artifact, field)) is not None
        )
        return [
            ArtifactCount(count=count, type=value)
            for value, count in sorted(counts.items(), key=lambda kv: (-kv[1], kv[0]))
        ]


def _sort_key(value: str | None) -> tuple[bool, str]:
    # None sorts before any string, as SQLite orders NULLs
    return (value is not None, value or "")


def _check_field(name: str) -> None:
    if name not in STORE_FIELDS:
        msg = f"Unknown artifact field '{name}'"
        raise StoreError(msg)
