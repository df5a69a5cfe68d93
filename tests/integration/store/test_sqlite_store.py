"""Integration tests for SqliteArtifactStore against a real database file."""

from pathlib import Path

import anyio
import anyio.to_thread
import pytest

from engagement_artifacts.artifacts import Artifact, ArtifactCount
from engagement_artifacts.exceptions import StoreError
from engagement_artifacts.store import (
    ArtifactQuery,
    ArtifactStoreProtocol,
    SortDirection,
    SortField,
    SqliteArtifactStore,
)

pytestmark = pytest.mark.anyio


def _artifact(uuid: str, **overrides: str | None) -> Artifact:
    data: dict[str, str | None] = {
        "uuid": uuid,
        "engagement_uuid": "e1",
        "title": f"Title {uuid}",
        "type": "Demo",
        "region": "na",
    }
    data.update(overrides)
    return Artifact.model_validate(data)


async def _seed(store: SqliteArtifactStore) -> None:
    for artifact in (
        _artifact("a", type="Demo", region="na", modified="2024-01-03"),
        _artifact("b", type="Video", region="emea", modified="2024-01-01"),
        _artifact("c", engagement_uuid="e2", type="Demo", region="na", modified="2024-01-02"),
        _artifact("d", engagement_uuid="e2", type="Demo", region=None, modified=None),
    ):
        _ = await store.create(artifact)


class TestSqliteStoreSetup:
    def test_conforms_to_protocol(self, tmp_path: Path) -> None:
        assert isinstance(SqliteArtifactStore(tmp_path / "a.db"), ArtifactStoreProtocol) is True

    async def test_initialize_creates_parent_directories(self, tmp_path: Path) -> None:
        store = SqliteArtifactStore(tmp_path / "nested" / "dir" / "artifacts.db")
        await anyio.to_thread.run_sync(store.initialize)
        assert store.path.exists()

    async def test_initialize_is_idempotent(self, sqlite_store: SqliteArtifactStore) -> None:
        _ = await sqlite_store.create(_artifact("a"))
        await anyio.to_thread.run_sync(sqlite_store.initialize)
        assert await sqlite_store.count(ArtifactQuery()) == 1

    async def test_uninitialized_database_raises_store_error(self, tmp_path: Path) -> None:
        store = SqliteArtifactStore(tmp_path / "empty.db")
        with pytest.raises(StoreError, match="Artifact database error"):
            _ = await store.find_by_uuid("a")


# =============================================================================
# Write Tests
# =============================================================================


class TestSqliteStoreWrites:
    async def test_create_round_trips_all_fields(self, sqlite_store: SqliteArtifactStore) -> None:
        artifact = _artifact(
            "a",
            description="Recorded demo",
            link_address="https://example.com/a",
            created="2024-01-01T00:00:00Z",
            modified="2024-01-02T00:00:00Z",
        )

        stored = await sqlite_store.create(artifact)

        assert stored.id is not None
        assert await sqlite_store.find_by_uuid("a") == stored

    async def test_create_rejects_duplicate_uuid(self, sqlite_store: SqliteArtifactStore) -> None:
        _ = await sqlite_store.create(_artifact("a"))
        with pytest.raises(StoreError, match="UNIQUE"):
            _ = await sqlite_store.create(_artifact("a", title="Other"))

    async def test_create_rejects_missing_uuid(self, sqlite_store: SqliteArtifactStore) -> None:
        with pytest.raises(StoreError, match="without a uuid"):
            _ = await sqlite_store.create(Artifact(title="x"))

    async def test_update_keeps_id(self, sqlite_store: SqliteArtifactStore) -> None:
        stored = await sqlite_store.create(_artifact("a"))

        _ = await sqlite_store.update(stored.model_copy(update={"title": "Changed"}))

        found = await sqlite_store.find_by_uuid("a")
        assert found is not None
        assert found.title == "Changed"
        assert found.id == stored.id

    async def test_update_rejects_unknown_id(self, sqlite_store: SqliteArtifactStore) -> None:
        with pytest.raises(StoreError, match="No stored artifact"):
            _ = await sqlite_store.update(_artifact("a").model_copy(update={"id": 99}))

    async def test_update_requires_id(self, sqlite_store: SqliteArtifactStore) -> None:
        with pytest.raises(StoreError, match="no store id"):
            _ = await sqlite_store.update(_artifact("a"))

    async def test_deletes(self, sqlite_store: SqliteArtifactStore) -> None:
        await _seed(sqlite_store)

        assert await sqlite_store.delete_by_uuid("a") == 1
        assert await sqlite_store.delete_by_uuid("a") == 0
        assert await sqlite_store.delete_all() == 3
        assert await sqlite_store.count(ArtifactQuery()) == 0

    async def test_concurrent_creates(self, sqlite_store: SqliteArtifactStore) -> None:
        async with anyio.create_task_group() as tg:
            for index in range(10):
                tg.start_soon(sqlite_store.create, _artifact(f"u{index}"))

        assert await sqlite_store.count(ArtifactQuery()) == 10


# =============================================================================
# Read Tests
# =============================================================================


class TestSqliteStoreReads:
    async def test_list_by_engagement_keeps_insertion_order(
        self, sqlite_store: SqliteArtifactStore
    ) -> None:
        await _seed(sqlite_store)
        artifacts = await sqlite_store.list_by_engagement("e2")
        assert [a.uuid for a in artifacts] == ["c", "d"]

    async def test_find_filters_sorts_and_pages(self, sqlite_store: SqliteArtifactStore) -> None:
        await _seed(sqlite_store)
        query = ArtifactQuery(type="Demo")
        sort = [SortField("uuid", SortDirection.DESC)]

        first = await sqlite_store.find(query, page=0, page_size=2, sort=sort)
        second = await sqlite_store.find(query, page=1, page_size=2, sort=sort)

        assert [a.uuid for a in first] == ["d", "c"]
        assert [a.uuid for a in second] == ["a"]

    async def test_find_sorts_nulls_first_ascending(
        self, sqlite_store: SqliteArtifactStore
    ) -> None:
        await _seed(sqlite_store)
        found = await sqlite_store.find(
            ArtifactQuery(), page=0, page_size=10, sort=[SortField("modified")]
        )
        assert [a.uuid for a in found] == ["d", "b", "c", "a"]

    async def test_find_rejects_unknown_sort_field(
        self, sqlite_store: SqliteArtifactStore
    ) -> None:
        with pytest.raises(StoreError, match="Unknown artifact field"):
            _ = await sqlite_store.find(
                ArtifactQuery(), page=0, page_size=10, sort=[SortField("id; DROP")]
            )

    async def test_count_with_regions(self, sqlite_store: SqliteArtifactStore) -> None:
        await _seed(sqlite_store)
        assert await sqlite_store.count(ArtifactQuery(regions=("na", "emea"))) == 3
        assert await sqlite_store.count(ArtifactQuery(engagement_uuid="e2", type="Demo")) == 2

    async def test_count_by_field(self, sqlite_store: SqliteArtifactStore) -> None:
        await _seed(sqlite_store)

        assert await sqlite_store.count_by_field("type") == [
            ArtifactCount(count=3, type="Demo"),
            ArtifactCount(count=1, type="Video"),
        ]
        assert await sqlite_store.count_by_field("engagement_uuid", regions=["na"]) == [
            ArtifactCount(count=1, type="e1"),
            ArtifactCount(count=1, type="e2"),
        ]
