"""Shared test fixtures for engagement artifacts tests."""

from collections.abc import Callable

import pytest

from engagement_artifacts.artifacts import Artifact, Engagement
from engagement_artifacts.config import CommitConfig, RepositoryConfig
from engagement_artifacts.engagements import FakeEngagementDirectory
from engagement_artifacts.repository import FakeRemoteRepository
from engagement_artifacts.service import (
    KeyedLock,
    QueryService,
    ReconciliationEngine,
    RefreshOrchestrator,
    SnapshotWriter,
)
from engagement_artifacts.store import MemoryArtifactStore

ENGAGEMENT_UUID = "E1"
PROJECT_ID = 101

type ArtifactFactory = Callable[..., Artifact]


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture
def make_artifact() -> ArtifactFactory:
    """Return a factory for valid client artifacts with overridable fields."""

    def _make(**overrides: object) -> Artifact:
        defaults: dict[str, object] = {
            "engagement_uuid": ENGAGEMENT_UUID,
            "title": "Demo recording",
            "description": "Recorded demo of the pilot",
            "type": "Demo",
            "link_address": "https://example.com/demo",
            "region": "na",
        }
        defaults.update(overrides)
        return Artifact.model_validate(defaults)

    return _make


@pytest.fixture
def store() -> MemoryArtifactStore:
    return MemoryArtifactStore()


@pytest.fixture
def repository() -> FakeRemoteRepository:
    return FakeRemoteRepository()


@pytest.fixture
def directory() -> FakeEngagementDirectory:
    return FakeEngagementDirectory.of(
        Engagement(uuid=ENGAGEMENT_UUID, project_id=PROJECT_ID)
    )


@pytest.fixture
def repository_config() -> RepositoryConfig:
    return RepositoryConfig(mirror_legacy=False)


@pytest.fixture
def writer(
    repository: FakeRemoteRepository,
    directory: FakeEngagementDirectory,
    repository_config: RepositoryConfig,
) -> SnapshotWriter:
    return SnapshotWriter(
        repository, directory, config=repository_config, commit=CommitConfig()
    )


@pytest.fixture
def engine(
    store: MemoryArtifactStore,
    writer: SnapshotWriter,
    directory: FakeEngagementDirectory,
) -> ReconciliationEngine:
    return ReconciliationEngine(store, writer, directory, locks=KeyedLock())


@pytest.fixture
def query(store: MemoryArtifactStore) -> QueryService:
    return QueryService(store, default_page_size=20)


@pytest.fixture
def orchestrator(
    store: MemoryArtifactStore,
    directory: FakeEngagementDirectory,
    writer: SnapshotWriter,
    engine: ReconciliationEngine,
) -> RefreshOrchestrator:
    return RefreshOrchestrator(store, directory, writer, engine, refresh_workers=4)
