from pathlib import Path

import anyio.to_thread
import pytest

from engagement_artifacts.repository import LocalGitRepository
from engagement_artifacts.store import SqliteArtifactStore


def pytest_collection_modifyitems(items: list[pytest.Item]) -> None:
    for item in items:
        if Path(item.path).is_relative_to(Path(__file__).parent):
            item.add_marker(pytest.mark.integration)


@pytest.fixture
async def sqlite_store(tmp_path: Path) -> SqliteArtifactStore:
    """Create an initialized SQLite store in a temporary directory."""
    store = SqliteArtifactStore(tmp_path / "db" / "artifacts.db")
    await anyio.to_thread.run_sync(store.initialize)
    return store


@pytest.fixture
def local_repository(tmp_path: Path) -> LocalGitRepository:
    return LocalGitRepository(tmp_path / "repositories")
