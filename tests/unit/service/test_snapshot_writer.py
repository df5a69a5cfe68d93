from collections.abc import Callable

import orjson
import pytest

from engagement_artifacts.artifacts import Artifact, Engagement
from engagement_artifacts.config import CommitConfig, RepositoryConfig
from engagement_artifacts.engagements import FakeEngagementDirectory
from engagement_artifacts.exceptions import (
    EngagementNotFoundError,
    FatalRemoteError,
    RemoteNotFoundError,
    SnapshotFormatError,
    TransientRemoteError,
)
from engagement_artifacts.repository import FakeRemoteRepository, FileAction
from engagement_artifacts.service import SnapshotWriter

pytestmark = pytest.mark.anyio

PROJECT = 101


@pytest.fixture
def mirroring_writer(
    repository: FakeRemoteRepository, directory: FakeEngagementDirectory
) -> SnapshotWriter:
    return SnapshotWriter(
        repository,
        directory,
        config=RepositoryConfig(mirror_legacy=True),
        commit=CommitConfig(author_name="Bot", author_email="bot@example.com"),
    )


# =============================================================================
# write Tests
# =============================================================================


class TestSnapshotWriterWrite:
    async def test_creates_missing_snapshot(
        self,
        writer: SnapshotWriter,
        repository: FakeRemoteRepository,
        make_artifact: Callable[..., Artifact],
    ) -> None:
        result = await writer.write("E1", [make_artifact(uuid="a")])

        assert result.action is FileAction.CREATE
        assert result.files == ("artifacts.json",)
        assert not result.mirrored_legacy
        assert repository.writes == [("create_file", "101", "artifacts.json")]
        content = repository.content(PROJECT, "artifacts.json")
        assert content is not None
        assert [item["uuid"] for item in orjson.loads(content)] == ["a"]

    async def test_updates_existing_snapshot(
        self,
        writer: SnapshotWriter,
        repository: FakeRemoteRepository,
        make_artifact: Callable[..., Artifact],
    ) -> None:
        repository.put(PROJECT, "artifacts.json", "[]")

        result = await writer.write("E1", [make_artifact(uuid="a")])

        assert result.action is FileAction.UPDATE
        assert repository.writes == [("update_file", "101", "artifacts.json")]

    async def test_writes_empty_array_for_no_artifacts(
        self, writer: SnapshotWriter, repository: FakeRemoteRepository
    ) -> None:
        _ = await writer.write("E1", [])
        content = repository.content(PROJECT, "artifacts.json")
        assert content is not None
        assert orjson.loads(content) == []

    async def test_mirrors_legacy_document_in_one_commit(
        self,
        mirroring_writer: SnapshotWriter,
        repository: FakeRemoteRepository,
        make_artifact: Callable[..., Artifact],
    ) -> None:
        repository.put(PROJECT, "engagement.json", '{"name": "Acme"}')

        result = await mirroring_writer.write(
            "E1", [make_artifact(uuid="a")], commit_message="Update"
        )

        assert result.mirrored_legacy
        assert repository.writes == [("commit", "101", "artifacts.json,engagement.json")]
        [request] = repository.commits
        assert request.commit_message == "Update"
        assert request.author_name == "Bot"
        assert [action.action for action in request.actions] == [
            FileAction.CREATE,
            FileAction.UPDATE,
        ]
        legacy = repository.content(PROJECT, "engagement.json")
        assert legacy is not None
        assert orjson.loads(legacy)["artifacts"][0]["uuid"] == "a"

    async def test_skips_mirroring_without_legacy_document(
        self,
        mirroring_writer: SnapshotWriter,
        repository: FakeRemoteRepository,
    ) -> None:
        result = await mirroring_writer.write("E1", [])

        assert not result.mirrored_legacy
        assert repository.writes == [("create_file", "101", "artifacts.json")]

    async def test_leaves_legacy_document_when_mirroring_disabled(
        self, writer: SnapshotWriter, repository: FakeRemoteRepository
    ) -> None:
        repository.put(PROJECT, "engagement.json", "{}")
        _ = await writer.write("E1", [], author_email="dev@example.com")
        assert not repository.commits
        assert repository.content(PROJECT, "engagement.json") == "{}"

    async def test_unknown_engagement_raises(self, writer: SnapshotWriter) -> None:
        with pytest.raises(EngagementNotFoundError):
            _ = await writer.write("missing", [])

    async def test_engagement_without_project_raises(
        self, writer: SnapshotWriter, directory: FakeEngagementDirectory
    ) -> None:
        directory.add([Engagement(uuid="E9")])
        with pytest.raises(FatalRemoteError, match="no repository project"):
            _ = await writer.write("E9", [])

    async def test_propagates_write_failures(
        self, writer: SnapshotWriter, repository: FakeRemoteRepository
    ) -> None:
        repository.fail("create_file", TransientRemoteError("gateway down"))
        with pytest.raises(TransientRemoteError):
            _ = await writer.write("E1", [])


# =============================================================================
# read Tests
# =============================================================================


class TestSnapshotWriterRead:
    async def test_parses_snapshot(
        self, writer: SnapshotWriter, repository: FakeRemoteRepository
    ) -> None:
        repository.put(PROJECT, "artifacts.json", '[{"uuid": "a", "title": "Demo"}]')
        artifacts = await writer.read(Engagement(uuid="E1", project_id=PROJECT))
        assert [a.uuid for a in artifacts] == ["a"]

    async def test_missing_snapshot_raises_not_found(self, writer: SnapshotWriter) -> None:
        with pytest.raises(RemoteNotFoundError):
            _ = await writer.read(Engagement(uuid="E1", project_id=PROJECT))

    async def test_malformed_snapshot_raises(
        self, writer: SnapshotWriter, repository: FakeRemoteRepository
    ) -> None:
        repository.put(PROJECT, "artifacts.json", "not json")
        with pytest.raises(SnapshotFormatError):
            _ = await writer.read(Engagement(uuid="E1", project_id=PROJECT))

    def test_branch_follows_config(
        self, repository: FakeRemoteRepository, directory: FakeEngagementDirectory
    ) -> None:
        writer = SnapshotWriter(
            repository, directory, config=RepositoryConfig(default_branch="main")
        )
        assert writer.branch == "main"
