"""Snapshot files in the remote repository.

The writer turns an engagement's authoritative artifact list into its
snapshot file (and, optionally, the legacy engagement document) and commits
the result. The reader fetches and parses a snapshot for refreshes.
"""

from collections.abc import Sequence
from dataclasses import dataclass

from structlog.typing import FilteringBoundLogger

from engagement_artifacts.artifacts import (
    Artifact,
    Engagement,
    dump_snapshot,
    merge_legacy_document,
    parse_snapshot,
)
from engagement_artifacts.config import CommitConfig, RepositoryConfig
from engagement_artifacts.engagements import EngagementDirectoryProtocol
from engagement_artifacts.exceptions import FatalRemoteError, RemoteNotFoundError
from engagement_artifacts.repository import (
    CommitAction,
    CommitRequest,
    FileAction,
    ProjectId,
    RemoteRepositoryProtocol,
    RepositoryFile,
)
from engagement_artifacts.utils import create_service_logger


@dataclass(frozen=True, slots=True)
class WriteResult:
    """Outcome of one snapshot write.

    Attributes:
        engagement_uuid: Engagement whose snapshot was written.
        project_id: Repository project written to.
        action: Whether the snapshot file was created or updated.
        files: Repository paths written, in commit order.
    """

    engagement_uuid: str
    project_id: ProjectId
    action: FileAction
    files: tuple[str, ...]

    @property
    def mirrored_legacy(self) -> bool:
        return len(self.files) > 1


def _project_id(engagement: Engagement, engagement_uuid: str) -> ProjectId:
    if engagement.project_id is None:
        msg = f"Engagement {engagement_uuid} has no repository project"
        raise FatalRemoteError(msg)
    return engagement.project_id


class SnapshotWriter:
    """Writes engagement snapshots to the remote repository.

    One call produces exactly one remote write: a single file create or
    update, or, when the legacy engagement document is mirrored, one commit
    carrying both files.
    """

    def __init__(
        self,
        repository: RemoteRepositoryProtocol,
        directory: EngagementDirectoryProtocol,
        *,
        config: RepositoryConfig | None = None,
        commit: CommitConfig | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._repository: RemoteRepositoryProtocol = repository
        self._directory: EngagementDirectoryProtocol = directory
        self._config: RepositoryConfig = config or RepositoryConfig()
        self._commit: CommitConfig = commit or CommitConfig()
        self._logger: FilteringBoundLogger = logger or create_service_logger(
            component="snapshot"
        )

    @property
    def branch(self) -> str:
        return self._config.default_branch

    async def read(self, engagement: Engagement) -> list[Artifact]:
        """Fetch and parse an engagement's snapshot.

        Args:
            engagement: Engagement with a uuid and a project id.

        Returns:
            The artifacts in file order.

        Raises:
            RemoteNotFoundError: If the snapshot file does not exist.
            SnapshotFormatError: If the file content cannot be parsed.
            RemoteError: On any other failure.
        """
        project_id = _project_id(engagement, engagement.uuid or "")
        file = await self._repository.get_file(
            project_id, self._config.artifacts_file, ref=self.branch
        )
        return parse_snapshot(file.content, path=file.file_path)

    async def write(
        self,
        engagement_uuid: str,
        artifacts: Sequence[Artifact],
        *,
        author_email: str | None = None,
        author_name: str | None = None,
        commit_message: str | None = None,
    ) -> WriteResult:
        """Commit the given artifacts as the engagement's snapshot.

        Args:
            engagement_uuid: Engagement the artifacts belong to.
            artifacts: Full, authoritative artifact list.
            author_email: Commit author email; configured default if None.
            author_name: Commit author name; configured default if None.
            commit_message: Commit message; configured default if None.

        Returns:
            What was written.

        Raises:
            EngagementNotFoundError: If the engagement is unknown.
            RemoteError: If the repository write fails after retries.
            SnapshotFormatError: If the legacy document cannot be merged.
        """
        engagement = await self._directory.get_engagement(engagement_uuid)
        project_id = _project_id(engagement, engagement_uuid)
        content = dump_snapshot(artifacts)
        action = (
            FileAction.UPDATE
            if await self._exists(project_id, self._config.artifacts_file)
            else FileAction.CREATE
        )

        email = author_email or self._commit.author_email
        name = author_name or self._commit.author_name
        message = commit_message or self._commit.message

        legacy = await self._legacy_document(project_id) if self._config.mirror_legacy else None

        if legacy is not None:
            request = CommitRequest(
                branch=self.branch,
                commit_message=message,
                actions=(
                    CommitAction(action, self._config.artifacts_file, content),
                    CommitAction(
                        FileAction.UPDATE,
                        self._config.engagement_file,
                        merge_legacy_document(legacy.content, artifacts),
                    ),
                ),
                author_email=email,
                author_name=name,
            )
            await self._repository.commit(project_id, request)
            files = (self._config.artifacts_file, self._config.engagement_file)
        else:
            file = RepositoryFile(
                file_path=self._config.artifacts_file,
                content=content,
                branch=self.branch,
                author_email=email,
                author_name=name,
                commit_message=message,
            )
            if action is FileAction.UPDATE:
                await self._repository.update_file(project_id, file)
            else:
                await self._repository.create_file(project_id, file)
            files = (self._config.artifacts_file,)

        self._logger.info(
            "snapshot_written",
            engagement_uuid=engagement_uuid,
            project_id=project_id,
            action=action.value,
            files=list(files),
            artifacts=len(artifacts),
        )
        return WriteResult(
            engagement_uuid=engagement_uuid,
            project_id=project_id,
            action=action,
            files=files,
        )

    async def _exists(self, project_id: ProjectId, file_path: str) -> bool:
        try:
            _ = await self._repository.get_file(project_id, file_path, ref=self.branch)
        except RemoteNotFoundError:
            return False
        return True

    async def _legacy_document(self, project_id: ProjectId) -> RepositoryFile | None:
        try:
            return await self._repository.get_file(
                project_id, self._config.engagement_file, ref=self.branch
            )
        except RemoteNotFoundError:
            self._logger.debug(
                "legacy_document_missing",
                project_id=project_id,
                file_path=self._config.engagement_file,
            )
            return None
