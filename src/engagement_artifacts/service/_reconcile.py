"""Artifact reconciliation.

The engine brings the document store in line with a submitted artifact list
and records the result in the engagement's snapshot. Work for one engagement
is serialized by a ``KeyedLock``; different engagements proceed in parallel.
"""

from collections.abc import Callable, Sequence
from dataclasses import dataclass, field

import anyio
from structlog.typing import FilteringBoundLogger

from engagement_artifacts.artifacts import (
    Artifact,
    ChangeSet,
    assign_identities,
    compute_change_set,
    new_uuid,
    validate_submission,
)
from engagement_artifacts.config import CommitConfig
from engagement_artifacts.engagements import EngagementDirectoryProtocol
from engagement_artifacts.exceptions import (
    ArtifactsError,
    ArtifactValidationError,
    RemoteError,
    SnapshotFormatError,
)
from engagement_artifacts.service._locks import KeyedLock
from engagement_artifacts.service._snapshot import SnapshotWriter
from engagement_artifacts.store import ArtifactStoreProtocol
from engagement_artifacts.utils import create_service_logger, not_before, utc_now


@dataclass(frozen=True, slots=True)
class BulkUpdateResult:
    """Outcome of a bulk update.

    Attributes:
        engagements: Artifact count per successfully reconciled engagement.
        failed: Error message per engagement whose reconciliation failed.
    """

    engagements: dict[str, int] = field(default_factory=dict)
    failed: dict[str, str] = field(default_factory=dict)

    @property
    def succeeded(self) -> bool:
        """Whether every engagement group was reconciled."""
        return not self.failed


def build_commit_message(message: str, change_set: ChangeSet) -> str:
    """Append the change-log to a commit message.

    Args:
        message: Commit summary line.
        change_set: Changes being committed.

    Returns:
        The summary, a blank line, then one line per change.
    """
    lines = change_set.change_log()
    if not lines:
        return message
    return "\n".join([message, "", *lines])


class ReconciliationEngine:
    """Applies submitted artifact lists to the store and the repository.

    Example:
        >>> engine = ReconciliationEngine(store, writer, directory)
        >>> await engine.update_engagement("e1", [Artifact(title="Demo", ...)])
    """

    def __init__(
        self,
        store: ArtifactStoreProtocol,
        writer: SnapshotWriter,
        directory: EngagementDirectoryProtocol,
        *,
        commit: CommitConfig | None = None,
        locks: KeyedLock | None = None,
        bulk_workers: int = 4,
        clock: Callable[[], str] = utc_now,
        id_factory: Callable[[], str] = new_uuid,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the engine.

        Args:
            store: Document store.
            writer: Snapshot writer for the remote repository.
            directory: Engagement directory notified of count changes.
            commit: Commit defaults.
            locks: Per-engagement locks, shared with the refresh orchestrator.
            bulk_workers: Engagement groups reconciled concurrently.
            clock: Source of ISO-8601 timestamps.
            id_factory: Identity generator for artifacts without a uuid.
            logger: Logger for reconciliation events.
        """
        self._store: ArtifactStoreProtocol = store
        self._writer: SnapshotWriter = writer
        self._directory: EngagementDirectoryProtocol = directory
        self._commit: CommitConfig = commit or CommitConfig()
        self._locks: KeyedLock = locks or KeyedLock()
        self._bulk_workers: int = bulk_workers
        self._clock: Callable[[], str] = clock
        self._id_factory: Callable[[], str] = id_factory
        self._logger: FilteringBoundLogger = logger or create_service_logger(
            component="reconcile"
        )

    @property
    def locks(self) -> KeyedLock:
        """Per-engagement locks shared with snapshot application."""
        return self._locks

    # =========================================================================
    # Client Updates
    # =========================================================================

    async def update_engagement(
        self,
        engagement_uuid: str,
        artifacts: Sequence[Artifact],
        *,
        region: str | None = None,
        author_email: str | None = None,
        author_name: str | None = None,
        commit_message: str | None = None,
    ) -> list[Artifact]:
        """Replace one engagement's artifacts with the submitted list.

        Every submitted artifact is assigned to ``engagement_uuid``; those
        without a region get ``region``.

        Args:
            engagement_uuid: Engagement being updated.
            artifacts: Full intended artifact list for the engagement.
            region: Region for artifacts that carry none.
            author_email: Commit author email.
            author_name: Commit author name.
            commit_message: Commit summary line.

        Returns:
            The engagement's artifacts after reconciliation.

        Raises:
            ArtifactValidationError: If the submission is invalid. Nothing is
                changed.
            StoreError: If the store fails.
            RemoteError: If the snapshot cannot be written. Store changes
                are kept.
        """
        validate_submission(artifacts)
        stamped = [
            artifact.model_copy(
                update={
                    "engagement_uuid": engagement_uuid,
                    "region": artifact.region or region,
                }
            )
            for artifact in artifacts
        ]
        return await self._reconcile(
            engagement_uuid,
            stamped,
            author_email=author_email,
            author_name=author_name,
            commit_message=commit_message,
        )

    async def update_bulk(
        self,
        artifacts: Sequence[Artifact],
        *,
        author_email: str | None = None,
        author_name: str | None = None,
        commit_message: str | None = None,
    ) -> BulkUpdateResult:
        """Reconcile a mixed artifact list, one engagement at a time.

        Artifacts are grouped by ``engagement_uuid`` and each group replaces
        that engagement's artifacts. Groups run concurrently and a failing
        group does not affect the others.

        Raises:
            ArtifactValidationError: If the submission is invalid. Nothing is
                changed.
        """
        validate_submission(artifacts, require_engagement=True)

        groups: dict[str, list[Artifact]] = {}
        for artifact in artifacts:
            groups.setdefault(artifact.engagement_uuid or "", []).append(artifact)

        engagements: dict[str, int] = {}
        failed: dict[str, str] = {}
        limiter = anyio.CapacityLimiter(self._bulk_workers)

        async def _run(engagement_uuid: str, group: list[Artifact]) -> None:
            async with limiter:
                try:
                    current = await self._reconcile(
                        engagement_uuid,
                        group,
                        author_email=author_email,
                        author_name=author_name,
                        commit_message=commit_message,
                    )
                except ArtifactsError as e:
                    self._logger.error(
                        "bulk_group_failed",
                        engagement_uuid=engagement_uuid,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    failed[engagement_uuid] = str(e)
                except Exception as e:
                    self._logger.exception(
                        "bulk_group_failed",
                        engagement_uuid=engagement_uuid,
                        error_type=type(e).__name__,
                    )
                    failed[engagement_uuid] = str(e) or type(e).__name__
                else:
                    engagements[engagement_uuid] = len(current)

        async with anyio.create_task_group() as tg:
            for engagement_uuid, group in groups.items():
                tg.start_soon(_run, engagement_uuid, group)

        self._logger.info(
            "bulk_update_completed",
            engagements=len(engagements),
            failed=len(failed),
        )
        return BulkUpdateResult(engagements=engagements, failed=failed)

    # =========================================================================
    # Refresh Path
    # =========================================================================

    async def apply_snapshot(
        self, engagement_uuid: str, artifacts: Sequence[Artifact]
    ) -> int:
        """Upsert artifacts read from an engagement's snapshot.

        No change-set is computed and nothing is committed. Snapshot
        timestamps are kept for new records.

        Args:
            engagement_uuid: Engagement the snapshot belongs to.
            artifacts: Parsed snapshot content.

        Returns:
            Number of artifacts written.
        """
        identified = assign_identities(
            [
                artifact.model_copy(update={"engagement_uuid": engagement_uuid})
                for artifact in artifacts
            ],
            id_factory=self._id_factory,
        )
        async with self._locks.hold(engagement_uuid):
            for artifact in identified:
                existing = await self._store.find_by_uuid(artifact.uuid or "")
                if existing is None:
                    created = artifact.created or self._clock()
                    _ = await self._store.create(
                        artifact.model_copy(
                            update={
                                "created": created,
                                "modified": artifact.modified or created,
                            }
                        )
                    )
                else:
                    _ = await self._store.update(self._as_update(artifact, existing))
        self._logger.debug(
            "snapshot_applied", engagement_uuid=engagement_uuid, artifacts=len(identified)
        )
        return len(identified)

    # =========================================================================
    # Internals
    # =========================================================================

    def _as_update(self, incoming: Artifact, existing: Artifact) -> Artifact:
        return incoming.model_copy(
            update={
                "id": existing.id,
                "created": existing.created,
                "modified": not_before(self._clock(), existing.modified),
            }
        )

    async def _reconcile(
        self,
        engagement_uuid: str,
        artifacts: Sequence[Artifact],
        *,
        author_email: str | None,
        author_name: str | None,
        commit_message: str | None,
    ) -> list[Artifact]:
        async with self._locks.hold(engagement_uuid):
            existing = await self._store.list_by_engagement(engagement_uuid)
            change_set = compute_change_set(
                engagement_uuid, artifacts, existing, id_factory=self._id_factory
            )
            if change_set.is_empty:
                self._logger.debug("no_changes", engagement_uuid=engagement_uuid)
                return existing

            await self._check_ownership(change_set)
            await self._apply(change_set)
            current = await self._store.list_by_engagement(engagement_uuid)
            self._logger.info(
                "artifacts_reconciled",
                engagement_uuid=engagement_uuid,
                created=len(change_set.created),
                updated=len(change_set.updated),
                deleted=len(change_set.deleted),
            )

            message = build_commit_message(
                commit_message or self._commit.message, change_set
            )
            try:
                _ = await self._writer.write(
                    engagement_uuid,
                    current,
                    author_email=author_email,
                    author_name=author_name,
                    commit_message=message,
                )
            except (RemoteError, SnapshotFormatError) as e:
                # Store already holds the new state; the next write or refresh converges
                self._logger.error(
                    "snapshot_write_failed",
                    engagement_uuid=engagement_uuid,
                    error=str(e),
                    error_type=type(e).__name__,
                )
                raise

            if len(current) != len(existing):
                await self._notify_count(engagement_uuid, len(current))
            return current

    async def _check_ownership(self, change_set: ChangeSet) -> None:
        for artifact in change_set.created:
            owner = await self._store.find_by_uuid(artifact.uuid or "")
            if owner is not None:
                msg = (
                    f"Artifact '{artifact.uuid}' belongs to engagement "
                    f"'{owner.engagement_uuid}'"
                )
                raise ArtifactValidationError(msg, artifact_id=artifact.uuid, field="uuid")

    async def _apply(self, change_set: ChangeSet) -> None:
        for uuid in change_set.deleted_uuids:
            _ = await self._store.delete_by_uuid(uuid)

        now = self._clock()
        for artifact in change_set.created:
            _ = await self._store.create(
                artifact.model_copy(update={"created": now, "modified": now})
            )
        for update in change_set.updated:
            _ = await self._store.update(self._as_update(update.incoming, update.existing))

    async def _notify_count(self, engagement_uuid: str, count: int) -> None:
        try:
            await self._directory.update_artifact_count(engagement_uuid, count)
        except RemoteError as e:
            self._logger.warning(
                "engagement_count_update_failed",
                engagement_uuid=engagement_uuid,
                count=count,
                error=str(e),
            )
