"""Rebuilding the document store from repository snapshots."""

from dataclasses import dataclass, field

import anyio
from structlog.typing import FilteringBoundLogger

from engagement_artifacts.artifacts import Engagement
from engagement_artifacts.engagements import EngagementDirectoryProtocol
from engagement_artifacts.exceptions import (
    RemoteError,
    RemoteNotFoundError,
    SnapshotFormatError,
    StoreError,
)
from engagement_artifacts.service._reconcile import ReconciliationEngine
from engagement_artifacts.service._snapshot import SnapshotWriter
from engagement_artifacts.store import ArtifactQuery, ArtifactStoreProtocol
from engagement_artifacts.utils import create_service_logger


@dataclass(frozen=True, slots=True)
class RefreshResult:
    """Outcome of a refresh.

    Attributes:
        total: Artifacts in the store once the refresh finished.
        refreshed: Engagements whose snapshot was applied (a missing
            snapshot counts as applied with zero artifacts).
        failed: Error message per engagement that could not be refreshed.
    """

    total: int
    refreshed: int = 0
    failed: dict[str, str] = field(default_factory=dict)


class RefreshOrchestrator:
    """Loads every engagement's snapshot into the document store.

    Engagements are processed concurrently up to ``refresh_workers`` at a
    time. A failure for one engagement is recorded and never stops the
    others.
    """

    def __init__(
        self,
        store: ArtifactStoreProtocol,
        directory: EngagementDirectoryProtocol,
        snapshots: SnapshotWriter,
        engine: ReconciliationEngine,
        *,
        refresh_workers: int = 8,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._store: ArtifactStoreProtocol = store
        self._directory: EngagementDirectoryProtocol = directory
        self._snapshots: SnapshotWriter = snapshots
        self._engine: ReconciliationEngine = engine
        self._refresh_workers: int = refresh_workers
        self._logger: FilteringBoundLogger = logger or create_service_logger(
            component="refresh"
        )

    async def purge(self) -> int:
        """Remove every artifact from the store.

        Returns:
            Number of artifacts removed.
        """
        removed = await self._store.delete_all()
        self._logger.info("store_purged", removed=removed)
        return removed

    async def refresh(self) -> RefreshResult:
        """Load all engagements' snapshots into the store.

        Returns:
            Totals and per-engagement failures.

        Raises:
            RemoteError: If the engagement list itself cannot be fetched.
            StoreError: If the final count fails.
        """
        engagements = await self._directory.list_engagements()
        limiter = anyio.CapacityLimiter(self._refresh_workers)
        failed: dict[str, str] = {}
        refreshed = 0

        async def _run(engagement: Engagement, engagement_uuid: str) -> None:
            nonlocal refreshed
            async with limiter:
                try:
                    _ = await self._refresh_engagement(engagement, engagement_uuid)
                except (RemoteError, SnapshotFormatError, StoreError) as e:
                    self._logger.error(
                        "engagement_refresh_failed",
                        engagement_uuid=engagement_uuid,
                        project_id=engagement.project_id,
                        error=str(e),
                        error_type=type(e).__name__,
                    )
                    failed[engagement_uuid] = str(e)
                except Exception as e:
                    self._logger.exception(
                        "engagement_refresh_failed",
                        engagement_uuid=engagement_uuid,
                        project_id=engagement.project_id,
                        error_type=type(e).__name__,
                    )
                    failed[engagement_uuid] = str(e) or type(e).__name__
                else:
                    refreshed += 1

        async with anyio.create_task_group() as tg:
            for engagement in engagements:
                if not engagement.uuid:
                    self._logger.error(
                        "engagement_missing_uuid", project_id=engagement.project_id
                    )
                    continue
                tg.start_soon(_run, engagement, engagement.uuid)

        total = await self._store.count(ArtifactQuery())
        self._logger.info(
            "refresh_completed", total=total, refreshed=refreshed, failed=len(failed)
        )
        return RefreshResult(total=total, refreshed=refreshed, failed=failed)

    async def rebuild(self) -> RefreshResult:
        """Purge the store, then refresh it from the repository."""
        _ = await self.purge()
        return await self.refresh()

    async def _refresh_engagement(self, engagement: Engagement, engagement_uuid: str) -> int:
        try:
            artifacts = await self._snapshots.read(engagement)
        except RemoteNotFoundError:
            self._logger.warning(
                "snapshot_not_found",
                engagement_uuid=engagement_uuid,
                project_id=engagement.project_id,
            )
            return 0
        return await self._engine.apply_snapshot(engagement_uuid, artifacts)
