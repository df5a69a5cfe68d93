"""Service wiring from configuration."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass
from typing import Self

import anyio.to_thread
from structlog.typing import FilteringBoundLogger

from engagement_artifacts.config import Config
from engagement_artifacts.engagements import (
    EngagementApiClient,
    EngagementDirectoryProtocol,
)
from engagement_artifacts.repository import (
    GitLabRepository,
    LocalGitRepository,
    RemoteRepositoryProtocol,
)
from engagement_artifacts.service._locks import KeyedLock
from engagement_artifacts.service._query import QueryService
from engagement_artifacts.service._reconcile import ReconciliationEngine
from engagement_artifacts.service._refresh import RefreshOrchestrator
from engagement_artifacts.service._snapshot import SnapshotWriter
from engagement_artifacts.store import ArtifactStoreProtocol, SqliteArtifactStore
from engagement_artifacts.utils import create_service_logger


@dataclass(slots=True)
class ArtifactServices:
    """Every service of one running instance, sharing one set of locks.

    Attributes:
        config: Configuration the services were built from.
        store: Document store.
        repository: Remote repository.
        directory: Engagement directory.
        writer: Snapshot writer.
        engine: Reconciliation engine.
        query: Query service.
        refresh: Refresh orchestrator.
        logger: Root service logger.
    """

    config: Config
    store: ArtifactStoreProtocol
    repository: RemoteRepositoryProtocol
    directory: EngagementDirectoryProtocol
    writer: SnapshotWriter
    engine: ReconciliationEngine
    query: QueryService
    refresh: RefreshOrchestrator
    logger: FilteringBoundLogger

    @classmethod
    def assemble(
        cls,
        config: Config,
        store: ArtifactStoreProtocol,
        repository: RemoteRepositoryProtocol,
        directory: EngagementDirectoryProtocol,
        *,
        logger: FilteringBoundLogger | None = None,
    ) -> Self:
        """Wire the services around the given collaborators.

        Args:
            config: Service configuration.
            store: Document store.
            repository: Remote repository.
            directory: Engagement directory.
            logger: Root logger; components bind their own name to it.

        Returns:
            The assembled services.
        """
        log = logger or create_service_logger(config.logging)
        writer = SnapshotWriter(
            repository,
            directory,
            config=config.repository,
            commit=config.commit,
            logger=log.bind(component="snapshot"),
        )
        engine = ReconciliationEngine(
            store,
            writer,
            directory,
            commit=config.commit,
            locks=KeyedLock(),
            bulk_workers=config.concurrency.bulk_workers,
            logger=log.bind(component="reconcile"),
        )
        return cls(
            config=config,
            store=store,
            repository=repository,
            directory=directory,
            writer=writer,
            engine=engine,
            query=QueryService(
                store,
                default_page_size=config.paging.default_page_size,
                logger=log.bind(component="query"),
            ),
            refresh=RefreshOrchestrator(
                store,
                directory,
                writer,
                engine,
                refresh_workers=config.concurrency.refresh_workers,
                logger=log.bind(component="refresh"),
            ),
            logger=log,
        )

    async def aclose(self) -> None:
        """Close the remote clients."""
        await self.repository.aclose()
        await self.directory.aclose()


def build_repository(
    config: Config, logger: FilteringBoundLogger
) -> RemoteRepositoryProtocol:
    """Create the remote repository selected by ``repository.kind``."""
    if config.repository.kind == "local":
        return LocalGitRepository(
            config.repository.local_root, logger=logger.bind(component="local_repository")
        )
    return GitLabRepository(
        config.repository,
        retry=config.retry,
        logger=logger.bind(component="gitlab"),
    )


@asynccontextmanager
async def open_services(config: Config) -> AsyncIterator[ArtifactServices]:
    """Build services backed by SQLite and the configured remotes.

    The SQLite schema is created if needed. Remote clients are closed when
    the context exits.

    Args:
        config: Service configuration.

    Yields:
        The assembled services.
    """
    logger = create_service_logger(config.logging)
    store = SqliteArtifactStore(config.store.path)
    await anyio.to_thread.run_sync(store.initialize)

    services = ArtifactServices.assemble(
        config,
        store,
        build_repository(config, logger),
        EngagementApiClient(
            config.engagements,
            retry=config.retry,
            logger=logger.bind(component="engagements"),
        ),
        logger=logger,
    )
    logger.info(
        "services_started",
        store=str(config.store.path),
        repository=config.repository.kind,
    )
    try:
        yield services
    finally:
        await services.aclose()
        logger.info("services_stopped")
