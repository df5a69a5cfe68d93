# pyright: reportAny=false
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from engagement_artifacts.config import Config
from engagement_artifacts.service import ArtifactServices, open_services
from engagement_artifacts.utils import create_service_logger

from ._errors import install_error_handlers
from ._routes import router as api_router


def create_app(
    config: Config | None = None,
    *,
    services: ArtifactServices | None = None,
) -> FastAPI:
    """Create the artifacts API application.

    When ``services`` is given the application uses it as is and leaves its
    lifecycle to the caller. Otherwise the services are built from
    ``config`` (or ``Config.load()``) on startup and closed on shutdown.

    Args:
        config: Service configuration.
        services: Pre-built services, mainly for tests.

    Returns:
        The FastAPI application.
    """
    if services is not None:
        config = services.config
    elif config is None:
        config = Config.load()
    resolved_config = config

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncGenerator[None]:
        """Build the services unless they were injected.

        Args:
            app: The FastAPI application.

        Yields:
            None
        """
        if getattr(app.state, "services", None) is not None:
            yield
            return
        async with open_services(resolved_config) as built:
            app.state.services = built
            yield
        app.state.services = None

    app = FastAPI(
        title="Engagement Artifacts",
        docs_url=None,
        redoc_url="/api-docs",
        lifespan=lifespan,
    )
    app.state.services = services
    app.include_router(router=api_router)
    install_error_handlers(
        app, create_service_logger(resolved_config.logging, component="server")
    )
    return app
