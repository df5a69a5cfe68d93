"""Mapping of service exceptions onto HTTP responses."""

from typing import Final

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse
from structlog.typing import FilteringBoundLogger

from engagement_artifacts.exceptions import (
    ArtifactsError,
    ArtifactValidationError,
    EngagementNotFoundError,
    RemoteError,
    SnapshotFormatError,
    StoreError,
)

# Handlers are resolved along the exception MRO
ERROR_STATUS: Final[dict[type[ArtifactsError], int]] = {
    ArtifactValidationError: 400,
    EngagementNotFoundError: 404,
    RemoteError: 502,
    SnapshotFormatError: 502,
    StoreError: 503,
}


def install_error_handlers(app: FastAPI, logger: FilteringBoundLogger) -> None:
    """Register a JSON ``{"detail": ...}`` handler per service exception."""

    for error_type, status_code in ERROR_STATUS.items():

        async def _handle(
            request: Request, exc: Exception, status_code: int = status_code
        ) -> JSONResponse:
            log = logger.warning if status_code < 500 else logger.error  # noqa: PLR2004
            log(
                "request_failed",
                method=request.method,
                path=request.url.path,
                status_code=status_code,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return JSONResponse(status_code=status_code, content={"detail": str(exc)})

        app.add_exception_handler(error_type, _handle)
