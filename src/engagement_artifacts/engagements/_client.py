# pyright: reportAny=false
"""HTTP client for the engagement API."""

from types import TracebackType
from typing import Self, cast
from urllib.parse import quote

import httpx
import orjson
from pydantic import TypeAdapter, ValidationError
from structlog.typing import FilteringBoundLogger

from engagement_artifacts.artifacts import Engagement
from engagement_artifacts.config import EngagementsConfig, RetryConfig
from engagement_artifacts.exceptions import (
    EngagementNotFoundError,
    FatalRemoteError,
    RemoteNotFoundError,
)
from engagement_artifacts.utils import create_service_logger, send_with_retry

ENGAGEMENTS_PATH = "/api/v2/engagements"

_ENGAGEMENT_LIST: TypeAdapter[list[Engagement]] = TypeAdapter(list[Engagement])


class EngagementApiClient:
    """Engagement directory served by the engagement API.

    Example:
        >>> async with EngagementApiClient(EngagementsConfig()) as directory:
        ...     engagement = await directory.get_engagement("e1")
        ...     engagement.project_id
        42
    """

    def __init__(
        self,
        config: EngagementsConfig,
        *,
        retry: RetryConfig | None = None,
        client: httpx.AsyncClient | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        self._retry: RetryConfig = retry or RetryConfig()
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
        )
        self._logger: FilteringBoundLogger = logger or create_service_logger(
            component="engagements"
        )

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc_val: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    async def aclose(self) -> None:
        """Close the underlying HTTP client if this instance created it."""
        if self._owns_client:
            await self._client.aclose()

    async def list_engagements(self) -> list[Engagement]:
        """Fetch all engagements.

        Raises:
            FatalRemoteError: If the body is not a list of engagements.
        """
        response = await send_with_retry(
            self._client,
            "GET",
            ENGAGEMENTS_PATH,
            retry_config=self._retry,
            logger=self._logger,
        )
        try:
            return _ENGAGEMENT_LIST.validate_json(response.content)
        except ValidationError as e:
            msg = f"Engagement API returned an invalid engagement list: {e}"
            raise FatalRemoteError(
                msg, status_code=response.status_code, url=ENGAGEMENTS_PATH
            ) from e

    async def get_engagement(self, engagement_uuid: str) -> Engagement:
        """Fetch one engagement.

        Raises:
            EngagementNotFoundError: If the API answers 404.
            FatalRemoteError: If the body is not an engagement.
        """
        url = f"{ENGAGEMENTS_PATH}/{quote(engagement_uuid, safe='')}"
        try:
            response = await send_with_retry(
                self._client,
                "GET",
                url,
                retry_config=self._retry,
                logger=self._logger,
            )
        except RemoteNotFoundError as e:
            msg = f"Engagement {engagement_uuid} not found"
            raise EngagementNotFoundError(
                msg, engagement_uuid=engagement_uuid, url=e.url
            ) from e

        try:
            data = cast("object", orjson.loads(response.content))
            return Engagement.model_validate(data)
        except (orjson.JSONDecodeError, ValidationError) as e:
            msg = f"Engagement API returned an invalid engagement: {e}"
            raise FatalRemoteError(msg, status_code=response.status_code, url=url) from e

    async def update_artifact_count(self, engagement_uuid: str, count: int) -> None:
        url = f"{ENGAGEMENTS_PATH}/{quote(engagement_uuid, safe='')}/artifacts/{count}"
        _ = await send_with_retry(
            self._client,
            "PUT",
            url,
            retry_config=self._retry,
            logger=self._logger,
        )
        self._logger.debug(
            "engagement_count_reported", engagement_uuid=engagement_uuid, count=count
        )
