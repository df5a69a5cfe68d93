# pyright: reportAny=false
"""GitLab REST API repository client.

Files are read and written through the repository files API and multi-file
changes through the commits API. Transient failures are retried by
``send_with_retry``.
"""

from types import TracebackType
from typing import Self, cast
from urllib.parse import quote

import httpx
import orjson
from structlog.typing import FilteringBoundLogger

from engagement_artifacts.config import RepositoryConfig, RetryConfig
from engagement_artifacts.exceptions import FatalRemoteError
from engagement_artifacts.repository._models import (
    CommitRequest,
    ProjectId,
    RepositoryFile,
)
from engagement_artifacts.utils import create_service_logger, send_with_retry

TOKEN_HEADER = "PRIVATE-TOKEN"


class GitLabRepository:
    """Remote repository backed by the GitLab v4 REST API.

    Example:
        >>> async with GitLabRepository(RepositoryConfig(token="...")) as repo:
        ...     file = await repo.get_file(42, "artifacts.json", ref="master")
    """

    def __init__(
        self,
        config: RepositoryConfig,
        *,
        retry: RetryConfig | None = None,
        client: httpx.AsyncClient | None = None,
        logger: FilteringBoundLogger | None = None,
    ) -> None:
        """Initialize the client.

        Args:
            config: Repository settings (base URL, token, timeout).
            retry: Retry policy for transient failures.
            client: Pre-built httpx client, mainly for tests. Owned by the
                caller when given.
            logger: Logger for request events.
        """
        self._config: RepositoryConfig = config
        self._retry: RetryConfig = retry or RetryConfig()
        self._owns_client: bool = client is None
        self._client: httpx.AsyncClient = client or httpx.AsyncClient(
            base_url=config.base_url,
            timeout=config.timeout,
        )
        self._headers: dict[str, str] = (
            {TOKEN_HEADER: config.token} if config.token else {}
        )
        self._logger: FilteringBoundLogger = logger or create_service_logger(
            component="gitlab"
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

    # =========================================================================
    # URLs
    # =========================================================================

    @staticmethod
    def _project_url(project_id: ProjectId) -> str:
        return f"/api/v4/projects/{quote(str(project_id), safe='')}"

    def _file_url(self, project_id: ProjectId, encoded_path: str) -> str:
        return f"{self._project_url(project_id)}/repository/files/{encoded_path}"

    # =========================================================================
    # RemoteRepositoryProtocol Methods
    # =========================================================================

    async def get_file(
        self, project_id: ProjectId, file_path: str, *, ref: str
    ) -> RepositoryFile:
        """Read and decode a file from the files API.

        Raises:
            RemoteNotFoundError: If the project, branch or file is missing.
            FatalRemoteError: If the response body is not a file object.
        """
        url = self._file_url(project_id, quote(file_path, safe=""))
        response = await send_with_retry(
            self._client,
            "GET",
            url,
            retry_config=self._retry,
            logger=self._logger,
            params={"ref": ref},
            headers=self._headers,
        )

        try:
            data = cast("object", orjson.loads(response.content))
        except orjson.JSONDecodeError as e:
            msg = f"GitLab returned invalid JSON for {file_path}: {e}"
            raise FatalRemoteError(msg, status_code=response.status_code, url=url) from e
        if not isinstance(data, dict):
            msg = f"GitLab returned an unexpected body for {file_path}"
            raise FatalRemoteError(msg, status_code=response.status_code, url=url)

        body = cast("dict[str, object]", data)
        file = RepositoryFile(
            file_path=quote(str(body.get("file_path") or file_path), safe=""),
            content=str(body.get("content") or ""),
            branch=str(body.get("ref") or ref),
            encoding=cast("str | None", body.get("encoding")),
        )
        self._logger.debug(
            "repository_file_read", project_id=project_id, file_path=file_path, ref=ref
        )
        return file.decoded()

    async def create_file(self, project_id: ProjectId, file: RepositoryFile) -> None:
        """Create a file with a POST to the files API."""
        await self._write_file("POST", project_id, file)

    async def update_file(self, project_id: ProjectId, file: RepositoryFile) -> None:
        """Replace a file with a PUT to the files API."""
        await self._write_file("PUT", project_id, file)

    async def commit(self, project_id: ProjectId, request: CommitRequest) -> None:
        """Create a multi-file commit with the commits API."""
        url = f"{self._project_url(project_id)}/repository/commits"
        _ = await send_with_retry(
            self._client,
            "POST",
            url,
            retry_config=self._retry,
            logger=self._logger,
            json=request.to_payload(),
            headers=self._headers,
        )
        self._logger.info(
            "repository_commit_created",
            project_id=project_id,
            branch=request.branch,
            files=[action.file_path for action in request.actions],
        )

    async def _write_file(
        self, method: str, project_id: ProjectId, file: RepositoryFile
    ) -> None:
        encoded = file.encoded()
        url = self._file_url(project_id, encoded.file_path)
        payload = encoded.to_payload()
        # The files API takes the plain path in the body and the encoded one in the URL
        payload["file_path"] = file.decoded().file_path
        _ = await send_with_retry(
            self._client,
            method,
            url,
            retry_config=self._retry,
            logger=self._logger,
            json=payload,
            headers=self._headers,
        )
        self._logger.info(
            "repository_file_written",
            project_id=project_id,
            file_path=payload["file_path"],
            method=method,
        )
