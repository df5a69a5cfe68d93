# pyright: reportAny=false
"""HTTP request helper shared by the remote clients.

Connection failures, timeouts and gateway errors are retried with a fixed
delay. Every other failure is raised immediately as a ``FatalRemoteError``.
"""

from typing import Any

import httpx
from structlog.typing import FilteringBoundLogger
from tenacity import (
    AsyncRetrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_fixed,
)

from engagement_artifacts.config import RetryConfig
from engagement_artifacts.exceptions import (
    FatalRemoteError,
    RemoteNotFoundError,
    TransientRemoteError,
)

TRANSIENT_STATUS_CODES = frozenset({502, 503, 504})


def raise_for_remote_status(response: httpx.Response) -> None:
    """Translate an error response into a remote exception.

    Args:
        response: Response to inspect.

    Raises:
        RemoteNotFoundError: On 404.
        TransientRemoteError: On 502, 503 or 504.
        FatalRemoteError: On any other 4xx or 5xx status.
    """
    if response.is_success:
        return

    status = response.status_code
    url = str(response.request.url)
    msg = f"{response.request.method} {url} returned {status}"
    if status == 404:  # noqa: PLR2004
        raise RemoteNotFoundError(msg, status_code=status, url=url)
    if status in TRANSIENT_STATUS_CODES:
        raise TransientRemoteError(msg, status_code=status, url=url)
    if status >= 400:  # noqa: PLR2004
        raise FatalRemoteError(msg, status_code=status, url=url)


async def _send_once(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    **kwargs: Any,  # pyright: ignore[reportExplicitAny]
) -> httpx.Response:
    try:
        response = await client.request(method, url, **kwargs)
    except (httpx.ConnectError, httpx.TimeoutException) as e:
        msg = f"{method} {url} failed: {e}"
        raise TransientRemoteError(msg, url=url) from e
    except httpx.HTTPError as e:
        msg = f"{method} {url} failed: {e}"
        raise FatalRemoteError(msg, url=url) from e

    raise_for_remote_status(response)
    return response


async def send_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    *,
    retry_config: RetryConfig,
    logger: FilteringBoundLogger | None = None,
    **kwargs: Any,  # pyright: ignore[reportExplicitAny]
) -> httpx.Response:
    """Send a request, retrying transient failures.

    Args:
        client: The httpx client to use.
        method: HTTP method.
        url: Target URL, relative to the client's base URL.
        retry_config: Attempt count and delay.
        logger: Logger for retry events.
        **kwargs: Passed through to ``httpx.AsyncClient.request``.

    Returns:
        The successful response.

    Raises:
        TransientRemoteError: If every attempt failed transiently.
        FatalRemoteError: On the first non-retryable failure.
    """
    retrying = AsyncRetrying(
        retry=retry_if_exception_type(TransientRemoteError),
        stop=stop_after_attempt(retry_config.attempts),
        wait=wait_fixed(retry_config.delay),
        reraise=True,
    )
    async for attempt in retrying:
        with attempt:
            attempt_number = attempt.retry_state.attempt_number
            if attempt_number > 1 and logger is not None:
                logger.warning(
                    "remote_request_retry",
                    method=method,
                    url=url,
                    attempt=attempt_number,
                )
            return await _send_once(client, method, url, **kwargs)

    msg = f"{method} {url} was not attempted"  # pragma: no cover
    raise TransientRemoteError(msg, url=url)  # pragma: no cover
