from typing import Any, Dict, Mapping

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from redditkit.core.config import settings
from redditkit.core.exceptions import HTTPClientError
from redditkit.core.logging import LogContext, PerformanceLogger
from redditkit.models.objects import RedditObject

logger = LogContext(__name__)


def decode_payload(payload: Any) -> Any:
    """Wrap tagged JSON objects (and lists of them) into RedditObject"""
    if isinstance(payload, dict) and "kind" in payload:
        return RedditObject(kind=payload["kind"], data=payload.get("data"))
    if isinstance(payload, list):
        return [decode_payload(item) for item in payload]
    return payload


class HTTPClient:
    """
    Async transport over the Reddit JSON API.

    Transient network errors are retried with exponential backoff; every
    other failure surfaces as HTTPClientError.
    """

    def __init__(
        self,
        base_url: str = settings.BASE_URL,
        access_token: str = settings.ACCESS_TOKEN,
        user_agent: str = settings.USER_AGENT,
        timeout: float = settings.REQUEST_TIMEOUT,
        max_retries: int = settings.MAX_RETRIES,
        retry_max_wait: float = settings.RETRY_MAX_WAIT,
        retry_multiplier: float = 0.5,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        headers = {"User-Agent": user_agent, "Accept": "application/json"}
        if access_token:
            headers["Authorization"] = f"Bearer {access_token}"

        self.max_retries = max(1, max_retries)
        self.retry_max_wait = retry_max_wait
        self.retry_multiplier = retry_multiplier
        self._client = httpx.AsyncClient(
            base_url=base_url,
            headers=headers,
            timeout=timeout,
            transport=transport,
        )

        logger.debug(
            "HTTPClient initialized",
            extra={
                "base_url": base_url,
                "max_retries": self.max_retries,
                "authenticated": bool(access_token),
            },
        )

    async def __aenter__(self) -> "HTTPClient":
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()

    async def close(self) -> None:
        await self._client.aclose()

    async def get(self, path: str, query: Mapping[str, str] | None = None) -> Any:
        return await self.request("GET", path, params=dict(query or {}))

    async def post(self, path: str, body: Mapping[str, Any] | None = None) -> Any:
        return await self.request("POST", path, data=dict(body or {}))

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Retrying HTTP request",
            extra={
                "attempt": retry_state.attempt_number,
                "error": str(error),
                "error_type": error.__class__.__name__,
            },
        )

    async def request(
        self,
        method: str,
        path: str,
        params: Dict[str, str] | None = None,
        data: Dict[str, Any] | None = None,
    ) -> Any:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(
                multiplier=self.retry_multiplier, max=self.retry_max_wait
            ),
            retry=retry_if_exception_type(httpx.TransportError),
            before_sleep=self._log_retry,
            reraise=True,
        )

        try:
            with PerformanceLogger(logger, f"{method} {path}"):
                async for attempt in retrying:
                    with attempt:
                        response = await self._client.request(
                            method, path, params=params, data=data
                        )
        except httpx.TransportError as e:
            logger.error(
                "HTTP request failed",
                extra={
                    "error": str(e),
                    "path": path,
                    "method": method,
                    "error_type": e.__class__.__name__,
                },
            )
            raise HTTPClientError(
                detail=f"Failed to make HTTP request: {str(e)}", url=path
            ) from e

        if response.is_error:
            logger.warning(
                "HTTP error response",
                extra={
                    "path": path,
                    "method": method,
                    "status_code": response.status_code,
                },
            )
            raise HTTPClientError(
                detail=f"{method} {path} returned {response.status_code}",
                status_code=response.status_code,
                url=path,
            )

        try:
            payload = response.json()
        except ValueError as e:
            raise HTTPClientError(
                detail=f"Invalid JSON in response to {method} {path}",
                status_code=response.status_code,
                url=path,
            ) from e

        return decode_payload(payload)
