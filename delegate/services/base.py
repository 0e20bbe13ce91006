"""Shared HTTP plumbing for the Delegate backend clients."""

import asyncio
import logging
from collections.abc import Awaitable, Callable
from typing import Any

import httpx

from ..campaign.errors import CollaboratorError

logger = logging.getLogger(__name__)


class DelegateApiClient:
    """Async JSON client for the Delegate backend.

    Every endpoint answers ``{"success": bool, "data": ..., "error": str}``.
    Transport errors and ``success: false`` answers are retried with a
    linear back-off (``retry_delay * attempt``); after the last attempt a
    ``CollaboratorError`` is raised.
    """

    name = "delegate-api"

    def __init__(
        self,
        base_url: str,
        *,
        api_token: str = "",
        timeout: float = 20.0,
        retry_attempts: int = 3,
        retry_delay: float = 1.0,
        client: httpx.AsyncClient | None = None,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.base_url = base_url.rstrip("/")
        self.retry_attempts = max(1, retry_attempts)
        self.retry_delay = retry_delay
        self._sleep = sleep
        headers = {"Content-Type": "application/json"}
        if api_token:
            headers["Authorization"] = f"Bearer {api_token}"
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(
            base_url=self.base_url, headers=headers, timeout=timeout
        )

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def _request(self, method: str, endpoint: str, payload: dict[str, Any] | None = None) -> Any:
        """Call ``endpoint`` and return the ``data`` member of a successful answer."""
        last_error: Exception | None = None
        for attempt in range(1, self.retry_attempts + 1):
            try:
                response = await self._client.request(method, endpoint, json=payload)
                response.raise_for_status()
                body = response.json()
                if not isinstance(body, dict) or not body.get("success"):
                    error = body.get("error") if isinstance(body, dict) else None
                    raise CollaboratorError(
                        error or f"Request to {endpoint} was not successful", endpoint=endpoint
                    )
                return body.get("data")
            except (httpx.HTTPError, ValueError, CollaboratorError) as e:
                last_error = e
                logger.warning(
                    f"[{self.name}] {method} {endpoint} attempt {attempt}/{self.retry_attempts} failed: {e}"
                )
                if attempt < self.retry_attempts:
                    await self._sleep(self.retry_delay * attempt)

        raise CollaboratorError(
            f"{method} {endpoint} failed after {self.retry_attempts} attempts: {last_error}",
            endpoint=endpoint,
            attempts=self.retry_attempts,
        ) from last_error
