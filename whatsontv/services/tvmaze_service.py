"""
TVMaze API client

Fetches raw schedule items with retry logic. The items are returned as
untyped JSON; normalization happens in normalizer_service.
"""
import asyncio
import logging
from typing import Any

import httpx


logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://api.tvmaze.com"


class UpstreamFetchError(RuntimeError):
    """Raised when the schedule source cannot be reached or answers with an error"""
    pass


class TvMazeClient:
    """Thin async client for the two TVMaze schedule endpoints"""

    def __init__(
        self,
        base_url: str = DEFAULT_BASE_URL,
        *,
        timeout: float = 10.0,
        max_retries: int = 3,
        backoff_factor: float = 2.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout
        self.max_retries = max(1, max_retries)
        self.backoff_factor = backoff_factor
        self._transport = transport

    async def get_network_schedule(self, date: str, country: str | None = None) -> list[Any]:
        """Schedule of broadcast networks for a date and country"""
        params = {"date": date}
        if country and country.strip():
            params["country"] = country.strip()
        return await self._get_schedule("/schedule", params)

    async def get_web_schedule(self, date: str) -> list[Any]:
        """Schedule of streaming / web channels for a date"""
        return await self._get_schedule("/schedule/web", {"date": date})

    async def _get_schedule(self, path: str, params: dict[str, str]) -> list[Any]:
        body = await self._get_json(path, params)
        if not isinstance(body, list):
            logger.warning("Unexpected response body from %s (%s), treating as empty", path, type(body).__name__)
            return []
        logger.info("Fetched %s schedule items from %s", len(body), path)
        return body

    async def _get_json(self, path: str, params: dict[str, str]) -> Any:
        """
        GET a JSON document with exponential backoff retry logic

        Retries on transient network errors (timeouts, connection errors)
        and 5xx responses. Does NOT retry on 4xx HTTP errors.

        Raises:
            UpstreamFetchError: If the request fails after all retries
        """
        url = f"{self.base_url}{path}"
        last_error: Exception | None = None

        for attempt in range(self.max_retries):
            try:
                async with httpx.AsyncClient(timeout=self.timeout, transport=self._transport) as client:
                    response = await client.get(url, params=params)
                    response.raise_for_status()
                    return response.json()

            except (httpx.TimeoutException, httpx.TransportError) as e:
                last_error = e
                if attempt < self.max_retries - 1:
                    wait_time = self.backoff_factor ** attempt
                    logger.warning(
                        "Request attempt %s/%s to %s failed (transient error): %s. Retrying in %.1fs...",
                        attempt + 1, self.max_retries, path, type(e).__name__, wait_time,
                    )
                    await asyncio.sleep(wait_time)
                else:
                    logger.error("Request to %s failed after %s attempts (transient error)", path, self.max_retries)

            except httpx.HTTPStatusError as e:
                status = e.response.status_code
                if 400 <= status < 500:
                    logger.error("HTTP %s (client error) from %s", status, path)
                    raise UpstreamFetchError(f"TVMaze returned HTTP {status} for {path}") from e

                last_error = e
                if attempt < self.max_retries - 1:
                    wait_time = self.backoff_factor ** attempt
                    logger.warning(
                        "Request attempt %s/%s to %s failed (HTTP %s server error). Retrying in %.1fs...",
                        attempt + 1, self.max_retries, path, status, wait_time,
                    )
                    await asyncio.sleep(wait_time)
                else:
                    logger.error("Request to %s failed after %s attempts (HTTP %s)", path, self.max_retries, status)

            except ValueError as e:
                raise UpstreamFetchError(f"TVMaze returned invalid JSON for {path}") from e

            except httpx.HTTPError as e:
                logger.error("Request to %s failed: %s", path, type(e).__name__)
                raise UpstreamFetchError(f"Request to TVMaze {path} failed: {e}") from e

        raise UpstreamFetchError(
            f"Failed to fetch {path} after {self.max_retries} attempts: {last_error}"
        ) from last_error
