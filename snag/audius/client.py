"""
Audius API client for snag.

This module wraps the public Audius REST API behind one small async class.
Every request goes through AudiusClient.call(), which adds the application
identity, unwraps the {"data": ...} envelope, and turns every failure into
a NetworkError or EnvelopeError.

Explicit instances:
    AudiusClient is constructed explicitly and passed to the resolver and
    hydrator. Tests inject a subclass or a client bound to a local test
    server; nothing in snag reaches for a global client.

Session ownership:
    Pass an aiohttp.ClientSession to share one, or use the client as an
    async context manager and it opens (and closes) its own:

        async with AudiusClient.from_config(config.api) as client:
            data = await client.track("abc123")

No retries:
    The API layer never retries. The resolver treats a failed request as a
    failed strategy and moves on; only image downloads are retried.

Endpoints:
    /v1/users/handle/{handle}              user_by_handle()
    /v1/users/{id}                         user()
    /v1/users/{id}/tracks                  user_tracks()
    /v1/users/{id}/playlists               user_playlists()
    /v1/tracks/{id}                        track()
    /v1/resolve?url=...                    resolve()
    /v1/playlists/{id}                     playlist()
    /v1/playlists/by_permalink/{h}/{slug}  playlist_by_permalink()
    /v1/playlists/search?query=...         search_playlists()
    /v1/playlists/{id}/tracks              playlist_tracks()
"""

import asyncio
import json
from typing import Any
from urllib.parse import quote

import aiohttp

from snag.core.config import API_HOSTS, DEFAULT_APP_NAME, ApiConfig
from snag.core.exceptions import EnvelopeError, NetworkError
from snag.core.logger import get_logger


logger = get_logger(__name__)

AUDIUS_WEB_ROOT = "https://audius.co"


def _render_param(value: Any) -> str:
    # Audius expects lowercase booleans
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _segment(value: str) -> str:
    return quote(str(value), safe="")


class AudiusClient:
    """
    Async client for the Audius discovery API.

    Attributes:
        host: Base URL, without trailing slash.
        app_name: Sent as the first query parameter of every request.
        request_timeout: Total timeout for each request in seconds, applied
                         only to sessions this client opens itself.

    Example:
        async with AudiusClient() as client:
            user = await client.user_by_handle("skrillex")
            profile = await client.user(user["id"])
    """

    def __init__(
        self,
        host: str = API_HOSTS[0],
        app_name: str = DEFAULT_APP_NAME,
        session: aiohttp.ClientSession | None = None,
        request_timeout: float | None = 30.0
    ) -> None:
        self.host = host.rstrip("/")
        self.app_name = app_name
        self.request_timeout = request_timeout
        self._session = session
        self._owns_session = False

    @classmethod
    def from_config(
        cls,
        api_config: ApiConfig,
        session: aiohttp.ClientSession | None = None
    ) -> "AudiusClient":
        """Create a client from the 'api' configuration section."""
        return cls(
            host=api_config.host,
            app_name=api_config.app_name,
            session=session,
            request_timeout=api_config.request_timeout
        )

    async def __aenter__(self) -> "AudiusClient":
        self._ensure_session()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            timeout = (
                aiohttp.ClientTimeout(total=self.request_timeout)
                if self.request_timeout is not None
                else aiohttp.ClientTimeout()
            )
            self._session = aiohttp.ClientSession(timeout=timeout)
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        """
        Close the HTTP session if this client opened it.

        Injected sessions belong to the caller and are left open.
        Safe to call multiple times.
        """
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._owns_session = False

    # =========================================================================
    # CORE REQUEST
    # =========================================================================

    async def call(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        """
        Perform one GET request and return the unwrapped 'data' payload.

        Args:
            endpoint: Path beginning with '/', e.g. "/v1/tracks/abc123".
            params: Extra query parameters. None values are skipped,
                    booleans are sent as "true"/"false".

        Returns:
            The value under the 'data' key. A null or empty payload is
            returned as-is; callers decide what "empty" means.

        Raises:
            NetworkError: Transport failure or timeout (status None), or any
                          non-2xx status (status and body populated).
            EnvelopeError: The body is not a JSON object with a 'data' key.
        """
        query: dict[str, str] = {"app_name": self.app_name}
        for key, value in (params or {}).items():
            if value is not None:
                query[key] = _render_param(value)

        url = f"{self.host}{endpoint}"
        logger.debug(f"GET {url} {query}")

        session = self._ensure_session()
        try:
            async with session.get(url, params=query) as response:
                status = response.status
                reason = response.reason or ""
                body = await response.text()
        except (aiohttp.ClientError, asyncio.TimeoutError) as e:
            raise NetworkError(
                f"API request failed: {endpoint} - {str(e) or type(e).__name__}",
                status=None,
                details={"url": url, "original_error": repr(e)}
            ) from e

        if not 200 <= status < 300:
            raise NetworkError(
                f"API request failed: {status} {reason}".rstrip(),
                status=status,
                body=body,
                details={"url": url}
            )

        try:
            payload = json.loads(body)
        except ValueError as e:
            raise EnvelopeError(
                f"API response is not JSON: {endpoint}",
                details={"url": url, "body": body[:200]}
            ) from e

        if not isinstance(payload, dict) or "data" not in payload:
            raise EnvelopeError(
                f"Invalid API response format: missing data wrapper ({endpoint})",
                details={"url": url}
            )

        return payload["data"]

    # =========================================================================
    # USERS
    # =========================================================================

    async def user_by_handle(self, handle: str) -> Any:
        return await self.call(f"/v1/users/handle/{_segment(handle)}")

    async def user(self, user_id: str) -> Any:
        return await self.call(f"/v1/users/{_segment(user_id)}")

    async def user_tracks(
        self,
        user_id: str,
        limit: int = 100,
        offset: int = 0,
        sort: str = "date"
    ) -> Any:
        return await self.call(
            f"/v1/users/{_segment(user_id)}/tracks",
            {"limit": limit, "offset": offset, "sort": sort}
        )

    async def user_playlists(self, user_id: str, limit: int = 100, offset: int = 0) -> Any:
        return await self.call(
            f"/v1/users/{_segment(user_id)}/playlists",
            {"limit": limit, "offset": offset}
        )

    # =========================================================================
    # TRACKS
    # =========================================================================

    async def track(self, track_id: str) -> Any:
        return await self.call(f"/v1/tracks/{_segment(track_id)}")

    async def resolve(self, permalink: str) -> Any:
        """
        Resolve an audius.co path ("someone/some-track") to its entity.

        The API answers with the entity itself (following its redirect to
        the canonical endpoint).
        """
        url = f"{AUDIUS_WEB_ROOT}/{permalink.strip('/')}"
        return await self.call("/v1/resolve", {"url": url})

    # =========================================================================
    # PLAYLISTS
    # =========================================================================

    async def playlist(self, playlist_id: str) -> Any:
        return await self.call(f"/v1/playlists/{_segment(playlist_id)}")

    async def playlist_by_permalink(self, handle: str, slug: str) -> Any:
        return await self.call(
            f"/v1/playlists/by_permalink/{_segment(handle)}/{_segment(slug)}"
        )

    async def search_playlists(self, query: str) -> Any:
        return await self.call("/v1/playlists/search", {"query": query})

    async def playlist_tracks(self, playlist_id: str) -> Any:
        return await self.call(f"/v1/playlists/{_segment(playlist_id)}/tracks")
