"""
Image asset fetching for snag archives.

Audius serves every image in several sizes. This module picks the best
size available and downloads it with a bounded retry policy. A missing
image never fails an archive: the fetcher returns None and the archive
is marked incomplete.

Size priority (first populated entry wins):
    2000x      cover photo, largest
    1000x1000  profile picture / artwork, largest
    640x       cover photo, medium
    480x480    profile picture / artwork, medium
    150x150    profile picture / artwork, small

A bare URL string is used as-is.

Retry policy:
    Up to max_attempts attempts (default 3) with exponential backoff
    (1s, 2s, ...). An attempt fails on a transport error, a timeout,
    a non-2xx status, a Content-Type that is not image/*, or an empty body.
    Each attempt has its own timeout (default 10 seconds).

Usage:
    async with AssetFetcher.from_config(config.download) as fetcher:
        data = await fetcher.fetch(artist.profile_picture, label="avatar", owner="someone")
"""

import asyncio
from typing import Any, Awaitable, Callable

import aiohttp

from snag.audius.models import ImageSource
from snag.core.config import DownloadConfig
from snag.core.exceptions import AssetError
from snag.core.logger import get_logger, log_asset_failure
from snag.utils import retry_async


logger = get_logger(__name__)

IMAGE_SIZE_PRIORITY = ("2000x", "1000x1000", "640x", "480x480", "150x150")

_RETRYABLE_ERRORS = (AssetError, aiohttp.ClientError, asyncio.TimeoutError)


def select_image_url(source: ImageSource) -> str | None:
    """
    Pick the preferred URL from an image variant map.

    Args:
        source: Size-label mapping, bare URL string, or None.

    Returns:
        The URL for the highest-priority populated size, the string itself
        for a bare URL, or None when nothing usable is present.

    Example:
        select_image_url({"150x150": "a.jpg", "1000x1000": "b.jpg"})  # "b.jpg"
    """
    if isinstance(source, str):
        return source or None
    if not isinstance(source, dict):
        return None

    for size in IMAGE_SIZE_PRIORITY:
        url = source.get(size)
        if url and isinstance(url, str):
            return url
    return None


class AssetFetcher:
    """
    Downloads images with retries.

    Attributes:
        timeout: Wall-clock budget per attempt, in seconds.
        max_attempts: Attempts per image.
        base_delay: Delay before the second attempt; doubles afterwards.
    """

    def __init__(
        self,
        session: aiohttp.ClientSession | None = None,
        timeout: float = 10.0,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
    ) -> None:
        self.timeout = timeout
        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self._sleep = sleep
        self._session = session
        self._owns_session = False

    @classmethod
    def from_config(
        cls,
        download_config: DownloadConfig,
        session: aiohttp.ClientSession | None = None
    ) -> "AssetFetcher":
        """Create a fetcher from the 'download' configuration section."""
        return cls(
            session=session,
            timeout=download_config.image_timeout,
            max_attempts=download_config.max_attempts,
            base_delay=download_config.retry_base_delay
        )

    async def __aenter__(self) -> "AssetFetcher":
        self._ensure_session()
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    def _ensure_session(self) -> aiohttp.ClientSession:
        if self._session is None:
            self._session = aiohttp.ClientSession()
            self._owns_session = True
        return self._session

    async def close(self) -> None:
        if self._owns_session and self._session is not None:
            await self._session.close()
            self._session = None
            self._owns_session = False

    async def fetch(
        self,
        source: ImageSource,
        label: str = "image",
        owner: str = ""
    ) -> bytes | None:
        """
        Download the preferred variant of an image.

        Args:
            source: Variant map or bare URL.
            label: What the image is ("avatar", "cover", "artwork"), for logs.
            owner: Name of the owning entity, for logs.

        Returns:
            The image bytes, or None when there is no usable URL or every
            attempt failed. Never raises for download failures.
        """
        url = select_image_url(source)
        if url is None:
            logger.debug(f"No {label} image available for {owner or 'content'}")
            return None

        if not url.lower().startswith(("http://", "https://")):
            logger.debug(f"Skipping non-http {label} URL for {owner or 'content'}: {url}")
            return None

        try:
            data = await retry_async(
                lambda: self._fetch_once(url),
                max_attempts=self.max_attempts,
                base_delay=self.base_delay,
                retry_on=_RETRYABLE_ERRORS,
                description=f"Download of {label} image",
                sleep=self._sleep
            )
        except _RETRYABLE_ERRORS as e:
            reason = str(e) or type(e).__name__
            log_asset_failure(
                logger,
                label,
                owner,
                url,
                f"{reason} (after {self.max_attempts} attempts)"
            )
            return None

        logger.debug(f"Downloaded {label} image for {owner or 'content'} ({len(data) / 1024:.1f} KB)")
        return data

    async def _fetch_once(self, url: str) -> bytes:
        session = self._ensure_session()
        timeout = aiohttp.ClientTimeout(total=self.timeout)

        async with session.get(url, timeout=timeout) as response:
            if not 200 <= response.status < 300:
                raise AssetError(
                    f"HTTP {response.status}",
                    details={"url": url, "status": response.status}
                )

            content_type = response.headers.get("Content-Type", "")
            if "image/" not in content_type.lower():
                raise AssetError(
                    f"Unexpected content type '{content_type}'",
                    details={"url": url}
                )

            data = await response.read()

        if not data:
            raise AssetError("Empty image body", details={"url": url})

        return data
