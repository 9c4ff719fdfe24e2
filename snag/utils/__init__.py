"""
Utility functions for snag.

This module provides common utility functions used across the application:
    - Filename sanitization (using yt-dlp's sanitize_filename)
    - Display formatting for counters, durations and dates
    - A single parameterised async retry helper
    - Path manipulation helpers

Usage:
    from snag.utils import (
        sanitize_filename,
        format_duration,
        retry_async,
        ensure_directory
    )
"""

import asyncio
from datetime import datetime
from pathlib import Path
from typing import Any, Awaitable, Callable, TypeVar

from yt_dlp.utils import sanitize_filename as yt_dlp_sanitize

from snag.core.logger import get_logger

logger = get_logger(__name__)


T = TypeVar("T")

# Placeholder shown for any missing textual value in generated documents
NOT_AVAILABLE = "N/A"


def sanitize_filename(name: str, restricted: bool = False) -> str:
    """
    Sanitize a string for use as a filename.

    Uses yt-dlp's sanitize_filename function, which already knows every
    character that breaks on Windows, macOS or Linux file systems.

    Args:
        name: The string to sanitize (e.g., track title, artist name).
        restricted: If True, use more aggressive sanitization that
                   removes all special characters. Default False.

    Returns:
        Sanitized string safe for use in filenames and archive entry names.

    Examples:
        sanitize_filename("Hello: World")  # "Hello： World"
        sanitize_filename("AC/DC")         # "AC⧸DC"
    """
    return yt_dlp_sanitize(name, restricted=restricted)


def safe_archive_name(name: str, fallback: str = "untitled") -> str:
    """
    Build the name used for root-level archive entries.

    The display name is sanitized and every '.' becomes '_', so names like
    "dj.snake" never produce entries that look like extra file extensions.

    Example:
        safe_archive_name("dj.snake")  # "dj_snake"
        safe_archive_name("")          # "untitled"
    """
    cleaned = sanitize_filename(name.strip()).replace(".", "_").strip()
    return cleaned or fallback


def ensure_directory(path: Path) -> Path:
    """
    Ensure a directory exists, creating it if necessary.

    Args:
        path: Path to the directory.

    Returns:
        The same path (for chaining).

    Raises:
        OSError: If directory cannot be created (permissions, etc.)
    """
    path.mkdir(parents=True, exist_ok=True)
    return path


# =============================================================================
# FORMATTING
# =============================================================================


def format_duration(seconds: int | float | None) -> str:
    """
    Format duration in seconds to an m:ss string.

    Audius tracks can be long DJ mixes; minutes are never folded into hours
    so the track lists stay uniform.

    Examples:
        format_duration(225)   # "3:45"
        format_duration(3750)  # "62:30"
        format_duration(None)  # "0:00"
    """
    if not seconds or seconds < 0:
        return "0:00"
    total = int(seconds)
    minutes = total // 60
    secs = total % 60
    return f"{minutes}:{secs:02d}"


def format_count(value: Any) -> str:
    """
    Format a counter with thousands separators.

    Missing or non-numeric values become "0".

    Examples:
        format_count(1234567)  # "1,234,567"
        format_count(None)     # "0"
    """
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return "0"
    return f"{int(value):,}"


def format_date(value: Any) -> str:
    """
    Format an API timestamp as a long-form date ("March 5, 2021").

    Audius returns ISO 8601 strings ("2021-03-05T12:00:00Z") as well as
    "YYYY-MM-DD HH:MM:SS" and bare "YYYY-MM-DD". Anything unparsable,
    or missing, becomes "N/A".
    """
    if not isinstance(value, str) or not value.strip():
        return NOT_AVAILABLE

    text = value.strip()
    if text.endswith("Z"):
        text = text[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(text)
    except ValueError:
        try:
            parsed = datetime.strptime(text[:10], "%Y-%m-%d")
        except ValueError:
            return NOT_AVAILABLE

    return f"{parsed.strftime('%B')} {parsed.day}, {parsed.year}"


# =============================================================================
# RETRY
# =============================================================================


async def retry_async(
    operation: Callable[[], Awaitable[T]],
    *,
    max_attempts: int = 3,
    base_delay: float = 1.0,
    retry_on: tuple[type[BaseException], ...] = (Exception,),
    description: str = "operation",
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep
) -> T:
    """
    Run an async operation with exponential backoff between attempts.

    Args:
        operation: Zero-argument callable returning a fresh awaitable per attempt.
        max_attempts: Total number of attempts (not retries). Must be >= 1.
        base_delay: Delay in seconds before the second attempt. Doubled for
                    every further attempt: base, 2*base, 4*base...
        retry_on: Exception types that trigger another attempt. Anything
                  else propagates immediately.
        description: Short label used in debug log messages.
        sleep: Awaitable sleep function, injectable for tests.

    Returns:
        The first successful result.

    Raises:
        The exception from the final attempt once attempts are exhausted.

    Example:
        data = await retry_async(
            lambda: fetch_once(url),
            max_attempts=3,
            base_delay=1.0,
            retry_on=(AssetError, aiohttp.ClientError, asyncio.TimeoutError)
        )
    """
    if max_attempts < 1:
        raise ValueError("max_attempts must be at least 1")

    attempt = 1
    while True:
        try:
            return await operation()
        except retry_on as e:
            if attempt >= max_attempts:
                logger.debug(f"{description} failed after {attempt} attempts: {e}")
                raise
            delay = base_delay * (2 ** (attempt - 1))
            logger.debug(
                f"{description} attempt {attempt}/{max_attempts} failed ({e}), "
                f"retrying in {delay:.1f}s"
            )
            await sleep(delay)
            attempt += 1
