"""Test configuration and fixtures"""

import asyncio
import tempfile
from pathlib import Path
from typing import Any

import pytest

from snag.audius.client import AudiusClient
from snag.core.exceptions import NetworkError


class StubAudiusClient(AudiusClient):
    """
    AudiusClient that answers from a routing table instead of the network.

    routes maps an endpoint path to the payload returned for it, to an
    exception instance that is raised, or to a callable taking the request
    params and returning the payload. Unknown endpoints raise a 404
    NetworkError, like the real API. Every call is recorded in order.
    """

    def __init__(self, routes: dict[str, Any] | None = None, delays: dict[str, float] | None = None):
        super().__init__(host="http://stub.invalid", app_name="snag-tests")
        self.routes = dict(routes or {})
        self.delays = dict(delays or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def call(self, endpoint: str, params: dict[str, Any] | None = None) -> Any:
        self.calls.append((endpoint, dict(params or {})))

        delay = self.delays.get(endpoint)
        if delay:
            await asyncio.sleep(delay)

        if endpoint not in self.routes:
            raise NetworkError("API request failed: 404 Not Found", status=404, body="")

        value = self.routes[endpoint]
        if isinstance(value, Exception):
            raise value
        if callable(value):
            return value(dict(params or {}))
        return value

    def endpoints(self) -> list[str]:
        return [endpoint for endpoint, _ in self.calls]


class FakeFetcher:
    """Asset fetcher stand-in returning fixed bytes per URL (None = failed)."""

    def __init__(self, images: dict[str, bytes | None] | None = None, default: bytes | None = b"\xff\xd8jpeg"):
        self.images = dict(images or {})
        self.default = default
        self.requested: list[tuple[Any, str, str]] = []

    async def fetch(self, source: Any, label: str = "image", owner: str = "") -> bytes | None:
        from snag.archive.assets import select_image_url

        self.requested.append((source, label, owner))
        url = select_image_url(source)
        if url is None:
            return None
        return self.images.get(url, self.default)


@pytest.fixture
def temp_dir():
    """Create temporary directory for tests"""
    with tempfile.TemporaryDirectory() as temp_dir:
        yield Path(temp_dir)


@pytest.fixture
def sample_user_data():
    """Full Audius user object"""
    return {
        "id": "u1",
        "handle": "dj.someone",
        "name": "DJ Someone",
        "bio": "Making noise since 2010",
        "location": "Berlin",
        "is_verified": True,
        "is_deactivated": False,
        "is_available": True,
        "follower_count": 1234567,
        "followee_count": 12,
        "track_count": 2,
        "playlist_count": 1,
        "album_count": 1,
        "repost_count": 40,
        "supporter_count": 3,
        "supporting_count": 0,
        "twitter_handle": "djsomeone",
        "website": "https://someone.example",
        "erc_wallet": "0xabc",
        "created_at": "2021-03-05T12:00:00Z",
        "profile_picture": {
            "150x150": "https://img.example/u1/150x150.jpg",
            "480x480": "https://img.example/u1/480x480.jpg",
            "1000x1000": "https://img.example/u1/1000x1000.jpg",
        },
        "cover_photo": {
            "640x": "https://img.example/u1/640x.jpg",
            "2000x": "https://img.example/u1/2000x.jpg",
        },
        "custom_field": "kept in raw",
    }


@pytest.fixture
def sample_track_data(sample_user_data):
    """Full Audius track object with embedded uploader"""
    return {
        "id": "abc123",
        "title": "First Light",
        "permalink": "/dj.someone/first-light",
        "duration": 225,
        "genre": "Electronic",
        "mood": "Energizing",
        "release_date": "2022-07-01T00:00:00Z",
        "play_count": 9876,
        "repost_count": 12,
        "favorite_count": 300,
        "artwork": {
            "150x150": "https://img.example/abc123/150x150.jpg",
            "1000x1000": "https://img.example/abc123/1000x1000.jpg",
        },
        "user": {"id": "u1", "handle": "dj.someone", "name": "DJ Someone"},
    }


def make_track(track_id: str, title: str, duration: int = 200) -> dict[str, Any]:
    """Minimal track object for playlist and listing tests"""
    return {
        "id": track_id,
        "title": title,
        "permalink": f"/dj.someone/{title.lower().replace(' ', '-')}",
        "duration": duration,
        "artwork": {"480x480": f"https://img.example/{track_id}/480x480.jpg"},
        "user": {"id": "u1", "handle": "dj.someone", "name": "DJ Someone"},
    }


@pytest.fixture
def sample_playlist_data():
    """Audius album object"""
    return {
        "id": "pl1",
        "playlist_name": "Night Drive",
        "permalink": "/dj.someone/album/night-drive",
        "description": "",
        "is_album": True,
        "track_count": 3,
        "total_play_count": 5000,
        "repost_count": 5,
        "favorite_count": 7,
        "artwork": {"1000x1000": "https://img.example/pl1/1000x1000.jpg"},
        "user": {"id": "u1", "handle": "dj.someone", "name": "DJ Someone"},
    }
