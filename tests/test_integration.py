"""Integration tests"""

import io
import json
import zipfile

import pytest

from conftest import FakeFetcher, StubAudiusClient, make_track
from snag.core.config import Config, DownloadConfig
from snag.core.exceptions import InvalidIdentifierError, NotFoundError
from snag.core.logger import setup_logging, shutdown_logging
from snag.engine import resolve_and_build_archive, write_archive


class TestResolveAndBuildArchive:
    """Test the pipeline end to end with stubbed collaborators"""

    @pytest.mark.asyncio
    async def test_track_permalink(self, sample_track_data):
        client = StubAudiusClient({
            "/v1/resolve": {"id": "abc123", "title": "First Light"},
            "/v1/tracks/abc123": sample_track_data,
        })

        result = await resolve_and_build_archive(
            "dj.someone/first-light",
            client=client,
            fetcher=FakeFetcher()
        )

        assert result.filename == "First Light - track assets [snagged].zip"
        assert client.endpoints() == ["/v1/resolve", "/v1/tracks/abc123"]
        with zipfile.ZipFile(io.BytesIO(result.data)) as archive:
            manifest = json.loads(archive.read("metadata.json"))
        assert manifest["type"] == "track"
        assert manifest["content"]["id"] == "abc123"

    @pytest.mark.asyncio
    async def test_album_url(self, sample_playlist_data):
        client = StubAudiusClient({
            "/v1/playlists/by_permalink/dj.someone/night-drive": [sample_playlist_data],
            "/v1/playlists/pl1/tracks": [{"id": "t1"}, {"id": "t2"}],
            "/v1/tracks/t1": make_track("t1", "One"),
            "/v1/tracks/t2": make_track("t2", "Two"),
        })
        config = Config(download=DownloadConfig(concurrency=2))

        result = await resolve_and_build_archive(
            "https://audius.co/dj.someone/album/night-drive",
            client=client,
            fetcher=FakeFetcher(),
            config=config
        )

        assert result.filename == "Night Drive - album assets [snagged].zip"
        assert result.images_complete is True

    @pytest.mark.asyncio
    async def test_invalid_identifier_makes_no_request(self):
        client = StubAudiusClient()

        with pytest.raises(InvalidIdentifierError):
            await resolve_and_build_archive(
                "someone/mixtape/x",
                "playlist",
                client=client,
                fetcher=FakeFetcher()
            )

        assert client.calls == []

    @pytest.mark.asyncio
    async def test_unknown_artist(self):
        client = StubAudiusClient()

        with pytest.raises(NotFoundError):
            await resolve_and_build_archive("ghost", client=client, fetcher=FakeFetcher())


class TestWriteArchive:
    """Test archive output and log files"""

    @pytest.mark.asyncio
    async def test_written_under_suggested_name(self, temp_dir, sample_track_data):
        client = StubAudiusClient({"/v1/tracks/abc123": sample_track_data})
        result = await resolve_and_build_archive(
            "abc123", "track", client=client, fetcher=FakeFetcher()
        )

        path = write_archive(result, temp_dir / "out")

        assert path == temp_dir / "out" / result.filename
        assert path.read_bytes() == result.data

    def test_asset_failures_reported_to_file(self, temp_dir):
        from snag.core.logger import get_logger, log_asset_failure

        setup_logging(temp_dir)
        try:
            log_asset_failure(
                get_logger("snag.tests"),
                "cover",
                "dj.someone",
                "https://img.example/x.jpg",
                "HTTP 500"
            )
        finally:
            shutdown_logging()

        reports = list((temp_dir / "logs").glob("asset_failures_*"))
        assert len(reports) == 1
        content = reports[0].read_text(encoding="utf-8")
        assert "dj.someone" in content
        assert "https://img.example/x.jpg" in content
