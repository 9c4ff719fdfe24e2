"""Test image selection and download retries"""

import logging

import pytest
from aiohttp import web
from aiohttp.test_utils import TestServer

from snag.archive.assets import AssetFetcher, select_image_url


def _image_app(hits):
    async def ok(request):
        hits.append(request.path)
        return web.Response(body=b"\xff\xd8image", content_type="image/jpeg")

    async def broken(request):
        hits.append(request.path)
        return web.Response(status=500, text="no")

    async def html(request):
        hits.append(request.path)
        return web.Response(text="<html></html>", content_type="text/html")

    async def empty(request):
        hits.append(request.path)
        return web.Response(body=b"", content_type="image/png")

    flaky_state = {"count": 0}

    async def flaky(request):
        hits.append(request.path)
        flaky_state["count"] += 1
        if flaky_state["count"] < 3:
            return web.Response(status=503)
        return web.Response(body=b"third time", content_type="image/jpeg")

    app = web.Application()
    app.router.add_get("/ok.jpg", ok)
    app.router.add_get("/broken.jpg", broken)
    app.router.add_get("/page.jpg", html)
    app.router.add_get("/empty.jpg", empty)
    app.router.add_get("/flaky.jpg", flaky)
    return app


def _recording_sleep(delays):
    async def sleep(delay):
        delays.append(delay)
    return sleep


class TestSelectImageUrl:
    """Test size priority"""

    def test_largest_square_preferred(self):
        source = {"150x150": "small.jpg", "1000x1000": "large.jpg"}
        assert select_image_url(source) == "large.jpg"

    def test_cover_sizes(self):
        assert select_image_url({"640x": "medium.jpg", "2000x": "huge.jpg"}) == "huge.jpg"

    def test_empty_entries_skipped(self):
        assert select_image_url({"1000x1000": "", "480x480": "mid.jpg"}) == "mid.jpg"

    def test_bare_string_and_nothing(self):
        assert select_image_url("https://img.example/a.jpg") == "https://img.example/a.jpg"
        assert select_image_url("") is None
        assert select_image_url(None) is None
        assert select_image_url({"mirrors": ["x"]}) is None


class TestAssetFetcher:
    """Test downloads against a local server"""

    @pytest.mark.asyncio
    async def test_download(self):
        hits = []
        async with TestServer(_image_app(hits)) as server:
            async with AssetFetcher() as fetcher:
                data = await fetcher.fetch({"1000x1000": str(server.make_url("/ok.jpg"))})

        assert data == b"\xff\xd8image"
        assert hits == ["/ok.jpg"]

    @pytest.mark.asyncio
    async def test_gives_up_after_three_attempts(self, caplog):
        """Test an always-failing URL is tried exactly three times"""
        hits = []
        delays = []
        async with TestServer(_image_app(hits)) as server:
            async with AssetFetcher(sleep=_recording_sleep(delays)) as fetcher:
                with caplog.at_level(logging.WARNING, logger="snag"):
                    data = await fetcher.fetch(
                        str(server.make_url("/broken.jpg")),
                        label="avatar",
                        owner="someone"
                    )

        assert data is None
        assert hits == ["/broken.jpg"] * 3
        assert delays == [1.0, 2.0]
        failures = [r for r in caplog.records if getattr(r, "asset_failed_label", None) == "avatar"]
        assert len(failures) == 1
        assert failures[0].asset_failed_owner == "someone"

    @pytest.mark.asyncio
    async def test_recovers_on_retry(self):
        hits = []
        async with TestServer(_image_app(hits)) as server:
            async with AssetFetcher(sleep=_recording_sleep([])) as fetcher:
                data = await fetcher.fetch(str(server.make_url("/flaky.jpg")))

        assert data == b"third time"
        assert len(hits) == 3

    @pytest.mark.asyncio
    async def test_non_image_content_type_rejected(self):
        hits = []
        async with TestServer(_image_app(hits)) as server:
            async with AssetFetcher(max_attempts=1) as fetcher:
                assert await fetcher.fetch(str(server.make_url("/page.jpg"))) is None

    @pytest.mark.asyncio
    async def test_empty_body_rejected(self):
        hits = []
        async with TestServer(_image_app(hits)) as server:
            async with AssetFetcher(max_attempts=2, sleep=_recording_sleep([])) as fetcher:
                assert await fetcher.fetch(str(server.make_url("/empty.jpg"))) is None

        assert len(hits) == 2

    @pytest.mark.asyncio
    async def test_no_url_makes_no_request(self):
        fetcher = AssetFetcher()
        assert await fetcher.fetch(None) is None
        assert await fetcher.fetch({}) is None
        assert await fetcher.fetch("ftp://img.example/a.jpg") is None
        # nothing was requested, so no session was ever opened
        assert fetcher._session is None
