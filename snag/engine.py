"""
Top-level entry points for snag.

resolve_and_build_archive() is the whole pipeline for one request:

    identifier string
        -> classify_identifier()        (no network)
        -> ContentResolver / GraphHydrator
        -> ArchiveBuilder               (documents + images, then zip)
        -> ArchiveResult

Collaborators are passed in, so callers (and tests) decide which client,
fetcher and session are used. run_snag() is the convenience wrapper that
opens one aiohttp session for both the API and the image downloads.

Usage:
    result = asyncio.run(run_snag("someone/album/some-album"))
    path = write_archive(result, config.output.directory)
"""

from pathlib import Path

import aiohttp

from snag.archive.assets import AssetFetcher
from snag.archive.builder import ArchiveBuilder, ArchiveResult
from snag.audius.client import AudiusClient
from snag.audius.hydrator import GraphHydrator, PageOptions
from snag.audius.identifiers import classify_identifier, infer_content_type
from snag.audius.resolver import ContentResolver
from snag.core.config import Config
from snag.core.logger import get_logger
from snag.utils import ensure_directory


logger = get_logger(__name__)


async def resolve_and_build_archive(
    identifier: str,
    content_type: str | None = None,
    *,
    client: AudiusClient,
    fetcher: AssetFetcher,
    config: Config | None = None,
    all_pages: bool = False,
    show_progress: bool = False
) -> ArchiveResult:
    """
    Resolve an identifier and package its content into an archive.

    Args:
        identifier: Path, bare id or audius.co URL.
        content_type: "artist", "track", "playlist" or "album"; inferred
                      from the path shape when None.
        client: AudiusClient for every API request.
        fetcher: AssetFetcher for every image.
        config: Application configuration (defaults when None).
        all_pages: Fetch every page of an artist's tracks and playlists.
        show_progress: Show a progress bar while hydrating playlist tracks.

    Returns:
        ArchiveResult with the archive bytes and the suggested file name.

    Raises:
        InvalidIdentifierError: Before any request, for malformed identifiers.
        NotFoundError, NetworkError, EnvelopeError: Resolution failures.
        EmptyPlaylistError: The playlist or album has no tracks.
        EmptyArchiveError: The archive came out empty.
    """
    config = config or Config()

    if content_type is None:
        content_type = infer_content_type(identifier)
    parsed = classify_identifier(identifier, content_type)
    logger.debug(f"Classified '{identifier}' as {parsed!r}")

    resolver = ContentResolver(client)
    hydrator = GraphHydrator(
        client,
        resolver,
        concurrency=config.download.concurrency,
        page_options=PageOptions(limit=config.api.page_size, all_pages=all_pages),
        show_progress=show_progress
    )
    graph = await hydrator.hydrate(parsed, content_type)

    builder = ArchiveBuilder(
        fetcher,
        compression_level=config.archive.compression_level,
        concurrency=config.download.concurrency
    )
    result = await builder.build(graph)

    for warning in result.warnings:
        logger.debug(warning)

    return result


async def run_snag(
    identifier: str,
    content_type: str | None = None,
    config: Config | None = None,
    *,
    all_pages: bool = False,
    show_progress: bool = False
) -> ArchiveResult:
    """
    Run the pipeline with a client and fetcher sharing one HTTP session.

    The session is closed before returning, whatever the outcome.
    """
    config = config or Config()

    timeout = aiohttp.ClientTimeout(total=config.api.request_timeout)
    async with aiohttp.ClientSession(timeout=timeout) as session:
        client = AudiusClient.from_config(config.api, session=session)
        fetcher = AssetFetcher.from_config(config.download, session=session)
        return await resolve_and_build_archive(
            identifier,
            content_type,
            client=client,
            fetcher=fetcher,
            config=config,
            all_pages=all_pages,
            show_progress=show_progress
        )


def write_archive(result: ArchiveResult, output_dir: Path) -> Path:
    """
    Write an archive to the output directory under its suggested name.

    An existing file with the same name is overwritten.

    Returns:
        Path of the written file.
    """
    ensure_directory(output_dir)
    path = output_dir / result.filename
    path.write_bytes(result.data)
    return path
