"""
snag: Archive Audius artists, tracks, playlists and albums.

This package resolves a user-facing Audius identifier into a fully hydrated
data graph and packages it into a portable ZIP archive for offline use.

Architecture:
    The work is split into four stages:

    IDENTIFY (audius/identifiers.py): Parse the identifier
        - Accept paths, bare ids and audius.co URLs
        - Reject malformed shapes before any request

    RESOLVE (audius/resolver.py): Find the canonical record
        - Ordered strategies per content type
        - First success wins; failures fall through to the next strategy

    HYDRATE (audius/hydrator.py): Fetch nested content
        - Artist: track and playlist listings, concurrently
        - Playlist/Album: every member track, concurrently, order preserved

    PACKAGE (archive/): Build the archive
        - Markdown + HTML documents from one internal representation
        - Best-size image variants, downloaded with retries
        - metadata.json manifest, DEFLATE-compressed ZIP

Modules:
    core/       - Configuration, logging, exceptions
    audius/     - API client, models, identifiers, resolution, hydration
    archive/    - Documents, image assets, archive builder
    utils/      - Filename sanitization, formatting, retry
    engine.py   - Pipeline entry points
    cli.py      - Command-line interface

Usage:
    Command Line:
        snag someone
        snag someone/some-track
        snag someone/album/some-album

    Python API:
        import asyncio
        from snag import load_config, run_snag, write_archive

        config = load_config()
        result = asyncio.run(run_snag("someone/some-track", config=config))
        write_archive(result, config.output.directory)

Dependencies:
    - aiohttp: Async HTTP client for the API and image downloads
    - yt-dlp: Filename sanitization
    - click: CLI framework
    - rich-click: CLI colors
    - tqdm: Progress bars
    - pyyaml: Configuration file parsing
"""

__version__ = "0.1.0"
__author__ = "snag"
__license__ = "MIT"

# Convenience imports for common usage
from snag.core import (
    Config,
    ConfigError,
    EmptyArchiveError,
    EmptyPlaylistError,
    EnvelopeError,
    InvalidIdentifierError,
    NetworkError,
    NotFoundError,
    SnagError,
    get_logger,
    load_config,
    setup_logging,
)
from snag.engine import resolve_and_build_archive, run_snag, write_archive

__all__ = [
    # Version
    "__version__",
    # Core
    "Config",
    "load_config",
    "setup_logging",
    "get_logger",
    # Exceptions
    "SnagError",
    "ConfigError",
    "NetworkError",
    "EnvelopeError",
    "NotFoundError",
    "InvalidIdentifierError",
    "EmptyPlaylistError",
    "EmptyArchiveError",
    # Engine
    "resolve_and_build_archive",
    "run_snag",
    "write_archive",
]
