"""
Archive module for snag.

This module turns a hydrated ResolvedGraph into a ZIP archive:
    - documents: Markdown and HTML descriptions of the content
    - assets: Image selection and download with retries
    - builder: Archive layout, manifest and compression

Usage:
    from snag.archive import ArchiveBuilder, AssetFetcher

    builder = ArchiveBuilder(AssetFetcher(), compression_level=6)
    result = await builder.build(graph)
"""

from snag.archive.assets import IMAGE_SIZE_PRIORITY, AssetFetcher, select_image_url
from snag.archive.builder import (
    ArchiveBuilder,
    ArchiveManifest,
    ArchiveResult,
    archive_filename,
)
from snag.archive.documents import (
    Document,
    build_document,
    build_track_document,
    render_html,
    render_markdown,
)

__all__ = [
    # Documents
    "Document",
    "build_document",
    "build_track_document",
    "render_markdown",
    "render_html",
    # Assets
    "AssetFetcher",
    "IMAGE_SIZE_PRIORITY",
    "select_image_url",
    # Builder
    "ArchiveBuilder",
    "ArchiveManifest",
    "ArchiveResult",
    "archive_filename",
]
