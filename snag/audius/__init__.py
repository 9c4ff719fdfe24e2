"""
Audius integration module for snag.

This module provides all functionality for talking to the Audius API:
    - AudiusClient: Async API client with envelope unwrapping
    - Artist, Track, Playlist, ResolvedGraph: Data models for Audius entities
    - classify_identifier: Typed parsing of user-supplied identifiers
    - ContentResolver: Layered-fallback resolution to canonical records
    - GraphHydrator: Fetches everything nested under a resolved root

Usage:
    from snag.audius import AudiusClient, GraphHydrator, classify_identifier

    async with AudiusClient() as client:
        identifier = classify_identifier("someone/album/some-album")
        graph = await GraphHydrator(client).hydrate(identifier, "album")
"""

from snag.audius.client import AudiusClient
from snag.audius.hydrator import GraphHydrator, PageOptions
from snag.audius.identifiers import (
    ArtistHandle,
    ContentIdentifier,
    PlaylistId,
    PlaylistPermalink,
    TrackId,
    TrackPermalink,
    classify_identifier,
    infer_content_type,
)
from snag.audius.models import Artist, Playlist, ResolvedGraph, Track
from snag.audius.resolver import Attempt, ContentResolver, first_success

__all__ = [
    # Client
    "AudiusClient",
    # Models
    "Artist",
    "Track",
    "Playlist",
    "ResolvedGraph",
    # Identifiers
    "ContentIdentifier",
    "ArtistHandle",
    "TrackId",
    "TrackPermalink",
    "PlaylistId",
    "PlaylistPermalink",
    "classify_identifier",
    "infer_content_type",
    # Resolution
    "ContentResolver",
    "Attempt",
    "first_success",
    # Hydration
    "GraphHydrator",
    "PageOptions",
]
