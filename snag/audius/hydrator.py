"""
Graph hydration for snag.

Given a resolved root entity, fetch everything nested under it so the
archive can be built without further requests.

Behavior by content type:
    artist:          profile, then the artist's tracks and playlists
                     fetched concurrently
    track:           the track alone; the API embeds the uploader summary
    playlist, album: the playlist, its member stubs, then every member
                     track hydrated by id, concurrently under a limit,
                     reassembled in the playlist's own order

Hydration is all-or-nothing: the first failure cancels the remaining
work and propagates unchanged.

Usage:
    hydrator = GraphHydrator(client, concurrency=4)
    graph = await hydrator.hydrate(identifier, "album")
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Awaitable, Callable

from tqdm import tqdm

from snag.audius.client import AudiusClient
from snag.audius.identifiers import (
    ArtistHandle,
    ContentIdentifier,
    PlaylistId,
    PlaylistPermalink,
    TrackId,
    TrackPermalink,
)
from snag.audius.models import Artist, Playlist, ResolvedGraph, Track
from snag.audius.resolver import ContentResolver
from snag.core.exceptions import (
    EmptyPlaylistError,
    EnvelopeError,
    InvalidIdentifierError,
    NotFoundError,
)
from snag.core.logger import get_logger


logger = get_logger(__name__)


@dataclass(frozen=True)
class PageOptions:
    """
    Paging for artist track and playlist listings.

    Attributes:
        limit: Page size sent as 'limit'.
        offset: First offset requested.
        sort: Sort order for track listings ("date" = newest first).
        all_pages: Keep requesting pages until one comes back short.
                   When False only the first page is fetched.
    """
    limit: int = 100
    offset: int = 0
    sort: str = "date"
    all_pages: bool = False


class GraphHydrator:
    """
    Builds a ResolvedGraph for one download.

    Attributes:
        client: AudiusClient used for listings and member stubs.
        resolver: ContentResolver used for the root and for every member track.
        concurrency: Maximum number of member tracks hydrated at once.
        page_options: Paging for artist listings.
        show_progress: Show a tqdm bar while hydrating playlist members.
    """

    def __init__(
        self,
        client: AudiusClient,
        resolver: ContentResolver | None = None,
        concurrency: int = 4,
        page_options: PageOptions | None = None,
        show_progress: bool = False
    ) -> None:
        self.client = client
        self.resolver = resolver or ContentResolver(client)
        self.concurrency = max(1, concurrency)
        self.page_options = page_options or PageOptions()
        self.show_progress = show_progress

    async def hydrate(self, identifier: ContentIdentifier, content_type: str) -> ResolvedGraph:
        """
        Resolve the root entity and hydrate its nested content.

        Args:
            identifier: Typed identifier from classify_identifier().
            content_type: Requested content type; becomes ResolvedGraph.kind.

        Raises:
            NotFoundError, NetworkError, EnvelopeError: From resolution.
            EmptyPlaylistError: A playlist or album with no tracks.
        """
        if isinstance(identifier, ArtistHandle):
            return await self.hydrate_artist(identifier)
        if isinstance(identifier, (TrackId, TrackPermalink)):
            return await self.hydrate_track(identifier)
        if isinstance(identifier, (PlaylistId, PlaylistPermalink)):
            kind = content_type if content_type in ("playlist", "album") else "playlist"
            return await self.hydrate_playlist(identifier, kind)
        raise InvalidIdentifierError(
            f"Unsupported identifier: {identifier!r}",
            details={"identifier": repr(identifier)}
        )

    # =========================================================================
    # ARTIST
    # =========================================================================

    async def hydrate_artist(self, identifier: ArtistHandle) -> ResolvedGraph:
        profile = await self.resolver.resolve_artist(identifier)
        logger.info(f"Resolved artist: {profile.display_name} (@{profile.handle})")

        if not profile.id:
            raise NotFoundError(
                f"Artist @{identifier.handle} has no user id",
                details={"identifier": identifier.handle}
            )
        user_id = profile.id
        options = self.page_options

        track_items, playlist_items = await asyncio.gather(
            self._collect_pages(
                lambda limit, offset: self.client.user_tracks(user_id, limit, offset, options.sort),
                "tracks"
            ),
            self._collect_pages(
                lambda limit, offset: self.client.user_playlists(user_id, limit, offset),
                "playlists"
            ),
        )

        tracks = tuple(Track.from_api(item) for item in track_items)
        playlists = tuple(Playlist.from_api(item) for item in playlist_items)
        logger.info(f"Found {len(tracks)} tracks and {len(playlists)} playlists")

        return ResolvedGraph(kind="artist", profile=profile, tracks=tracks, playlists=playlists)

    async def _collect_pages(
        self,
        fetch_page: Callable[[int, int], Awaitable[Any]],
        label: str
    ) -> list[dict[str, Any]]:
        options = self.page_options
        offset = options.offset
        items: list[dict[str, Any]] = []

        while True:
            page = await fetch_page(options.limit, offset)
            if page is None:
                page = []
            if not isinstance(page, list):
                raise EnvelopeError(
                    f"Expected a list of {label}, got {type(page).__name__}",
                    details={"offset": offset}
                )

            items.extend(item for item in page if isinstance(item, dict))

            if not options.all_pages or len(page) < options.limit:
                break
            offset += options.limit
            logger.debug(f"Fetching next page of {label} (offset {offset})")

        return items

    # =========================================================================
    # TRACK
    # =========================================================================

    async def hydrate_track(self, identifier: TrackId | TrackPermalink) -> ResolvedGraph:
        track = await self.resolver.resolve_track(identifier)
        logger.info(f"Resolved track: {track.display_title}")
        return ResolvedGraph(
            kind="track",
            profile=track.user or Artist(),
            tracks=(track,),
        )

    # =========================================================================
    # PLAYLIST / ALBUM
    # =========================================================================

    async def hydrate_playlist(
        self,
        identifier: PlaylistId | PlaylistPermalink,
        kind: str = "playlist"
    ) -> ResolvedGraph:
        """
        Resolve a playlist and hydrate every member track.

        Raises:
            EmptyPlaylistError: The playlist has no tracks.
        """
        playlist = await self.resolver.resolve_playlist(identifier)
        logger.info(f"Resolved {kind}: {playlist.display_title}")

        stubs = await self.client.playlist_tracks(playlist.id or "")
        if stubs is not None and not isinstance(stubs, list):
            raise EnvelopeError(
                f"Expected a list of playlist tracks, got {type(stubs).__name__}",
                details={"playlist_id": playlist.id}
            )

        stubs = [stub for stub in (stubs or []) if isinstance(stub, dict)]
        if not stubs:
            raise EmptyPlaylistError(
                f"No tracks found in {kind}: {playlist.display_title}",
                details={"playlist_id": playlist.id}
            )

        tracks = await self._hydrate_members(stubs)

        return ResolvedGraph(
            kind=kind,
            profile=playlist.user or Artist(),
            tracks=tuple(tracks),
            playlists=(playlist,),
        )

    async def _hydrate_members(self, stubs: list[dict[str, Any]]) -> list[Track]:
        semaphore = asyncio.Semaphore(self.concurrency)

        with tqdm(
            total=len(stubs),
            desc="Hydrating tracks",
            unit="track",
            disable=not self.show_progress
        ) as progress:

            async def hydrate_member(stub: dict[str, Any]) -> Track:
                track_id = stub.get("id")
                if not track_id:
                    track = Track.from_api(stub)
                else:
                    async with semaphore:
                        track = await self.resolver.resolve_track(TrackId(str(track_id)))
                progress.update(1)
                return track

            tasks = [asyncio.ensure_future(hydrate_member(stub)) for stub in stubs]
            try:
                # gather keeps the input order regardless of completion order
                return list(await asyncio.gather(*tasks))
            except BaseException:
                for task in tasks:
                    task.cancel()
                await asyncio.gather(*tasks, return_exceptions=True)
                raise
