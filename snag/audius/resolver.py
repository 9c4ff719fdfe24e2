"""
Identifier resolution for snag.

Maps a typed content identifier to the canonical Audius record. The API
is documented but unreliable: permalink endpoints come back empty, bare
ids are sometimes not found, search ranks loosely. Each content type is
therefore resolved by an ordered list of strategies, tried one after the
other until one produces an entity.

Strategies by content type:
    Track:
        1. direct_lookup   GET /v1/tracks/{id}              (bare ids only)
        2. resolve_url     GET /v1/resolve?url=https://audius.co/<path>
                           then GET /v1/tracks/{resolved id}

    Playlist / Album:
        bare id:           direct_lookup   GET /v1/playlists/{id}
        permalink:         by_permalink    GET /v1/playlists/by_permalink/{handle}/{slug}
                           search          GET /v1/playlists/search?query=<slug>

    Artist:
        handle_lookup      GET /v1/users/handle/{handle} -> id,
                           then GET /v1/users/{id}

Failure handling:
    A strategy fails when its request raises, or when it yields nothing.
    Non-final failures are logged at DEBUG and the next strategy runs.
    When every strategy fails, NotFoundError is raised only if the last
    failure was an empty result or a 404. Any other final NetworkError
    (transport, 429, 5xx...) or EnvelopeError is re-raised unchanged.

Usage:
    resolver = ContentResolver(client)
    track = await resolver.resolve_track(TrackPermalink("someone", "some-track"))
"""

from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Sequence, TypeVar

from snag.audius.client import AudiusClient
from snag.audius.identifiers import (
    ArtistHandle,
    ContentIdentifier,
    PlaylistId,
    PlaylistPermalink,
    TrackId,
    TrackPermalink,
)
from snag.audius.models import Artist, Playlist, Track
from snag.core.exceptions import (
    EnvelopeError,
    InvalidIdentifierError,
    NetworkError,
    NotFoundError,
)
from snag.core.logger import get_logger


logger = get_logger(__name__)

T = TypeVar("T")

# A named, zero-argument coroutine factory returning an entity or None
Strategy = tuple[str, Callable[[], Awaitable[T | None]]]

_STRATEGY_ERRORS = (NetworkError, EnvelopeError, NotFoundError)


@dataclass(frozen=True)
class Attempt(Generic[T]):
    """
    Outcome of one resolution strategy.

    Attributes:
        strategy: Strategy name, used in logs and error details.
        value: The resolved entity, or None.
        error: Why the strategy failed, or None on success.
    """
    strategy: str
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.value is not None


def _is_missing(error: Exception | None) -> bool:
    if isinstance(error, NotFoundError):
        return True
    return isinstance(error, NetworkError) and error.status == 404


async def first_success(strategies: Sequence[Strategy], subject: str) -> T:
    """
    Run strategies in order and return the first entity produced.

    Args:
        strategies: Ordered (name, factory) pairs. A factory is only
                    called once every earlier strategy has failed.
        subject: Description of what is being resolved, for messages.

    Returns:
        The value of the first successful Attempt.

    Raises:
        NotFoundError: Every strategy failed and the last one came back
                       empty or with a 404.
        NetworkError, EnvelopeError: The final strategy's own error.
    """
    attempts: list[Attempt] = []

    for name, run in strategies:
        try:
            value = await run()
        except _STRATEGY_ERRORS as e:
            attempt = Attempt(strategy=name, error=e)
        else:
            if value is None:
                attempt = Attempt(strategy=name, error=NotFoundError(f"{name} returned no result"))
            else:
                attempt = Attempt(strategy=name, value=value)

        attempts.append(attempt)
        if attempt.ok:
            if len(attempts) > 1:
                logger.debug(f"Resolved {subject} via {name}")
            return attempt.value

        logger.debug(f"Strategy '{name}' failed for {subject}: {attempt.error}")

    last_error = attempts[-1].error if attempts else None
    if last_error is not None and not _is_missing(last_error):
        raise last_error

    raise NotFoundError(
        f"Could not resolve {subject}",
        details={
            "identifier": subject,
            "strategies": [a.strategy for a in attempts],
            "errors": [str(a.error) for a in attempts],
        }
    ) from last_error


def _first_object(data: Any) -> dict[str, Any] | None:
    # Playlist endpoints answer with a list; entity endpoints with an object
    if isinstance(data, list):
        data = next((item for item in data if isinstance(item, dict)), None)
    if isinstance(data, dict) and data:
        return data
    return None


def _is_track_object(data: dict[str, Any]) -> bool:
    # Users carry 'handle' and playlists 'playlist_name' at the top level;
    # tracks only embed the uploader under 'user'
    if "handle" in data or "playlist_name" in data:
        return False
    return bool(data.get("title"))


def select_search_result(results: Any, slug: str) -> dict[str, Any] | None:
    """
    Pick the playlist matching a slug out of search results.

    Preference: a permalink ending with "/<slug>", then one containing the
    slug anywhere, then simply the first result.
    """
    if not isinstance(results, list):
        return None

    candidates = [r for r in results if isinstance(r, dict)]
    if not candidates:
        return None

    slug_lower = slug.lower()
    permalinks = [str(c.get("permalink") or "").lower() for c in candidates]

    for candidate, permalink in zip(candidates, permalinks):
        if permalink.endswith(f"/{slug_lower}"):
            return candidate
    for candidate, permalink in zip(candidates, permalinks):
        if slug_lower in permalink:
            return candidate
    return candidates[0]


class ContentResolver:
    """
    Resolves content identifiers to Artist, Track and Playlist records.

    Attributes:
        client: The AudiusClient every strategy goes through.
    """

    def __init__(self, client: AudiusClient) -> None:
        self.client = client

    async def resolve(self, identifier: ContentIdentifier) -> Artist | Track | Playlist:
        """Dispatch on the identifier type."""
        if isinstance(identifier, ArtistHandle):
            return await self.resolve_artist(identifier)
        if isinstance(identifier, (TrackId, TrackPermalink)):
            return await self.resolve_track(identifier)
        if isinstance(identifier, (PlaylistId, PlaylistPermalink)):
            return await self.resolve_playlist(identifier)
        raise InvalidIdentifierError(
            f"Unsupported identifier: {identifier!r}",
            details={"identifier": repr(identifier)}
        )

    # =========================================================================
    # TRACKS
    # =========================================================================

    async def resolve_track(self, identifier: TrackId | TrackPermalink) -> Track:
        """
        Resolve a track by id or permalink.

        Raises:
            NotFoundError: Neither the direct lookup nor the resolve endpoint
                           produced a track.
        """
        strategies: list[Strategy] = []

        if isinstance(identifier, TrackId):
            subject = f"track {identifier.track_id}"
            path = identifier.track_id
            strategies.append(("direct_lookup", lambda: self._track_by_id(identifier.track_id)))
        else:
            subject = f"track {identifier.permalink}"
            path = identifier.permalink

        strategies.append(("resolve_url", lambda: self._track_via_resolve(path)))

        return await first_success(strategies, subject)

    async def _track_by_id(self, track_id: str) -> Track | None:
        data = _first_object(await self.client.track(track_id))
        return Track.from_api(data) if data else None

    async def _track_via_resolve(self, path: str) -> Track | None:
        resolved = _first_object(await self.client.resolve(path))
        if not resolved or not resolved.get("id"):
            return None
        if not _is_track_object(resolved):
            logger.debug(f"'{path}' resolved to a non-track entity (id {resolved['id']})")
            return None
        return await self._track_by_id(str(resolved["id"]))

    # =========================================================================
    # PLAYLISTS
    # =========================================================================

    async def resolve_playlist(self, identifier: PlaylistId | PlaylistPermalink) -> Playlist:
        """
        Resolve a playlist or album by id or permalink.

        A bare id uses the direct lookup only; a permalink tries the
        by_permalink endpoint, then falls back to search.

        Raises:
            NotFoundError: No strategy produced a playlist.
        """
        if isinstance(identifier, PlaylistId):
            strategies: list[Strategy] = [
                ("direct_lookup", lambda: self._playlist_by_id(identifier.playlist_id)),
            ]
            subject = f"playlist {identifier.playlist_id}"
        else:
            strategies = [
                ("by_permalink", lambda: self._playlist_by_permalink(identifier)),
                ("search", lambda: self._playlist_via_search(identifier)),
            ]
            subject = f"{identifier.kind} {identifier.permalink}"

        return await first_success(strategies, subject)

    async def _playlist_by_id(self, playlist_id: str) -> Playlist | None:
        data = _first_object(await self.client.playlist(playlist_id))
        return Playlist.from_api(data) if data else None

    async def _playlist_by_permalink(self, identifier: PlaylistPermalink) -> Playlist | None:
        data = _first_object(
            await self.client.playlist_by_permalink(identifier.artist_handle, identifier.slug)
        )
        return Playlist.from_api(data) if data else None

    async def _playlist_via_search(self, identifier: PlaylistPermalink) -> Playlist | None:
        results = await self.client.search_playlists(identifier.slug)
        chosen = select_search_result(results, identifier.slug)
        return Playlist.from_api(chosen) if chosen else None

    # =========================================================================
    # ARTISTS
    # =========================================================================

    async def resolve_artist(self, identifier: ArtistHandle) -> Artist:
        """
        Resolve an artist handle to the full profile.

        The handle endpoint returns a summary; its id is then used to
        fetch the complete user record.

        Raises:
            NotFoundError: The handle is unknown or the profile is empty.
        """
        return await first_success(
            [("handle_lookup", lambda: self._artist_by_handle(identifier.handle))],
            f"artist {identifier.handle}"
        )

    async def _artist_by_handle(self, handle: str) -> Artist | None:
        summary = _first_object(await self.client.user_by_handle(handle))
        if not summary or not summary.get("id"):
            return None

        profile = _first_object(await self.client.user(str(summary["id"])))
        if not profile:
            return None
        if not profile.get("id"):
            profile = {**profile, "id": summary["id"]}
        return Artist.from_api(profile)
