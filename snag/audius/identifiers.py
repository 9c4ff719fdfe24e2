"""
Content identifier parsing for snag.

Turns the string a user hands us (a path like "someone/some-track" or a
full "https://audius.co/someone/album/some-album" URL) into a typed
identifier, before any network request is made.

Accepted shapes:
    artist            someone                       ArtistHandle
    track             someone/some-track            TrackPermalink
                      abc123 (with type 'track')    TrackId
    playlist / album  someone/album/some-album      PlaylistPermalink
                      someone/playlist/some-list    PlaylistPermalink
                      xyz789 (with type 'playlist') PlaylistId

Anything else raises InvalidIdentifierError.
"""

import re
from dataclasses import dataclass
from urllib.parse import unquote, urlparse

from snag.audius.models import CONTENT_KINDS
from snag.core.exceptions import InvalidIdentifierError


# First path segments that are Audius pages, not artist handles
RESERVED_PATHS = frozenset({"trending", "explore", "feed", "notifications"})

# Audius hash ids are short alphanumeric strings
BARE_ID_PATTERN = re.compile(r"^[A-Za-z0-9]+$")

PLAYLIST_KINDS = ("album", "playlist")

AUDIUS_HOSTS = ("audius.co", "www.audius.co")


@dataclass(frozen=True)
class ArtistHandle:
    handle: str


@dataclass(frozen=True)
class TrackId:
    track_id: str


@dataclass(frozen=True)
class TrackPermalink:
    artist_handle: str
    slug: str

    @property
    def permalink(self) -> str:
        return f"{self.artist_handle}/{self.slug}"


@dataclass(frozen=True)
class PlaylistId:
    playlist_id: str


@dataclass(frozen=True)
class PlaylistPermalink:
    artist_handle: str
    kind: str
    slug: str

    @property
    def permalink(self) -> str:
        return f"{self.artist_handle}/{self.kind}/{self.slug}"


ContentIdentifier = ArtistHandle | TrackId | TrackPermalink | PlaylistId | PlaylistPermalink


def split_path(identifier: str) -> list[str]:
    """
    Split an identifier into its non-empty path segments.

    Full URLs must point at audius.co; query strings and fragments are
    dropped and segments are percent-decoded.

    Raises:
        InvalidIdentifierError: For URLs on another host.

    Example:
        split_path("https://audius.co/someone/some-track?ref=x")
        # ["someone", "some-track"]
    """
    text = identifier.strip()

    if text.lower().startswith(("http://", "https://")):
        parsed = urlparse(text)
        if (parsed.hostname or "").lower() not in AUDIUS_HOSTS:
            raise InvalidIdentifierError(
                f"Not an Audius URL: {identifier}",
                details={"identifier": identifier}
            )
        path = parsed.path
    else:
        path = re.split(r"[?#]", text, maxsplit=1)[0]

    return [unquote(segment) for segment in path.split("/") if segment]


def _check_reserved(segments: list[str], identifier: str) -> None:
    if not segments:
        raise InvalidIdentifierError(
            "Identifier is empty",
            details={"identifier": identifier}
        )
    if segments[0].lower() in RESERVED_PATHS:
        raise InvalidIdentifierError(
            f"'{segments[0]}' is an Audius page, not an artist",
            details={"identifier": identifier}
        )


def infer_content_type(identifier: str) -> str:
    """
    Derive the content type from the shape of the path.

    One segment is an artist, two a track, three an album or playlist
    (taken from the kind marker).

    Raises:
        InvalidIdentifierError: If the shape matches none of these.
    """
    segments = split_path(identifier)
    _check_reserved(segments, identifier)

    if len(segments) == 1:
        return "artist"
    if len(segments) == 2:
        return "track"
    if len(segments) == 3 and segments[1].lower() in PLAYLIST_KINDS:
        return segments[1].lower()

    raise InvalidIdentifierError(
        f"Cannot tell what kind of content this is: {identifier}",
        details={"identifier": identifier, "segments": len(segments)}
    )


def classify_identifier(identifier: str, content_type: str | None = None) -> ContentIdentifier:
    """
    Parse an identifier for the given content type.

    Args:
        identifier: Path, bare id, or audius.co URL.
        content_type: "artist", "track", "playlist" or "album".
                      When None it is inferred from the path shape.

    Returns:
        The typed identifier.

    Raises:
        InvalidIdentifierError: If the content type is unknown or the
                                identifier does not fit it. No request
                                has been made at that point.
    """
    if content_type is None:
        content_type = infer_content_type(identifier)

    if content_type not in CONTENT_KINDS:
        raise InvalidIdentifierError(
            f"Unknown content type: {content_type}",
            details={"identifier": identifier, "content_type": content_type}
        )

    segments = split_path(identifier)
    _check_reserved(segments, identifier)

    if content_type == "artist":
        if len(segments) == 1:
            return ArtistHandle(handle=segments[0].lstrip("@"))

    elif content_type == "track":
        if len(segments) == 1 and BARE_ID_PATTERN.match(segments[0]):
            return TrackId(track_id=segments[0])
        if len(segments) == 2:
            return TrackPermalink(artist_handle=segments[0], slug=segments[1])

    else:
        if len(segments) == 1 and BARE_ID_PATTERN.match(segments[0]):
            return PlaylistId(playlist_id=segments[0])
        if len(segments) == 3:
            handle, kind, slug = segments
            if kind.lower() not in PLAYLIST_KINDS:
                raise InvalidIdentifierError(
                    f"Invalid playlist permalink format: {identifier}",
                    details={"identifier": identifier, "kind": kind}
                )
            return PlaylistPermalink(artist_handle=handle, kind=kind.lower(), slug=slug)

    raise InvalidIdentifierError(
        f"Invalid {content_type} identifier: {identifier}",
        details={"identifier": identifier, "content_type": content_type}
    )
