"""
Data models for Audius entities.

This module defines immutable dataclasses representing Audius objects:
artists (users), tracks and playlists/albums, plus the ResolvedGraph that
ties one hydrated download together.

Design Decisions:
    - All dataclasses are frozen (immutable) to prevent accidental modification
    - Field names match the Audius API response (playlist_name, follower_count...)
    - Every field the engine reads is explicit and optional: the API is loose
      about which keys it returns, so missing keys become None
    - The complete API object, known keys or not, is kept in 'raw' and copied
      verbatim into the archive manifest

Usage:
    from snag.audius.models import Artist, Track, Playlist

    track = Track.from_api(response_data)
    print(f"{track.display_title} by {track.user.display_name}")
"""

from dataclasses import dataclass, field
from typing import Any


# A size-label -> URL mapping ({"150x150": ..., "1000x1000": ...}) or a bare URL
ImageSource = dict[str, Any] | str | None

CONTENT_KINDS = ("artist", "track", "playlist", "album")


def _text(data: dict[str, Any], key: str) -> str | None:
    value = data.get(key)
    if value is None:
        return None
    return str(value)


def _count(data: dict[str, Any], key: str) -> int | None:
    value = data.get(key)
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    return int(value)


def _image(data: dict[str, Any], key: str) -> ImageSource:
    value = data.get(key)
    if isinstance(value, dict):
        return dict(value)
    if isinstance(value, str) and value:
        return value
    return None


@dataclass(frozen=True)
class Artist:
    """
    Immutable representation of an Audius user profile.

    Attributes:
        id: Audius user ID (short hash id).
            Example: "nlGNe"
        handle: Unique handle without the '@'.
                Example: "skrillex"
        name: Display name. Falls back to the handle for display.
        bio: Free-text biography, if set.
        location: Free-text location, if set.
        is_verified: Whether the profile carries the verified badge.
        is_deactivated: Whether the account has been deactivated.
        is_available: False when Audius marks the account unavailable.
        follower_count ... supporting_count: Profile counters. None when absent.
        twitter_handle, instagram_handle, tiktok_handle: Social handles.
        website, donation: Free-form URLs.
        erc_wallet, spl_wallet, spl_usdc_payout_wallet: Wallet addresses.
        created_at: Account creation timestamp string as returned by the API.
        profile_picture: Avatar image variants ("150x150", "480x480", "1000x1000").
        cover_photo: Cover image variants ("640x", "2000x").
        raw: The complete API object.

    Class Methods:
        from_api: Create Artist from an Audius user object.
    """

    id: str | None = None
    handle: str | None = None
    name: str | None = None
    bio: str | None = None
    location: str | None = None
    is_verified: bool = False
    is_deactivated: bool = False
    is_available: bool = True
    follower_count: int | None = None
    followee_count: int | None = None
    track_count: int | None = None
    playlist_count: int | None = None
    album_count: int | None = None
    repost_count: int | None = None
    supporter_count: int | None = None
    supporting_count: int | None = None
    twitter_handle: str | None = None
    instagram_handle: str | None = None
    tiktok_handle: str | None = None
    website: str | None = None
    donation: str | None = None
    erc_wallet: str | None = None
    spl_wallet: str | None = None
    spl_usdc_payout_wallet: str | None = None
    created_at: str | None = None
    profile_picture: ImageSource = field(default=None, compare=False, hash=False)
    cover_photo: ImageSource = field(default=None, compare=False, hash=False)
    raw: dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Artist":
        """
        Create an Artist from an Audius user object.

        Args:
            data: The 'data' payload of /v1/users/{id} or /v1/users/handle/{handle},
                  or the 'user' summary embedded in a track or playlist.

        Returns:
            Artist: A new Artist instance. Unknown keys are preserved in raw.
        """
        return cls(
            id=_text(data, "id"),
            handle=_text(data, "handle"),
            name=_text(data, "name"),
            bio=_text(data, "bio"),
            location=_text(data, "location"),
            is_verified=bool(data.get("is_verified", False)),
            is_deactivated=bool(data.get("is_deactivated", False)),
            # Audius omits is_available on older payloads; absence means available
            is_available=data.get("is_available") is not False,
            follower_count=_count(data, "follower_count"),
            followee_count=_count(data, "followee_count"),
            track_count=_count(data, "track_count"),
            playlist_count=_count(data, "playlist_count"),
            album_count=_count(data, "album_count"),
            repost_count=_count(data, "repost_count"),
            supporter_count=_count(data, "supporter_count"),
            supporting_count=_count(data, "supporting_count"),
            twitter_handle=_text(data, "twitter_handle"),
            instagram_handle=_text(data, "instagram_handle"),
            tiktok_handle=_text(data, "tiktok_handle"),
            website=_text(data, "website"),
            donation=_text(data, "donation"),
            erc_wallet=_text(data, "erc_wallet"),
            spl_wallet=_text(data, "spl_wallet"),
            spl_usdc_payout_wallet=_text(data, "spl_usdc_payout_wallet"),
            created_at=_text(data, "created_at"),
            profile_picture=_image(data, "profile_picture"),
            cover_photo=_image(data, "cover_photo"),
            raw=dict(data),
        )

    @property
    def display_name(self) -> str:
        """Name shown in documents: name, then handle, then a placeholder."""
        return self.name or self.handle or "Unknown Artist"


@dataclass(frozen=True)
class Track:
    """
    Immutable representation of an Audius track.

    Attributes:
        id: Audius track ID.
            Example: "abc123"
        title: Track title.
        permalink: Path on audius.co, with leading slash.
                   Example: "/someone/some-track"
        duration: Length in seconds.
        genre, mood: Free-text tags.
        release_date: Release date string as returned by the API.
        play_count, repost_count, favorite_count: Track counters.
        artwork: Artwork image variants ("150x150", "480x480", "1000x1000").
        user: Uploader summary embedded by the API, if present.
        raw: The complete API object.
    """

    id: str | None = None
    title: str | None = None
    permalink: str | None = None
    duration: int | None = None
    genre: str | None = None
    mood: str | None = None
    release_date: str | None = None
    play_count: int | None = None
    repost_count: int | None = None
    favorite_count: int | None = None
    artwork: ImageSource = field(default=None, compare=False, hash=False)
    user: Artist | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Track":
        """
        Create a Track from an Audius track object.

        The embedded 'user' summary, when it is a dict, becomes an Artist.
        """
        user_data = data.get("user")
        return cls(
            id=_text(data, "id"),
            title=_text(data, "title"),
            permalink=_text(data, "permalink"),
            duration=_count(data, "duration"),
            genre=_text(data, "genre"),
            mood=_text(data, "mood"),
            release_date=_text(data, "release_date"),
            play_count=_count(data, "play_count"),
            repost_count=_count(data, "repost_count"),
            favorite_count=_count(data, "favorite_count"),
            artwork=_image(data, "artwork"),
            user=Artist.from_api(user_data) if isinstance(user_data, dict) else None,
            raw=dict(data),
        )

    @property
    def display_title(self) -> str:
        return self.title or "Untitled Track"


@dataclass(frozen=True)
class Playlist:
    """
    Immutable representation of an Audius playlist or album.

    Albums are playlists with is_album set; the API serves both from the
    same endpoints.

    Attributes:
        id: Audius playlist ID.
        playlist_name: Title of the playlist or album.
        permalink: Path on audius.co, e.g. "/someone/album/some-album".
        description: Free-text description.
        is_album: True for albums.
        track_count: Number of tracks reported by the API.
        total_play_count, repost_count, favorite_count: Playlist counters.
        artwork: Artwork image variants.
        user: Owner summary embedded by the API, if present.
        raw: The complete API object.
    """

    id: str | None = None
    playlist_name: str | None = None
    permalink: str | None = None
    description: str | None = None
    is_album: bool = False
    track_count: int | None = None
    total_play_count: int | None = None
    repost_count: int | None = None
    favorite_count: int | None = None
    artwork: ImageSource = field(default=None, compare=False, hash=False)
    user: Artist | None = None
    raw: dict[str, Any] = field(default_factory=dict, compare=False, hash=False, repr=False)

    @classmethod
    def from_api(cls, data: dict[str, Any]) -> "Playlist":
        """Create a Playlist from an Audius playlist object."""
        user_data = data.get("user")
        return cls(
            id=_text(data, "id"),
            playlist_name=_text(data, "playlist_name"),
            permalink=_text(data, "permalink"),
            description=_text(data, "description"),
            is_album=bool(data.get("is_album", False)),
            track_count=_count(data, "track_count"),
            total_play_count=_count(data, "total_play_count"),
            repost_count=_count(data, "repost_count"),
            favorite_count=_count(data, "favorite_count"),
            artwork=_image(data, "artwork"),
            user=Artist.from_api(user_data) if isinstance(user_data, dict) else None,
            raw=dict(data),
        )

    @property
    def display_title(self) -> str:
        return self.playlist_name or "Untitled Playlist"


@dataclass(frozen=True)
class ResolvedGraph:
    """
    A fully hydrated download: the root entity plus everything nested under it.

    Shapes by kind:
        artist:          profile is the root; tracks and playlists are the
                         artist's listings.
        track:           tracks holds exactly the one track; playlists is empty.
        playlist, album: playlists holds exactly the one playlist; tracks holds
                         its hydrated members in platform order.

    Attributes:
        kind: One of "artist", "track", "playlist", "album".
        profile: The artist the download belongs to (for tracks and playlists,
                 the uploader/owner; an empty Artist when the API omitted it).
        tracks: Tracks in hydration order.
        playlists: Playlists in API order.
    """

    kind: str
    profile: Artist
    tracks: tuple[Track, ...] = ()
    playlists: tuple[Playlist, ...] = ()

    @property
    def root(self) -> Artist | Track | Playlist:
        """The entity the download was requested for."""
        if self.kind == "track":
            return self.tracks[0]
        if self.kind in ("playlist", "album"):
            return self.playlists[0]
        return self.profile

    @property
    def display_name(self) -> str:
        """
        Name used for archive entries and the suggested file name.

        Artists use their handle, tracks their title and playlists their name.
        """
        root = self.root
        if isinstance(root, Artist):
            return root.handle or root.display_name
        return root.display_title
