"""
Document generation for snag archives.

Every archive carries a human-readable description of its content in two
renderings, Markdown and HTML. Both derive from a single Document (a title
plus Markdown lines), so the two can never disagree.

Document kinds:
    artist:          profile header, bio, location, stats, social links,
                     wallets, account status, track list, playlist list
    track:           track information, stats, link
    playlist, album: playlist information, stats, link, track list

Placeholders:
    Missing text becomes "N/A", missing counters "0", a missing artist
    "Unknown Artist", missing titles "Untitled Track" / "Untitled Playlist"
    and a missing playlist description "No description available".

HTML rendering:
    The HTML is derived line by line from the Markdown lines:
        "# " .. "###### "   -> <h1> .. <h6>
        runs of "- " lines  -> <ul><li>
        runs of "N. " lines -> <ol><li>
        other non-blank     -> <p>
    Inline **bold**, [text](url) and `code` are converted after the text
    has been HTML-escaped.

All functions are pure: identical input gives byte-identical output.
"""

import html
import re
from dataclasses import dataclass

from snag.audius.models import Artist, Playlist, ResolvedGraph, Track
from snag.utils import NOT_AVAILABLE, format_count, format_date, format_duration


AUDIUS_WEB_ROOT = "https://audius.co"

HEADING_PATTERN = re.compile(r"^(#{1,6})\s+(.*)$")
ORDERED_ITEM_PATTERN = re.compile(r"^\d+\.\s+(.*)$")
LINK_PATTERN = re.compile(r"\[([^\]]*)\]\(([^)\s]+)\)")
BOLD_PATTERN = re.compile(r"\*\*(.+?)\*\*")
CODE_PATTERN = re.compile(r"`([^`]+)`")

SAFE_LINK_SCHEMES = ("http://", "https://", "mailto:")

HTML_TEMPLATE = """<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<meta name="viewport" content="width=device-width, initial-scale=1">
<title>{title}</title>
<style>
body {{ font-family: -apple-system, BlinkMacSystemFont, "Segoe UI", Roboto, sans-serif; background: #f7f7f9; color: #1f1f24; margin: 0; }}
main {{ max-width: 760px; margin: 40px auto; padding: 32px 40px; background: #fff; border-radius: 12px; box-shadow: 0 2px 12px rgba(0, 0, 0, 0.08); }}
h1 {{ margin-top: 0; color: #7e1bcc; }}
h2 {{ border-bottom: 1px solid #e4e4ea; padding-bottom: 4px; margin-top: 28px; }}
a {{ color: #7e1bcc; }}
code {{ background: #f0f0f4; padding: 1px 5px; border-radius: 4px; font-size: 0.9em; word-break: break-all; }}
li {{ margin: 3px 0; }}
</style>
</head>
<body>
<main>
{body}
</main>
</body>
</html>
"""


@dataclass(frozen=True)
class Document:
    """
    Renderer-independent document.

    Attributes:
        title: Page title (used by the HTML rendering).
        lines: Markdown lines, without trailing newlines.
    """
    title: str
    lines: tuple[str, ...]


# =============================================================================
# HELPERS
# =============================================================================


def audius_url(path: str | None) -> str:
    """Absolute audius.co URL for a permalink or handle ("" gives the site root)."""
    if not path:
        return AUDIUS_WEB_ROOT
    return f"{AUDIUS_WEB_ROOT}/{path.lstrip('/')}"


def _text(value: str | None) -> str:
    return value if value else NOT_AVAILABLE


def _artist_line(artist: Artist) -> str:
    if artist.handle:
        return f"- Artist: {artist.display_name} (@{artist.handle})"
    return f"- Artist: {artist.display_name}"


def _uploader_suffix(track: Track) -> str:
    if track.user is None or not track.user.handle:
        return ""
    return f" - [@{track.user.handle}]({audius_url(track.user.handle)})"


def _track_list(tracks: tuple[Track, ...]) -> list[str]:
    return [
        f"{index}. {track.display_title} ({format_duration(track.duration)})"
        f"{_uploader_suffix(track)}"
        for index, track in enumerate(tracks, start=1)
    ]


# =============================================================================
# DOCUMENT BUILDERS
# =============================================================================


def build_document(graph: ResolvedGraph) -> Document:
    """
    Build the root document of an archive.

    Args:
        graph: The hydrated download.

    Returns:
        Document for the artist, track or playlist at the root of the graph.
    """
    if graph.kind == "artist":
        return build_artist_document(graph.profile, graph.tracks, graph.playlists)
    if graph.kind == "track":
        return build_track_document(graph.tracks[0], graph.profile)
    return build_playlist_document(graph.playlists[0], graph.tracks, graph.profile)


def build_artist_document(
    profile: Artist,
    tracks: tuple[Track, ...] = (),
    playlists: tuple[Playlist, ...] = ()
) -> Document:
    verified = " ✓" if profile.is_verified else ""
    lines = [
        f"# {profile.display_name}{verified}",
        f"**@{profile.handle or NOT_AVAILABLE}**",
        f"User ID: `{profile.id or NOT_AVAILABLE}`",
        "",
    ]

    if profile.bio:
        lines.append("## Bio")
        lines.extend(profile.bio.splitlines())
        lines.append("")

    if profile.location:
        lines.append("## Location")
        lines.append(profile.location)
        lines.append("")

    lines.extend([
        "## Stats",
        f"- Followers: {format_count(profile.follower_count)}",
        f"- Following: {format_count(profile.followee_count)}",
        f"- Tracks: {format_count(profile.track_count)}",
        f"- Playlists: {format_count(profile.playlist_count)}",
        f"- Albums: {format_count(profile.album_count)}",
        f"- Reposts: {format_count(profile.repost_count)}",
        f"- Supporters: {format_count(profile.supporter_count)}",
        f"- Supporting: {format_count(profile.supporting_count)}",
        "",
    ])

    social = []
    if profile.twitter_handle:
        social.append(f"- Twitter: [@{profile.twitter_handle}](https://twitter.com/{profile.twitter_handle})")
    if profile.instagram_handle:
        social.append(f"- Instagram: [@{profile.instagram_handle}](https://instagram.com/{profile.instagram_handle})")
    if profile.tiktok_handle:
        social.append(f"- TikTok: [@{profile.tiktok_handle}](https://tiktok.com/@{profile.tiktok_handle})")
    if profile.website:
        social.append(f"- Website: [{profile.website}]({profile.website})")
    if profile.donation:
        social.append(f"- Donation: [{profile.donation}]({profile.donation})")
    if social:
        lines.append("## Social Links")
        lines.extend(social)
        lines.append("")

    wallets = []
    if profile.erc_wallet:
        wallets.append(f"- ERC: `{profile.erc_wallet}`")
    if profile.spl_wallet:
        wallets.append(f"- SPL: `{profile.spl_wallet}`")
    if profile.spl_usdc_payout_wallet:
        wallets.append(f"- SPL USDC: `{profile.spl_usdc_payout_wallet}`")
    if wallets:
        lines.append("## Wallets")
        lines.extend(wallets)
        lines.append("")

    lines.append(f"Created: {format_date(profile.created_at)}")
    if profile.is_deactivated:
        lines.append("Status: Deactivated")
    if not profile.is_available:
        lines.append("Status: Unavailable")

    if tracks:
        lines.append("")
        lines.append("## Tracks")
        lines.extend(_track_list(tracks))

    if playlists:
        lines.append("")
        lines.append("## Playlists")
        for playlist in playlists:
            kind = "Album" if playlist.is_album else "Playlist"
            lines.append(
                f"- [{playlist.display_title}]({audius_url(playlist.permalink)}) "
                f"({kind}, {format_count(playlist.track_count)} tracks)"
            )

    return Document(title=profile.display_name, lines=tuple(lines))


def build_track_document(track: Track, profile: Artist | None = None) -> Document:
    """
    Build the document for a single track.

    Used for track downloads and for every member entry of artist and
    playlist archives. The uploader is the track's embedded user, falling
    back to the given profile.
    """
    artist = track.user or profile or Artist()

    lines = [
        f"# {track.display_title}",
        f"**By {artist.display_name}**",
        "",
        "## Track Information",
        _artist_line(artist),
        f"- Genre: {_text(track.genre)}",
        f"- Mood: {_text(track.mood)}",
        f"- Release Date: {format_date(track.release_date)}",
        f"- Duration: {format_duration(track.duration)}",
        "",
        "## Stats",
        f"- Plays: {format_count(track.play_count)}",
        f"- Reposts: {format_count(track.repost_count)}",
        f"- Favorites: {format_count(track.favorite_count)}",
        "",
        "## Links",
        f"- [Audius Link]({audius_url(track.permalink)})",
    ]

    return Document(title=track.display_title, lines=tuple(lines))


def build_playlist_document(
    playlist: Playlist,
    tracks: tuple[Track, ...] = (),
    profile: Artist | None = None
) -> Document:
    artist = playlist.user or profile or Artist()

    lines = [
        f"# {playlist.display_title}",
        f"**By {artist.display_name}**",
        "",
        "## Playlist Information",
        f"- Type: {'Album' if playlist.is_album else 'Playlist'}",
        _artist_line(artist),
        f"- Track Count: {format_count(playlist.track_count if playlist.track_count is not None else len(tracks))}",
        f"- Description: {playlist.description or 'No description available'}",
        "",
        "## Stats",
        f"- Plays: {format_count(playlist.total_play_count)}",
        f"- Reposts: {format_count(playlist.repost_count)}",
        f"- Favorites: {format_count(playlist.favorite_count)}",
        "",
        "## Links",
        f"- [Audius Link]({audius_url(playlist.permalink)})",
    ]

    if tracks:
        lines.append("")
        lines.append("## Track List")
        lines.extend(_track_list(tracks))

    return Document(title=playlist.display_title, lines=tuple(lines))


# =============================================================================
# RENDERERS
# =============================================================================


def render_markdown(document: Document) -> str:
    """Join the document lines into Markdown text ending with a newline."""
    return "\n".join(document.lines) + "\n"


def _render_link(match: re.Match) -> str:
    text, url = match.group(1), match.group(2)
    if not url.lower().startswith(SAFE_LINK_SCHEMES):
        return text
    return f'<a href="{url}">{text}</a>'


def render_inline(text: str) -> str:
    """
    Escape a line of text and convert inline Markdown to HTML.

    Links with schemes other than http(s) and mailto keep their text only.
    """
    escaped = html.escape(text, quote=True)
    escaped = CODE_PATTERN.sub(r"<code>\1</code>", escaped)
    escaped = BOLD_PATTERN.sub(r"<strong>\1</strong>", escaped)
    return LINK_PATTERN.sub(_render_link, escaped)


def render_html(document: Document) -> str:
    """
    Render a document as a standalone, styled HTML page.

    Example:
        doc = Document(title="x", lines=("# x", "- a", "- b"))
        render_html(doc)  # ...<h1>x</h1>\\n<ul>\\n<li>a</li>\\n<li>b</li>\\n</ul>...
    """
    body: list[str] = []
    open_list: str | None = None

    for line in document.lines:
        heading = HEADING_PATTERN.match(line)
        ordered = ORDERED_ITEM_PATTERN.match(line)

        if line.startswith("- "):
            wanted = "ul"
        elif ordered:
            wanted = "ol"
        else:
            wanted = None

        if open_list != wanted:
            if open_list:
                body.append(f"</{open_list}>")
            if wanted:
                body.append(f"<{wanted}>")
            open_list = wanted

        if heading:
            level = len(heading.group(1))
            body.append(f"<h{level}>{render_inline(heading.group(2))}</h{level}>")
        elif wanted == "ul":
            body.append(f"<li>{render_inline(line[2:])}</li>")
        elif wanted == "ol":
            body.append(f"<li>{render_inline(ordered.group(1))}</li>")
        elif line.strip():
            body.append(f"<p>{render_inline(line)}</p>")

    if open_list:
        body.append(f"</{open_list}>")

    return HTML_TEMPLATE.format(title=html.escape(document.title), body="\n".join(body))
