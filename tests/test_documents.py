"""Test Markdown and HTML document generation"""

from snag.archive.documents import (
    Document,
    audius_url,
    build_artist_document,
    build_document,
    build_playlist_document,
    build_track_document,
    render_html,
    render_inline,
    render_markdown,
)
from snag.audius.models import Artist, Playlist, ResolvedGraph, Track


class TestArtistDocument:
    """Test artist profile documents"""

    def test_empty_artist_placeholders(self):
        """Test a handle-only profile renders zero counters and no bio"""
        markdown = render_markdown(build_artist_document(Artist(handle="someone")))

        assert "- Followers: 0" in markdown
        assert "## Bio" not in markdown
        assert "## Wallets" not in markdown
        assert "Created: N/A" in markdown
        assert markdown.startswith("# someone\n**@someone**\n")

    def test_full_profile(self, sample_user_data):
        document = build_artist_document(
            Artist.from_api(sample_user_data),
            tracks=(Track(id="t1", title="One", duration=65),),
            playlists=(Playlist(id="p1", playlist_name="Night Drive", permalink="/dj.someone/album/night-drive",
                                is_album=True, track_count=3),),
        )
        markdown = render_markdown(document)

        assert "# DJ Someone ✓" in markdown
        assert "## Bio\nMaking noise since 2010" in markdown
        assert "- Followers: 1,234,567" in markdown
        assert "- Twitter: [@djsomeone](https://twitter.com/djsomeone)" in markdown
        assert "- ERC: `0xabc`" in markdown
        assert "Created: March 5, 2021" in markdown
        assert "1. One (1:05)" in markdown
        assert "- [Night Drive](https://audius.co/dj.someone/album/night-drive) (Album, 3 tracks)" in markdown

    def test_status_lines(self):
        markdown = render_markdown(
            build_artist_document(Artist(handle="x", is_deactivated=True, is_available=False))
        )
        assert "Status: Deactivated" in markdown
        assert "Status: Unavailable" in markdown


class TestTrackDocument:
    """Test track documents"""

    def test_track_fields(self, sample_track_data):
        markdown = render_markdown(build_track_document(Track.from_api(sample_track_data)))

        assert markdown.startswith("# First Light\n**By DJ Someone**\n")
        assert "- Artist: DJ Someone (@dj.someone)" in markdown
        assert "- Duration: 3:45" in markdown
        assert "- Release Date: July 1, 2022" in markdown
        assert "- Plays: 9,876" in markdown
        assert "- [Audius Link](https://audius.co/dj.someone/first-light)" in markdown

    def test_missing_fields(self):
        markdown = render_markdown(build_track_document(Track()))

        assert "# Untitled Track" in markdown
        assert "**By Unknown Artist**" in markdown
        assert "- Genre: N/A" in markdown
        assert "- Duration: 0:00" in markdown
        assert "- Favorites: 0" in markdown

    def test_profile_fallback(self):
        markdown = render_markdown(build_track_document(Track(title="x"), Artist(handle="owner")))
        assert "**By owner**" in markdown


class TestPlaylistDocument:
    """Test playlist and album documents"""

    def test_track_list(self, sample_playlist_data):
        tracks = (
            Track(id="t1", title="One", duration=200, user=Artist(handle="dj.someone")),
            Track(id="t2", title="Two", duration=3700),
        )
        markdown = render_markdown(
            build_playlist_document(Playlist.from_api(sample_playlist_data), tracks)
        )

        assert "- Type: Album" in markdown
        assert "- Description: No description available" in markdown
        assert "## Track List" in markdown
        assert "1. One (3:20) - [@dj.someone](https://audius.co/dj.someone)" in markdown
        assert "2. Two (61:40)\n" in markdown

    def test_track_count_falls_back_to_members(self):
        markdown = render_markdown(build_playlist_document(Playlist(), (Track(), Track())))
        assert "- Track Count: 2" in markdown
        assert "# Untitled Playlist" in markdown


class TestBuildDocument:
    """Test root document dispatch"""

    def test_dispatch_by_kind(self, sample_track_data, sample_playlist_data):
        track = Track.from_api(sample_track_data)
        playlist = Playlist.from_api(sample_playlist_data)

        track_graph = ResolvedGraph(kind="track", profile=Artist(), tracks=(track,))
        album_graph = ResolvedGraph(kind="album", profile=Artist(), tracks=(track,), playlists=(playlist,))

        assert build_document(track_graph).title == "First Light"
        assert build_document(album_graph).title == "Night Drive"

    def test_rendering_is_deterministic(self, sample_user_data):
        graph = ResolvedGraph(kind="artist", profile=Artist.from_api(sample_user_data))

        assert render_markdown(build_document(graph)) == render_markdown(build_document(graph))
        assert render_html(build_document(graph)) == render_html(build_document(graph))


class TestRenderHtml:
    """Test Markdown line to HTML conversion"""

    def test_headings_and_lists(self):
        document = Document(
            title="T",
            lines=("# Title", "## Section", "- a", "- b", "", "1. first", "2. second", "plain"),
        )
        html = render_html(document)

        assert "<h1>Title</h1>" in html
        assert "<h2>Section</h2>" in html
        assert "<ul>\n<li>a</li>\n<li>b</li>\n</ul>" in html
        assert "<ol>\n<li>first</li>\n<li>second</li>\n</ol>" in html
        assert "<p>plain</p>" in html
        assert "<title>T</title>" in html

    def test_inline_markup(self):
        assert render_inline("**bold**") == "<strong>bold</strong>"
        assert render_inline("`0xabc`") == "<code>0xabc</code>"
        assert render_inline("[site](https://x.example)") == '<a href="https://x.example">site</a>'

    def test_text_is_escaped(self):
        assert render_inline("<script>alert(1)</script>") == "&lt;script&gt;alert(1)&lt;/script&gt;"
        html = render_html(Document(title="<b>", lines=("# A & B",)))
        assert "<h1>A &amp; B</h1>" in html
        assert "<title>&lt;b&gt;</title>" in html

    def test_unsafe_link_scheme_dropped(self):
        assert render_inline("[click](javascript:void)") == "click"


class TestAudiusUrl:
    def test_paths(self):
        assert audius_url("/someone/x") == "https://audius.co/someone/x"
        assert audius_url("someone") == "https://audius.co/someone"
        assert audius_url(None) == "https://audius.co"
