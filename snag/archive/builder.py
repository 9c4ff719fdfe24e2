"""
Archive assembly for snag.

Packages a hydrated ResolvedGraph into a ZIP archive held in memory.

Archive layout (artist "someone" with two tracks):
    metadata.json
    someone Details.md
    someone Details.html
    someone_avatar.jpg
    someone_cover.jpg
    tracks/01 - First Track/track_info.md
    tracks/01 - First Track/track_info.html
    tracks/01 - First Track/First Track_artwork.jpg
    tracks/02 - Second Track/...

Track archives hold the manifest, the document pair and "<title>_artwork.jpg".
Playlist and album archives hold "<name>_artwork.jpg" and one tracks/ folder
per member, in playlist order.

Behavior:
    1. Build the manifest (timestamp taken once, reused for every entry)
    2. Render documents and download images concurrently
    3. Write entries sequentially in a fixed order, manifest first
    4. Return ArchiveResult with the bytes, suggested file name and
       whether every image made it in

Missing images are skipped and reported in ArchiveResult.warnings.
"""

import asyncio
import io
import json
import zipfile
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Callable

from snag.archive.assets import AssetFetcher, select_image_url
from snag.archive.documents import (
    Document,
    build_document,
    build_track_document,
    render_html,
    render_markdown,
)
from snag.audius.models import ImageSource, ResolvedGraph
from snag.core.exceptions import EmptyArchiveError
from snag.core.logger import get_logger
from snag.utils import safe_archive_name, sanitize_filename


logger = get_logger(__name__)

MANIFEST_FILENAME = "metadata.json"
TRACKS_FOLDER = "tracks"
MEMBER_DOCUMENT_NAME = "track_info"

# zip timestamps cannot predate 1980
_ZIP_EPOCH = (1980, 1, 1, 0, 0, 0)


@dataclass(frozen=True)
class ArchiveManifest:
    """
    The metadata.json entry, written first into every archive.

    Attributes:
        type: Requested content type ("artist", "track", "playlist", "album").
        timestamp: Creation time, ISO 8601 UTC with milliseconds.
        content: Raw API data for the root entity (and, for artists and
                 playlists, the raw nested tracks and playlists).
        artist: Raw API data for the owning artist, or None.
    """
    type: str
    timestamp: str
    content: Any
    artist: dict[str, Any] | None

    @classmethod
    def from_graph(cls, graph: ResolvedGraph, created: datetime) -> "ArchiveManifest":
        if graph.kind == "track":
            content: Any = graph.tracks[0].raw
        elif graph.kind == "artist":
            content = {
                "profile": graph.profile.raw,
                "tracks": [track.raw for track in graph.tracks],
                "playlists": [playlist.raw for playlist in graph.playlists],
            }
        else:
            content = {
                "playlist": graph.playlists[0].raw,
                "tracks": [track.raw for track in graph.tracks],
            }

        timestamp = created.astimezone(timezone.utc).isoformat(timespec="milliseconds")
        return cls(
            type=graph.kind,
            timestamp=timestamp.replace("+00:00", "Z"),
            content=content,
            artist=graph.profile.raw or None,
        )

    def to_json(self) -> str:
        return json.dumps(
            {
                "type": self.type,
                "content": self.content,
                "artist": self.artist,
                "timestamp": self.timestamp,
            },
            indent=2,
            ensure_ascii=False,
            default=str
        )


@dataclass(frozen=True)
class ArchiveResult:
    """
    A finished archive.

    Attributes:
        data: The ZIP file bytes.
        filename: Suggested file name, e.g. "someone - profile assets [snagged].zip".
        images_complete: True when every image with a usable URL was included.
        warnings: One message per image that could not be downloaded.
    """
    data: bytes
    filename: str
    images_complete: bool
    warnings: tuple[str, ...] = ()

    @property
    def size(self) -> int:
        return len(self.data)


@dataclass(frozen=True)
class _PlannedImage:
    entry_name: str
    source: ImageSource
    label: str
    owner: str


def archive_filename(graph: ResolvedGraph) -> str:
    """
    Suggested file name for an archive.

    Format: "<name> - <kind> assets [snagged].zip" where kind is
    "profile" for artists and the content type otherwise.
    """
    kind = "profile" if graph.kind == "artist" else graph.kind
    name = sanitize_filename(graph.display_name.strip()) or "untitled"
    return f"{name} - {kind} assets [snagged].zip"


def _member_folder(index: int, width: int, title: str) -> str:
    return f"{TRACKS_FOLDER}/{index:0{width}d} - {safe_archive_name(title)}"


class ArchiveBuilder:
    """
    Assembles archives from hydrated graphs.

    Attributes:
        fetcher: AssetFetcher used for every image.
        compression_level: DEFLATE level applied to every entry.
        concurrency: Maximum number of image downloads in flight.
    """

    def __init__(
        self,
        fetcher: AssetFetcher,
        compression_level: int = 6,
        concurrency: int = 4,
        clock: Callable[[], datetime] | None = None
    ) -> None:
        self.fetcher = fetcher
        self.compression_level = compression_level
        self.concurrency = max(1, concurrency)
        self._clock = clock or (lambda: datetime.now(timezone.utc))

    async def build(self, graph: ResolvedGraph) -> ArchiveResult:
        """
        Build the archive for a hydrated graph.

        Raises:
            EmptyArchiveError: The compressed output is empty.
        """
        created = self._clock()
        manifest = ArchiveManifest.from_graph(graph, created)
        name = safe_archive_name(graph.display_name)
        images = self._plan_images(graph, name)

        logger.info(f"Building archive for {graph.display_name} ({len(images)} images)")

        semaphore = asyncio.Semaphore(self.concurrency)

        async def download(image: _PlannedImage) -> bytes | None:
            async with semaphore:
                return await self.fetcher.fetch(image.source, label=image.label, owner=image.owner)

        documents, downloads = await asyncio.gather(
            asyncio.to_thread(self._render_documents, graph, name),
            asyncio.gather(*(download(image) for image in images)),
        )

        warnings = []
        entries: list[tuple[str, str | bytes]] = [(MANIFEST_FILENAME, manifest.to_json())]
        root_entries, member_entries = documents
        entries.extend(root_entries)

        image_entries: dict[str, bytes] = {}
        for image, data in zip(images, downloads):
            if data is None:
                warnings.append(f"Could not download {image.label} image for {image.owner}")
                continue
            image_entries[image.entry_name] = data

        # Root images go right after the root documents, member images in
        # their own folders after each member's documents
        for image in images:
            if "/" not in image.entry_name and image.entry_name in image_entries:
                entries.append((image.entry_name, image_entries[image.entry_name]))

        for folder, member_docs in member_entries:
            entries.extend(member_docs)
            for image in images:
                if image.entry_name.startswith(f"{folder}/") and image.entry_name in image_entries:
                    entries.append((image.entry_name, image_entries[image.entry_name]))

        data = self._write_zip(entries, created)
        if not data:
            raise EmptyArchiveError(
                "Generated ZIP file is empty",
                details={"name": graph.display_name}
            )

        filename = archive_filename(graph)
        logger.debug(f"Archive {filename}: {len(entries)} entries, {len(data) / 1024:.1f} KB")

        return ArchiveResult(
            data=data,
            filename=filename,
            images_complete=not warnings,
            warnings=tuple(warnings),
        )

    # =========================================================================
    # PLANNING
    # =========================================================================

    def _plan_images(self, graph: ResolvedGraph, name: str) -> list[_PlannedImage]:
        images: list[_PlannedImage] = []
        owner = graph.display_name

        if graph.kind == "artist":
            candidates = [
                (f"{name}_avatar.jpg", graph.profile.profile_picture, "avatar"),
                (f"{name}_cover.jpg", graph.profile.cover_photo, "cover"),
            ]
        else:
            root = graph.root
            candidates = [(f"{name}_artwork.jpg", root.artwork, "artwork")]

        for entry_name, source, label in candidates:
            if select_image_url(source):
                images.append(_PlannedImage(entry_name, source, label, owner))

        if graph.kind != "track":
            width = max(2, len(str(len(graph.tracks))))
            for index, track in enumerate(graph.tracks, start=1):
                if not select_image_url(track.artwork):
                    continue
                folder = _member_folder(index, width, track.display_title)
                images.append(_PlannedImage(
                    f"{folder}/{safe_archive_name(track.display_title)}_artwork.jpg",
                    track.artwork,
                    "artwork",
                    track.display_title,
                ))

        return images

    def _render_documents(
        self,
        graph: ResolvedGraph,
        name: str
    ) -> tuple[list[tuple[str, str]], list[tuple[str, list[tuple[str, str]]]]]:
        root_document = build_document(graph)
        root_entries = self._document_entries(f"{name} Details", root_document)

        member_entries = []
        if graph.kind != "track":
            width = max(2, len(str(len(graph.tracks))))
            for index, track in enumerate(graph.tracks, start=1):
                folder = _member_folder(index, width, track.display_title)
                document = build_track_document(track, graph.profile)
                member_entries.append(
                    (folder, self._document_entries(f"{folder}/{MEMBER_DOCUMENT_NAME}", document))
                )

        return root_entries, member_entries

    @staticmethod
    def _document_entries(base_name: str, document: Document) -> list[tuple[str, str]]:
        return [
            (f"{base_name}.md", render_markdown(document)),
            (f"{base_name}.html", render_html(document)),
        ]

    # =========================================================================
    # WRITING
    # =========================================================================

    def _write_zip(self, entries: list[tuple[str, str | bytes]], created: datetime) -> bytes:
        date_time = max(created.timetuple()[:6], _ZIP_EPOCH)
        buffer = io.BytesIO()

        with zipfile.ZipFile(
            buffer,
            "w",
            compression=zipfile.ZIP_DEFLATED,
            compresslevel=self.compression_level
        ) as archive:
            for entry_name, payload in entries:
                info = zipfile.ZipInfo(entry_name, date_time=date_time)
                info.compress_type = zipfile.ZIP_DEFLATED
                info.external_attr = 0o644 << 16
                if isinstance(payload, str):
                    payload = payload.encode("utf-8")
                archive.writestr(info, payload, compresslevel=self.compression_level)

        return buffer.getvalue()
