"""Album art extraction from FLAC files and album folders, cached on disk."""

from __future__ import annotations

import hashlib
import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import List, Union

from mediaconsole.library.flacmeta import FlacFormatError, PictureType, read_flac

log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

FRONT_FALLBACKS = (
    "cover.jpg", "Cover.jpg", "cover.png", "Cover.png",
    "folder.jpg", "Folder.jpg", "folder.png", "Folder.png",
    "front.jpg", "Front.jpg", "front.png", "Front.png",
)

BACK_FALLBACKS = (
    "back.jpg", "Back.jpg", "back.png", "Back.png",
    "back-cover.jpg", "Back-cover.jpg", "back-cover.png", "Back-cover.png",
)

_PNG_SIGNATURE = b"\x89PNG"
_KINDS = {
    "front": (PictureType.FRONT_COVER, FRONT_FALLBACKS),
    "back": (PictureType.BACK_COVER, BACK_FALLBACKS),
}


@dataclass
class LibraryAlbumArt:
    """Paths of cached front and back art; empty when there is none."""

    front_path: str = ""
    back_path: str = ""


class LibraryAlbumArtProvider:
    """Finds album art and keeps a copy in ``cache_dir``.

    Cached files are named ``<sha1(album_artist + album)>_<front|back>.<jpg|png>``.
    Embedded FLAC pictures are preferred; otherwise well-known image files
    in the album's folder are used.
    """

    def __init__(self, cache_dir: PathLike) -> None:
        self._cache_dir = Path(cache_dir)
        self._cache_dir.mkdir(parents=True, exist_ok=True)

    @property
    def cache_dir(self) -> Path:
        return self._cache_dir

    def extract_art(self, flac_path: PathLike, album_artist: str, album: str) -> LibraryAlbumArt:
        """Find and cache the art of an album; reuse the cache when present."""
        if self.has_cached_art(album_artist, album):
            return self.get_cached_art(album_artist, album)

        digest = self.compute_hash(album_artist, album)
        pictures = self._embedded_pictures(flac_path)
        album_dir = Path(os.path.abspath(os.fspath(flac_path))).parent

        art = LibraryAlbumArt()
        for kind in ("front", "back"):
            path = self._extract_embedded(pictures, digest, kind, flac_path)
            if not path:
                path = self._find_file_art(album_dir, digest, kind)
            setattr(art, f"{kind}_path", path)
        return art

    def has_cached_art(self, album_artist: str, album: str) -> bool:
        """Whether front art of this album is already cached."""
        return bool(self._find_cached_file(self.compute_hash(album_artist, album), "front"))

    def get_cached_art(self, album_artist: str, album: str) -> LibraryAlbumArt:
        """Paths of the cached art of this album."""
        digest = self.compute_hash(album_artist, album)
        return LibraryAlbumArt(
            self._find_cached_file(digest, "front"),
            self._find_cached_file(digest, "back"),
        )

    def compute_hash(self, album_artist: str, album: str) -> str:
        """Hex SHA-1 of the album artist followed by the album title."""
        return hashlib.sha1((album_artist + album).encode("utf-8")).hexdigest()

    @staticmethod
    def _embedded_pictures(flac_path: PathLike) -> List:
        try:
            return read_flac(flac_path).pictures
        except (FlacFormatError, OSError):
            return []

    def _extract_embedded(self, pictures: List, digest: str, kind: str, flac_path: PathLike) -> str:
        picture_type = _KINDS[kind][0]
        for picture in pictures:
            if picture.type != picture_type:
                continue
            path = self._save_to_disk(digest, kind, picture.data)
            if path:
                log.debug("LibraryAlbumArtProvider: extracted %s from FLAC: %s", kind, flac_path)
                return path
        return ""

    def _find_file_art(self, album_dir: Path, digest: str, kind: str) -> str:
        for name in _KINDS[kind][1]:
            candidate = album_dir / name
            if not candidate.is_file():
                continue
            try:
                data = candidate.read_bytes()
            except OSError:
                continue
            path = self._save_to_disk(digest, kind, data)
            if path:
                log.debug("LibraryAlbumArtProvider: found %s fallback: %s", kind, candidate)
                return path
        return ""

    def _save_to_disk(self, digest: str, kind: str, data: bytes) -> str:
        if not data:
            return ""
        ext = "png" if data.startswith(_PNG_SIGNATURE) else "jpg"
        target = self._cache_dir / f"{digest}_{kind}.{ext}"
        try:
            target.write_bytes(data)
        except OSError:
            log.warning("LibraryAlbumArtProvider: failed to write %s", target)
            return ""
        return str(target)

    def _find_cached_file(self, digest: str, kind: str) -> str:
        for ext in ("jpg", "png"):
            path = self._cache_dir / f"{digest}_{kind}.{ext}"
            if path.exists():
                return str(path)
        return ""