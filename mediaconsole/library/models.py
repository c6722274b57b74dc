"""List models for Artist > Album > Track browsing of the library."""

from __future__ import annotations

from enum import IntEnum
from typing import Any, Dict, List, Optional, Protocol

from mediaconsole.interfaces import Signal
from mediaconsole.library.database import (
    LibraryAlbumEntry,
    LibraryArtistEntry,
    LibraryDatabase,
    LibraryTrack,
)

USER_ROLE = 0x0100


class ArtistRole(IntEnum):
    ALBUM_ARTIST = USER_ROLE + 1
    ALBUM_COUNT = USER_ROLE + 2


class AlbumRole(IntEnum):
    ALBUM = USER_ROLE + 1
    YEAR = USER_ROLE + 2
    TRACK_COUNT = USER_ROLE + 3
    ART_PATH = USER_ROLE + 4


class TrackRole(IntEnum):
    TRACK_NUMBER = USER_ROLE + 1
    DISC_NUMBER = USER_ROLE + 2
    TITLE = USER_ROLE + 3
    ARTIST = USER_ROLE + 4
    DURATION_SECONDS = USER_ROLE + 5
    FILE_PATH = USER_ROLE + 6


class _CachedArt(Protocol):
    front_path: str


class _ArtProvider(Protocol):
    def get_cached_art(self, album_artist: str, album: str) -> _CachedArt: ...


class LibraryArtistModel:
    """All album artists, alphabetically, with their album counts.

    ``model_reset`` is emitted after every :meth:`refresh`.
    """

    _ROLE_NAMES = {
        ArtistRole.ALBUM_ARTIST: "albumArtist",
        ArtistRole.ALBUM_COUNT: "albumCount",
    }

    def __init__(self, database: LibraryDatabase) -> None:
        self._database = database
        self._artists: List[LibraryArtistEntry] = []
        self.model_reset = Signal()

    def refresh(self) -> None:
        """Reload the artists from the database."""
        self._artists = self._database.get_artists()
        self.model_reset.emit()

    def data(self, row: int, role: int) -> Any:
        """Value of ``role`` for ``row``, or None for an invalid row or role."""
        if not 0 <= row < len(self._artists):
            return None
        artist = self._artists[row]
        if role == ArtistRole.ALBUM_ARTIST:
            return artist.album_artist
        if role == ArtistRole.ALBUM_COUNT:
            return artist.album_count
        return None

    def role_names(self) -> Dict[int, str]:
        return dict(self._ROLE_NAMES)

    def __len__(self) -> int:
        return len(self._artists)


class LibraryAlbumModel:
    """Albums of the artist given by :attr:`artist_filter`, oldest first.

    Changing the filter reloads the model and emits ``artist_filter_changed``;
    ``model_reset`` is emitted after every :meth:`refresh`.
    """

    _ROLE_NAMES = {
        AlbumRole.ALBUM: "album",
        AlbumRole.YEAR: "year",
        AlbumRole.TRACK_COUNT: "trackCount",
        AlbumRole.ART_PATH: "artPath",
    }

    def __init__(self, database: LibraryDatabase, art_provider: Optional[_ArtProvider] = None) -> None:
        self._database = database
        self._art_provider = art_provider
        self._artist_filter = ""
        self._albums: List[LibraryAlbumEntry] = []
        self.artist_filter_changed = Signal()
        self.model_reset = Signal()

    @property
    def artist_filter(self) -> str:
        """Album artist whose albums are listed; empty lists nothing."""
        return self._artist_filter

    @artist_filter.setter
    def artist_filter(self, artist: str) -> None:
        if artist == self._artist_filter:
            return
        self._artist_filter = artist
        self.refresh()
        self.artist_filter_changed.emit()

    def refresh(self) -> None:
        """Reload the albums of the current artist."""
        if self._artist_filter:
            self._albums = self._database.get_albums_by_artist(self._artist_filter)
        else:
            self._albums = []
        self.model_reset.emit()

    def data(self, row: int, role: int) -> Any:
        """Value of ``role`` for ``row``, or None for an invalid row or role."""
        if not 0 <= row < len(self._albums):
            return None
        album = self._albums[row]
        if role == AlbumRole.ALBUM:
            return album.album
        if role == AlbumRole.YEAR:
            return album.year
        if role == AlbumRole.TRACK_COUNT:
            return album.track_count
        if role == AlbumRole.ART_PATH:
            return self._art_url(album.album)
        return None

    def _art_url(self, album: str) -> str:
        if self._art_provider is None:
            return ""
        art = self._art_provider.get_cached_art(self._artist_filter, album)
        return "file://" + art.front_path if art.front_path else ""

    def role_names(self) -> Dict[int, str]:
        return dict(self._ROLE_NAMES)

    def __len__(self) -> int:
        return len(self._albums)


class LibraryTrackModel:
    """Tracks of one album, as a flat list ordered by disc then track number.

    Both :attr:`artist_filter` and :attr:`album_filter` must be set for any
    track to be listed. Changing either reloads the model and emits the
    matching ``*_changed`` signal; ``model_reset`` follows every refresh.
    """

    _ROLE_NAMES = {
        TrackRole.TRACK_NUMBER: "trackNumber",
        TrackRole.DISC_NUMBER: "discNumber",
        TrackRole.TITLE: "title",
        TrackRole.ARTIST: "artist",
        TrackRole.DURATION_SECONDS: "durationSeconds",
        TrackRole.FILE_PATH: "filePath",
    }

    def __init__(self, database: LibraryDatabase) -> None:
        self._database = database
        self._artist_filter = ""
        self._album_filter = ""
        self._tracks: List[LibraryTrack] = []
        self.artist_filter_changed = Signal()
        self.album_filter_changed = Signal()
        self.model_reset = Signal()

    @property
    def artist_filter(self) -> str:
        """Album artist of the listed album."""
        return self._artist_filter

    @artist_filter.setter
    def artist_filter(self, artist: str) -> None:
        if artist == self._artist_filter:
            return
        self._artist_filter = artist
        self.refresh()
        self.artist_filter_changed.emit()

    @property
    def album_filter(self) -> str:
        """Title of the listed album."""
        return self._album_filter

    @album_filter.setter
    def album_filter(self, album: str) -> None:
        if album == self._album_filter:
            return
        self._album_filter = album
        self.refresh()
        self.album_filter_changed.emit()

    def refresh(self) -> None:
        """Reload the tracks of the current album."""
        if self._artist_filter and self._album_filter:
            self._tracks = self._database.get_tracks_by_album(self._artist_filter, self._album_filter)
        else:
            self._tracks = []
        self.model_reset.emit()

    def data(self, row: int, role: int) -> Any:
        """Value of ``role`` for ``row``, or None for an invalid row or role."""
        if not 0 <= row < len(self._tracks):
            return None
        track = self._tracks[row]
        attribute = {
            TrackRole.TRACK_NUMBER: "track_number",
            TrackRole.DISC_NUMBER: "disc_number",
            TrackRole.TITLE: "title",
            TrackRole.ARTIST: "artist",
            TrackRole.DURATION_SECONDS: "duration_seconds",
            TrackRole.FILE_PATH: "file_path",
        }.get(role)
        return None if attribute is None else getattr(track, attribute)

    def role_names(self) -> Dict[int, str]:
        return dict(self._ROLE_NAMES)

    def track_at(self, index: int) -> LibraryTrack:
        """Track at ``index``, or an empty track when out of range."""
        if not 0 <= index < len(self._tracks):
            return LibraryTrack()
        return self._tracks[index]

    def all_tracks(self) -> List[LibraryTrack]:
        """Every loaded track, in list order."""
        return list(self._tracks)

    def __len__(self) -> int:
        return len(self._tracks)