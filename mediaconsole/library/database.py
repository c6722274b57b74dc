"""SQLite storage of FLAC library track metadata."""

from __future__ import annotations

import logging
import os
import sqlite3
from dataclasses import dataclass
from typing import Dict, Iterable, List, Optional, Union

log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

_SCHEMA = (
    """
    CREATE TABLE IF NOT EXISTS tracks (
      id INTEGER PRIMARY KEY AUTOINCREMENT,
      file_path TEXT UNIQUE NOT NULL,
      title TEXT,
      artist TEXT,
      album_artist TEXT,
      album TEXT,
      track_number INTEGER DEFAULT 0,
      disc_number INTEGER DEFAULT 1,
      year INTEGER DEFAULT 0,
      genre TEXT,
      duration_seconds INTEGER DEFAULT 0,
      sample_rate INTEGER DEFAULT 0,
      bit_depth INTEGER DEFAULT 0,
      mtime INTEGER NOT NULL,
      created_at TEXT DEFAULT (datetime('now'))
    )
    """,
    "CREATE INDEX IF NOT EXISTS idx_tracks_album_artist ON tracks(album_artist)",
    "CREATE INDEX IF NOT EXISTS idx_tracks_album ON tracks(album_artist, album)",
    "CREATE INDEX IF NOT EXISTS idx_tracks_file_path ON tracks(file_path)",
)

_UPSERT = (
    "INSERT OR REPLACE INTO tracks "
    "(file_path, title, artist, album_artist, album, track_number, disc_number, "
    " year, genre, duration_seconds, sample_rate, bit_depth, mtime) "
    "VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?, ?)"
)


@dataclass
class LibraryTrack:
    """Metadata of one FLAC file in the library."""

    id: int = 0
    file_path: str = ""
    title: str = ""
    artist: str = ""
    album_artist: str = ""
    album: str = ""
    track_number: int = 0
    disc_number: int = 1
    year: int = 0
    genre: str = ""
    duration_seconds: int = 0
    sample_rate: int = 0
    bit_depth: int = 0
    mtime: int = 0


@dataclass
class LibraryArtistEntry:
    """An album artist and how many distinct albums they have."""

    album_artist: str = ""
    album_count: int = 0


@dataclass
class LibraryAlbumEntry:
    """An album of one album artist."""

    album: str = ""
    album_artist: str = ""
    year: int = 0
    track_count: int = 0


class LibraryDatabaseError(Exception):
    """Raised when the library database cannot be opened or written."""


def _text(value: Optional[str]) -> str:
    return "" if value is None else str(value)


def _number(value: Optional[int]) -> int:
    return 0 if value is None else int(value)


class LibraryDatabase:
    """Track metadata store used for browsing and incremental scanning."""

    def __init__(self) -> None:
        self._conn: Optional[sqlite3.Connection] = None

    @property
    def is_open(self) -> bool:
        """Whether a database file is currently open."""
        return self._conn is not None

    def open(self, db_path: PathLike) -> None:
        """Open (creating if needed) the database at ``db_path`` and its tables."""
        self.close()
        try:
            conn = sqlite3.connect(os.fspath(db_path), isolation_level=None)
        except sqlite3.Error as exc:
            raise LibraryDatabaseError(f"failed to open database {db_path}: {exc}") from exc
        try:
            for statement in _SCHEMA:
                conn.execute(statement)
        except sqlite3.Error as exc:
            conn.close()
            raise LibraryDatabaseError(f"failed to create tables: {exc}") from exc
        self._conn = conn
        log.info("LibraryDatabase: opened %s", db_path)

    def close(self) -> None:
        """Close the database; does nothing when it is not open."""
        conn, self._conn = self._conn, None
        if conn is not None:
            conn.close()

    def __enter__(self) -> "LibraryDatabase":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    def _connection(self) -> sqlite3.Connection:
        if self._conn is None:
            raise LibraryDatabaseError("database is not open")
        return self._conn

    def upsert_track(self, track: LibraryTrack) -> None:
        """Insert ``track``, replacing any row with the same file path."""
        conn = self._connection()
        try:
            conn.execute(
                _UPSERT,
                (
                    track.file_path,
                    track.title,
                    track.artist,
                    track.album_artist,
                    track.album,
                    track.track_number,
                    track.disc_number,
                    track.year,
                    track.genre,
                    track.duration_seconds,
                    track.sample_rate,
                    track.bit_depth,
                    track.mtime,
                ),
            )
        except sqlite3.Error as exc:
            raise LibraryDatabaseError(f"upsert of {track.file_path!r} failed: {exc}") from exc

    def upsert_track_batch(self, tracks: Iterable[LibraryTrack]) -> None:
        """Upsert all ``tracks`` in one transaction; nothing is kept if one fails."""
        conn = self._connection()
        try:
            conn.execute("BEGIN")
        except sqlite3.Error as exc:
            raise LibraryDatabaseError(f"failed to begin transaction: {exc}") from exc
        try:
            for track in tracks:
                self.upsert_track(track)
        except BaseException:
            conn.execute("ROLLBACK")
            raise
        try:
            conn.execute("COMMIT")
        except sqlite3.Error as exc:
            raise LibraryDatabaseError(f"commit failed: {exc}") from exc

    def remove_stale_entries(self, valid_paths: Iterable[str]) -> int:
        """Delete tracks whose file path is not in ``valid_paths``; return how many."""
        conn = self._connection()
        valid = set(valid_paths)
        stale = [
            path for (path,) in conn.execute("SELECT file_path FROM tracks") if path not in valid
        ]
        if not stale:
            return 0

        conn.execute("BEGIN")
        try:
            conn.executemany("DELETE FROM tracks WHERE file_path = ?", ((p,) for p in stale))
        except sqlite3.Error as exc:
            conn.execute("ROLLBACK")
            raise LibraryDatabaseError(f"delete of stale entries failed: {exc}") from exc
        conn.execute("COMMIT")
        log.info("LibraryDatabase: removed %d stale entries", len(stale))
        return len(stale)

    def get_artists(self) -> List[LibraryArtistEntry]:
        """Album artists in case-insensitive order, with their album counts."""
        rows = self._connection().execute(
            "SELECT album_artist, COUNT(DISTINCT album) AS album_count "
            "FROM tracks "
            "GROUP BY album_artist "
            "ORDER BY album_artist COLLATE NOCASE"
        )
        return [LibraryArtistEntry(_text(artist), _number(count)) for artist, count in rows]

    def get_albums_by_artist(self, album_artist: str) -> List[LibraryAlbumEntry]:
        """Albums of ``album_artist``, oldest first, then by name."""
        rows = self._connection().execute(
            "SELECT DISTINCT album, MIN(year) AS year, COUNT(*) AS track_count "
            "FROM tracks "
            "WHERE album_artist = ? "
            "GROUP BY album "
            "ORDER BY year ASC, album COLLATE NOCASE",
            (album_artist,),
        )
        return [
            LibraryAlbumEntry(_text(album), album_artist, _number(year), _number(count))
            for album, year, count in rows
        ]

    def get_tracks_by_album(self, album_artist: str, album: str) -> List[LibraryTrack]:
        """Tracks of one album, ordered by disc then track number."""
        rows = self._connection().execute(
            "SELECT id, file_path, title, artist, album_artist, album, "
            "       track_number, disc_number, year, genre, "
            "       duration_seconds, sample_rate, bit_depth, mtime "
            "FROM tracks "
            "WHERE album_artist = ? AND album = ? "
            "ORDER BY disc_number ASC, track_number ASC",
            (album_artist, album),
        )
        return [
            LibraryTrack(
                id=_number(row[0]),
                file_path=_text(row[1]),
                title=_text(row[2]),
                artist=_text(row[3]),
                album_artist=_text(row[4]),
                album=_text(row[5]),
                track_number=_number(row[6]),
                disc_number=_number(row[7]),
                year=_number(row[8]),
                genre=_text(row[9]),
                duration_seconds=_number(row[10]),
                sample_rate=_number(row[11]),
                bit_depth=_number(row[12]),
                mtime=_number(row[13]),
            )
            for row in rows
        ]

    def get_track_mtime(self, file_path: str) -> int:
        """Stored modification time of ``file_path``, or -1 if it is unknown."""
        row = self._connection().execute(
            "SELECT mtime FROM tracks WHERE file_path = ?", (file_path,)
        ).fetchone()
        return -1 if row is None else int(row[0])

    def get_all_mtimes(self) -> Dict[str, int]:
        """Map of every stored file path to its modification time."""
        rows = self._connection().execute("SELECT file_path, mtime FROM tracks")
        return {path: int(mtime) for path, mtime in rows}

    def track_count(self) -> int:
        """Number of tracks stored."""
        (count,) = self._connection().execute("SELECT COUNT(*) FROM tracks").fetchone()
        return int(count)