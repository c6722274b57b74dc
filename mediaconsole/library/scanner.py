"""Background scanning of a folder tree for FLAC files."""

from __future__ import annotations

import logging
import os
import threading
from typing import List, Mapping, Optional, Union

from mediaconsole.interfaces import Signal
from mediaconsole.library.database import LibraryTrack
from mediaconsole.library.flacmeta import read_flac

log = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]

BATCH_SIZE = 50
_FLAC_SUFFIX = ".flac"


def _file_mtime(file_path: str) -> int:
    return int(os.stat(file_path).st_mtime)


def _disc_number(text: str) -> int:
    try:
        return int(text.split("/")[0].strip())
    except ValueError:
        return 0


def extract_metadata(file_path: PathLike) -> LibraryTrack:
    """Read the tags and stream properties of one FLAC file into a track.

    Raises FlacFormatError or OSError when the file cannot be read.
    """
    path = os.fspath(file_path)
    meta = read_flac(path)

    album_artists = meta.values("ALBUMARTIST")
    discs = meta.values("DISCNUMBER")
    return LibraryTrack(
        file_path=path,
        title=meta.title,
        artist=meta.artist,
        album_artist=album_artists[0] if album_artists else meta.artist,
        album=meta.album,
        track_number=meta.track,
        disc_number=_disc_number(discs[0]) if discs else 1,
        year=meta.year,
        genre=meta.genre,
        duration_seconds=meta.duration_seconds,
        sample_rate=meta.sample_rate,
        bit_depth=meta.bits_per_sample,
        mtime=_file_mtime(path),
    )


def _find_flac_files(root_path: str) -> List[str]:
    found = []
    for dirpath, dirnames, filenames in os.walk(root_path):
        dirnames.sort()
        found.extend(
            os.path.join(dirpath, name)
            for name in sorted(filenames)
            if name.lower().endswith(_FLAC_SUFFIX)
        )
    return found


class LibraryScanner:
    """Walks a folder tree on a worker thread and reports FLAC tracks.

    Signals, emitted from the worker thread:
    ``batch_ready(tracks)`` with up to BATCH_SIZE new or changed tracks,
    ``scan_progress(processed, total)``,
    ``scan_complete(total_processed, total_skipped)`` and
    ``scan_error(file_path, message)``.
    Files whose modification time matches ``existing_mtimes`` are skipped.
    """

    def __init__(self) -> None:
        self.batch_ready = Signal()
        self.scan_progress = Signal()
        self.scan_complete = Signal()
        self.scan_error = Signal()
        self._cancelled = threading.Event()
        self._thread: Optional[threading.Thread] = None

    def start_scan(self, root_path: PathLike, existing_mtimes: Mapping[str, int]) -> bool:
        """Start scanning ``root_path``; return False if a scan is already running."""
        if self.is_scanning():
            log.warning("LibraryScanner: scan already in progress")
            return False
        self._cancelled.clear()
        self._thread = threading.Thread(
            target=self._scan,
            args=(os.fspath(root_path), dict(existing_mtimes)),
            name="LibraryScanner",
            daemon=True,
        )
        self._thread.start()
        return True

    def cancel(self) -> None:
        """Ask the running scan to stop before its next file."""
        self._cancelled.set()

    def is_scanning(self) -> bool:
        """Whether a scan is running."""
        return self._thread is not None and self._thread.is_alive()

    def wait(self, timeout: Optional[float] = None) -> bool:
        """Wait for the scan to end; return whether it has ended."""
        if self._thread is not None:
            self._thread.join(timeout)
        return not self.is_scanning()

    def _scan(self, root_path: str, existing_mtimes: Mapping[str, int]) -> None:
        log.info("LibraryScanner: starting scan of %s", root_path)
        files = _find_flac_files(root_path)
        total = len(files)
        log.info("LibraryScanner: found %d FLAC files", total)

        batch: List[LibraryTrack] = []
        processed = 0
        skipped = 0

        for file_path in files:
            if self._cancelled.is_set():
                log.info("LibraryScanner: cancelled after %d files", processed)
                break

            try:
                current_mtime = _file_mtime(file_path)
            except OSError as exc:
                current_mtime = None
                self.scan_error.emit(file_path, str(exc))

            if current_mtime is not None and existing_mtimes.get(file_path, -1) == current_mtime:
                skipped += 1
                processed += 1
                self.scan_progress.emit(processed, total)
                continue

            if current_mtime is not None:
                try:
                    track = extract_metadata(file_path)
                except Exception as exc:  # unreadable or damaged file
                    self.scan_error.emit(file_path, f"Failed to open file: {exc}")
                else:
                    track.mtime = current_mtime
                    batch.append(track)

            processed += 1
            if len(batch) >= BATCH_SIZE:
                self.batch_ready.emit(batch)
                batch = []
            self.scan_progress.emit(processed, total)

        if batch:
            self.batch_ready.emit(batch)

        total_processed = processed - skipped
        log.info(
            "LibraryScanner: scan complete. Processed: %d Skipped: %d", total_processed, skipped
        )
        self.scan_complete.emit(total_processed, skipped)