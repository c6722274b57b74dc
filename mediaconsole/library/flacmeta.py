"""Reading of FLAC metadata blocks: stream info, Vorbis comments and pictures."""

from __future__ import annotations

import os
import re
import struct
from dataclasses import dataclass, field
from enum import IntEnum
from typing import BinaryIO, Dict, List, Union

PathLike = Union[str, "os.PathLike[str]"]

FLAC_MAGIC = b"fLaC"
_ID3_MAGIC = b"ID3"

_BLOCK_STREAMINFO = 0
_BLOCK_VORBIS_COMMENT = 4
_BLOCK_PICTURE = 6
_STREAMINFO_SIZE = 34

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class FlacFormatError(Exception):
    """Raised when a file is not a readable FLAC file."""


class PictureType(IntEnum):
    """Picture types of the FLAC PICTURE block (same as ID3v2 APIC)."""

    OTHER = 0
    FILE_ICON = 1
    OTHER_FILE_ICON = 2
    FRONT_COVER = 3
    BACK_COVER = 4
    LEAFLET_PAGE = 5
    MEDIA = 6
    LEAD_ARTIST = 7
    ARTIST = 8
    CONDUCTOR = 9
    BAND = 10
    COMPOSER = 11
    LYRICIST = 12
    RECORDING_LOCATION = 13
    DURING_RECORDING = 14
    DURING_PERFORMANCE = 15
    MOVIE_SCREEN_CAPTURE = 16
    COLOURED_FISH = 17
    ILLUSTRATION = 18
    BAND_LOGO = 19
    PUBLISHER_LOGO = 20


@dataclass
class FlacPicture:
    """An embedded picture."""

    type: int
    mime_type: str = ""
    description: str = ""
    width: int = 0
    height: int = 0
    depth: int = 0
    colors: int = 0
    data: bytes = b""


def _leading_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


@dataclass
class FlacMetadata:
    """Stream properties, tags and pictures of one FLAC file.

    Comment names are stored upper-cased; each maps to all of its values.
    """

    sample_rate: int = 0
    channels: int = 0
    bits_per_sample: int = 0
    total_samples: int = 0
    vendor: str = ""
    comments: Dict[str, List[str]] = field(default_factory=dict)
    pictures: List[FlacPicture] = field(default_factory=list)

    @property
    def duration_seconds(self) -> int:
        """Length of the stream in whole seconds."""
        if self.sample_rate <= 0:
            return 0
        return self.total_samples // self.sample_rate

    def values(self, name: str) -> List[str]:
        """All values of the comment ``name`` (case-insensitive)."""
        return list(self.comments.get(name.upper(), []))

    def tag(self, name: str) -> str:
        """Values of the comment ``name`` joined by spaces, or an empty string."""
        return " ".join(self.comments.get(name.upper(), []))

    def pictures_of_type(self, picture_type: int) -> List[FlacPicture]:
        """Embedded pictures of the given type, in file order."""
        return [p for p in self.pictures if p.type == picture_type]

    @property
    def title(self) -> str:
        return self.tag("TITLE")

    @property
    def artist(self) -> str:
        return self.tag("ARTIST")

    @property
    def album(self) -> str:
        return self.tag("ALBUM")

    @property
    def genre(self) -> str:
        return self.tag("GENRE")

    @property
    def year(self) -> int:
        """Year from DATE, else YEAR; 0 when neither holds a number."""
        for name in ("DATE", "YEAR"):
            values = self.comments.get(name)
            if values:
                return _leading_int(values[0])
        return 0

    @property
    def track(self) -> int:
        """Track number from TRACKNUMBER, else TRACKNUM; 0 when absent."""
        for name in ("TRACKNUMBER", "TRACKNUM"):
            values = self.comments.get(name)
            if values:
                return _leading_int(values[0])
        return 0


class _Reader:
    def __init__(self, data: bytes, what: str) -> None:
        self._data = data
        self._pos = 0
        self._what = what

    def take(self, size: int) -> bytes:
        end = self._pos + size
        if size < 0 or end > len(self._data):
            raise FlacFormatError(f"truncated {self._what} block")
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def u32(self, byteorder: str) -> int:
        return int.from_bytes(self.take(4), byteorder)


def _read_exact(stream: BinaryIO, size: int, what: str) -> bytes:
    data = stream.read(size)
    if len(data) != size:
        raise FlacFormatError(f"unexpected end of file reading {what}")
    return data


def _skip_id3(stream: BinaryIO) -> None:
    header = stream.read(10)
    if len(header) < 10 or not header.startswith(_ID3_MAGIC):
        stream.seek(0)
        return
    size = 0
    for byte in header[6:10]:
        size = (size << 7) | (byte & 0x7F)
    if header[5] & 0x10:
        size += 10
    stream.seek(10 + size)


def _parse_streaminfo(body: bytes, meta: FlacMetadata) -> None:
    if len(body) < _STREAMINFO_SIZE:
        raise FlacFormatError("STREAMINFO block is too short")
    packed = int.from_bytes(body[10:18], "big")
    meta.sample_rate = packed >> 44
    meta.channels = ((packed >> 41) & 0x7) + 1
    meta.bits_per_sample = ((packed >> 36) & 0x1F) + 1
    meta.total_samples = packed & 0xFFFFFFFFF


def _parse_vorbis_comment(body: bytes, meta: FlacMetadata) -> None:
    reader = _Reader(body, "VORBIS_COMMENT")
    meta.vendor = reader.take(reader.u32("little")).decode("utf-8", errors="replace")
    for _ in range(reader.u32("little")):
        entry = reader.take(reader.u32("little")).decode("utf-8", errors="replace")
        name, sep, value = entry.partition("=")
        if not sep or not name:
            continue
        meta.comments.setdefault(name.upper(), []).append(value)


def _parse_picture(body: bytes) -> FlacPicture:
    reader = _Reader(body, "PICTURE")
    picture_type = reader.u32("big")
    mime = reader.take(reader.u32("big")).decode("ascii", errors="replace")
    description = reader.take(reader.u32("big")).decode("utf-8", errors="replace")
    width, height, depth, colors = struct.unpack(">IIII", reader.take(16))
    data = reader.take(reader.u32("big"))
    return FlacPicture(picture_type, mime, description, width, height, depth, colors, data)


def read_flac(path: PathLike) -> FlacMetadata:
    """Read the metadata blocks of the FLAC file at ``path``.

    Raises FlacFormatError when the file is not FLAC or its metadata is
    damaged, and OSError when it cannot be read.
    """
    meta = FlacMetadata()
    seen_streaminfo = False
    seen_comment = False
    with open(os.fspath(path), "rb") as stream:
        _skip_id3(stream)
        if stream.read(4) != FLAC_MAGIC:
            raise FlacFormatError(f"{os.fspath(path)} is not a FLAC file")

        last = False
        while not last:
            header = _read_exact(stream, 4, "block header")
            last = bool(header[0] & 0x80)
            block_type = header[0] & 0x7F
            length = int.from_bytes(header[1:4], "big")

            if block_type == _BLOCK_STREAMINFO and not seen_streaminfo:
                _parse_streaminfo(_read_exact(stream, length, "STREAMINFO"), meta)
                seen_streaminfo = True
            elif block_type == _BLOCK_VORBIS_COMMENT and not seen_comment:
                _parse_vorbis_comment(_read_exact(stream, length, "VORBIS_COMMENT"), meta)
                seen_comment = True
            elif block_type == _BLOCK_PICTURE:
                meta.pictures.append(_parse_picture(_read_exact(stream, length, "PICTURE")))
            else:
                _read_exact(stream, length, "metadata block")

    if not seen_streaminfo:
        raise FlacFormatError(f"{os.fspath(path)} has no STREAMINFO block")
    return meta