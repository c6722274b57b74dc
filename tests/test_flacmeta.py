import struct

import pytest

from mediaconsole.library.flacmeta import (
    FlacFormatError,
    PictureType,
    read_flac,
)


def _streaminfo(rate=44100, channels=2, bps=16, total=0):
    packed = (rate << 44) | ((channels - 1) << 41) | ((bps - 1) << 36) | total
    return struct.pack(">HH", 4096, 4096) + b"\0" * 6 + packed.to_bytes(8, "big") + b"\0" * 16


def _block(block_type, body, last=False):
    return bytes([(0x80 if last else 0) | block_type]) + len(body).to_bytes(3, "big") + body


def _vorbis(entries, vendor="vendor"):
    out = struct.pack("<I", len(vendor)) + vendor.encode() + struct.pack("<I", len(entries))
    for entry in entries:
        raw = entry.encode("utf-8")
        out += struct.pack("<I", len(raw)) + raw
    return out


def _picture(picture_type, data, mime="image/jpeg", description=""):
    desc = description.encode()
    return (
        struct.pack(">II", picture_type, len(mime))
        + mime.encode()
        + struct.pack(">I", len(desc))
        + desc
        + struct.pack(">IIIII", 10, 20, 24, 0, len(data))
        + data
    )


def _write_flac(path, entries=(), pictures=(), rate=44100, channels=2, bps=16, total=0, prefix=b""):
    blocks = [(0, _streaminfo(rate, channels, bps, total))]
    if entries:
        blocks.append((4, _vorbis(list(entries))))
    for ptype, data in pictures:
        blocks.append((6, _picture(ptype, data)))
    body = b"fLaC"
    for i, (btype, content) in enumerate(blocks):
        body += _block(btype, content, last=i == len(blocks) - 1)
    path.write_bytes(prefix + body + b"\xff\xf8audio")
    return path


def test_stream_info_fields(tmp_path):
    path = _write_flac(tmp_path / "a.flac", rate=96000, channels=1, bps=24, total=96000 * 7)
    meta = read_flac(path)
    assert meta.sample_rate == 96000
    assert meta.channels == 1
    assert meta.bits_per_sample == 24
    assert meta.total_samples == 96000 * 7
    assert meta.duration_seconds == 7


def test_vorbis_comments_are_case_insensitive_and_multi_valued(tmp_path):
    path = _write_flac(
        tmp_path / "a.flac",
        entries=["title=Song", "ARTIST=One", "Artist=Two", "ALBUM=Record", "GENRE=Rock"],
    )
    meta = read_flac(path)
    assert meta.vendor == "vendor"
    assert meta.title == "Song"
    assert meta.values("artist") == ["One", "Two"]
    assert meta.artist == "One Two"
    assert meta.album == "Record"
    assert meta.genre == "Rock"


def test_year_and_track_take_leading_numbers(tmp_path):
    path = _write_flac(tmp_path / "a.flac", entries=["DATE=2018-05-01", "TRACKNUMBER=3/12"])
    meta = read_flac(path)
    assert meta.year == 2018
    assert meta.track == 3


def test_missing_tags_default_to_empty(tmp_path):
    meta = read_flac(_write_flac(tmp_path / "a.flac"))
    assert meta.title == ""
    assert meta.year == 0
    assert meta.track == 0
    assert meta.comments == {}


def test_pictures_are_read_with_type(tmp_path):
    front = b"\x89PNG front"
    back = b"\xff\xd8 back"
    path = _write_flac(
        tmp_path / "a.flac",
        pictures=[(PictureType.FRONT_COVER, front), (PictureType.BACK_COVER, back)],
    )
    meta = read_flac(path)
    assert [p.data for p in meta.pictures_of_type(PictureType.FRONT_COVER)] == [front]
    assert [p.data for p in meta.pictures_of_type(PictureType.BACK_COVER)] == [back]
    assert meta.pictures[0].mime_type == "image/jpeg"


def test_raw_picture_type_codes_map_to_cover_types(tmp_path):
    front = b"\xff\xd8 front"
    back = b"\xff\xd8 back"
    path = _write_flac(tmp_path / "a.flac", pictures=[(3, front), (4, back), (0, b"other")])
    meta = read_flac(path)
    assert [p.data for p in meta.pictures_of_type(PictureType.FRONT_COVER)] == [front]
    assert [p.data for p in meta.pictures_of_type(PictureType.BACK_COVER)] == [back]
    assert len(meta.pictures) == 3


def test_id3_prefix_is_skipped(tmp_path):
    id3 = b"ID3\x04\x00\x00" + bytes([0, 0, 0, 5]) + b"\0" * 5
    path = _write_flac(tmp_path / "a.flac", entries=["TITLE=Tagged"], prefix=id3)
    assert read_flac(path).title == "Tagged"


def test_not_flac_raises(tmp_path):
    path = tmp_path / "a.flac"
    path.write_bytes(b"RIFF0000WAVE")
    with pytest.raises(FlacFormatError):
        read_flac(path)


def test_truncated_block_raises(tmp_path):
    path = tmp_path / "a.flac"
    path.write_bytes(b"fLaC" + bytes([0x80, 0, 0, 34]) + b"\0" * 10)
    with pytest.raises(FlacFormatError):
        read_flac(path)


def test_missing_file_raises_oserror(tmp_path):
    with pytest.raises(OSError):
        read_flac(tmp_path / "missing.flac")