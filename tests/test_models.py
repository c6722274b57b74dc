from types import SimpleNamespace

import pytest

from mediaconsole.library.database import LibraryDatabase, LibraryTrack
from mediaconsole.library.models import (
    AlbumRole,
    ArtistRole,
    LibraryAlbumModel,
    LibraryArtistModel,
    LibraryTrackModel,
    TrackRole,
)


def make_track(path, artist, album, track_num=1, disc_num=1, year=2020):
    return LibraryTrack(
        file_path=path,
        title=f"Track {track_num}",
        artist=artist,
        album_artist=artist,
        album=album,
        track_number=track_num,
        disc_number=disc_num,
        year=year,
        genre="Rock",
        duration_seconds=300,
        sample_rate=44100,
        bit_depth=16,
        mtime=1700000000,
    )


@pytest.fixture
def db(tmp_path):
    database = LibraryDatabase()
    database.open(tmp_path / "library.db")
    database.upsert_track(make_track("/m/z/1.flac", "Zeppelin", "IV", 1, 1, 1971))
    database.upsert_track(make_track("/m/a/1.flac", "Aerosmith", "Pump", 1, 1, 1989))
    database.upsert_track(make_track("/m/a/2.flac", "Aerosmith", "Toys", 1, 1, 1975))
    database.upsert_track(make_track("/m/a/3.flac", "Aerosmith", "Toys", 2, 1, 1975))
    yield database
    database.close()


class FakeArtProvider:
    def __init__(self, front_path):
        self.front_path = front_path
        self.calls = []

    def get_cached_art(self, album_artist, album):
        self.calls.append((album_artist, album))
        return SimpleNamespace(front_path=self.front_path, back_path="")


def test_artist_model_refresh_matches_database(db):
    model = LibraryArtistModel(db)
    assert len(model) == 0
    model.refresh()
    expected = db.get_artists()
    assert len(model) == len(expected)
    for row, entry in enumerate(expected):
        assert model.data(row, ArtistRole.ALBUM_ARTIST) == entry.album_artist
        assert model.data(row, ArtistRole.ALBUM_COUNT) == entry.album_count


def test_artist_model_invalid_row_and_role(db):
    model = LibraryArtistModel(db)
    model.refresh()
    assert model.data(len(model), ArtistRole.ALBUM_ARTIST) is None
    assert model.data(-1, ArtistRole.ALBUM_ARTIST) is None
    assert model.data(0, AlbumRole.ART_PATH) is None


def test_artist_model_role_names(db):
    names = LibraryArtistModel(db).role_names()
    assert names == {ArtistRole.ALBUM_ARTIST: "albumArtist", ArtistRole.ALBUM_COUNT: "albumCount"}


def test_artist_model_emits_reset(db):
    model = LibraryArtistModel(db)
    resets = []
    model.model_reset.connect(lambda: resets.append(True))
    model.refresh()
    assert resets == [True]


def test_album_model_empty_without_filter(db):
    model = LibraryAlbumModel(db)
    model.refresh()
    assert len(model) == 0
    assert model.artist_filter == ""


def test_album_model_filter_loads_albums(db):
    model = LibraryAlbumModel(db)
    changes = []
    model.artist_filter_changed.connect(lambda: changes.append(model.artist_filter))
    model.artist_filter = "Aerosmith"
    assert changes == ["Aerosmith"]
    expected = db.get_albums_by_artist("Aerosmith")
    assert [model.data(r, AlbumRole.ALBUM) for r in range(len(model))] == [a.album for a in expected]
    assert [model.data(r, AlbumRole.YEAR) for r in range(len(model))] == [a.year for a in expected]
    assert [model.data(r, AlbumRole.TRACK_COUNT) for r in range(len(model))] == [
        a.track_count for a in expected
    ]


def test_album_model_same_filter_does_not_emit(db):
    model = LibraryAlbumModel(db)
    model.artist_filter = "Zeppelin"
    changes = []
    model.artist_filter_changed.connect(lambda: changes.append(True))
    model.artist_filter = "Zeppelin"
    assert changes == []


def test_album_model_art_path_uses_provider(db):
    provider = FakeArtProvider("/cache/abc_front.jpg")
    model = LibraryAlbumModel(db, provider)
    model.artist_filter = "Zeppelin"
    assert model.data(0, AlbumRole.ART_PATH) == "file://" + "/cache/abc_front.jpg"
    assert provider.calls == [("Zeppelin", "IV")]


def test_album_model_art_path_empty_when_not_cached(db):
    model = LibraryAlbumModel(db, FakeArtProvider(""))
    model.artist_filter = "Zeppelin"
    assert model.data(0, AlbumRole.ART_PATH) == ""


def test_album_model_art_path_empty_without_provider(db):
    model = LibraryAlbumModel(db)
    model.artist_filter = "Zeppelin"
    assert model.data(0, AlbumRole.ART_PATH) == ""


def test_album_model_role_names(db):
    assert LibraryAlbumModel(db).role_names() == {
        AlbumRole.ALBUM: "album",
        AlbumRole.YEAR: "year",
        AlbumRole.TRACK_COUNT: "trackCount",
        AlbumRole.ART_PATH: "artPath",
    }


def test_track_model_needs_both_filters(db):
    model = LibraryTrackModel(db)
    model.artist_filter = "Aerosmith"
    assert len(model) == 0
    model.album_filter = "Toys"
    assert model.all_tracks() == db.get_tracks_by_album("Aerosmith", "Toys")
    assert len(model) == len(model.all_tracks())


def test_track_model_data_matches_tracks(db):
    model = LibraryTrackModel(db)
    model.artist_filter = "Aerosmith"
    model.album_filter = "Toys"
    for row, track in enumerate(model.all_tracks()):
        assert model.data(row, TrackRole.TRACK_NUMBER) == track.track_number
        assert model.data(row, TrackRole.DISC_NUMBER) == track.disc_number
        assert model.data(row, TrackRole.TITLE) == track.title
        assert model.data(row, TrackRole.ARTIST) == track.artist
        assert model.data(row, TrackRole.DURATION_SECONDS) == track.duration_seconds
        assert model.data(row, TrackRole.FILE_PATH) == track.file_path
    assert model.data(len(model), TrackRole.TITLE) is None


def test_track_model_track_at(db):
    model = LibraryTrackModel(db)
    model.artist_filter = "Zeppelin"
    model.album_filter = "IV"
    assert model.track_at(0).file_path == "/m/z/1.flac"
    assert model.track_at(len(model)) == LibraryTrack()
    assert model.track_at(-1) == LibraryTrack()


def test_track_model_filter_signals(db):
    model = LibraryTrackModel(db)
    artists, albums = [], []
    model.artist_filter_changed.connect(lambda: artists.append(model.artist_filter))
    model.album_filter_changed.connect(lambda: albums.append(model.album_filter))
    model.artist_filter = "Zeppelin"
    model.album_filter = "IV"
    model.album_filter = "IV"
    assert artists == ["Zeppelin"]
    assert albums == ["IV"]


def test_track_model_clearing_filter_empties(db):
    model = LibraryTrackModel(db)
    model.artist_filter = "Zeppelin"
    model.album_filter = "IV"
    assert len(model) == 1
    model.artist_filter = ""
    assert model.all_tracks() == []


def test_track_model_all_tracks_is_a_copy(db):
    model = LibraryTrackModel(db)
    model.artist_filter = "Zeppelin"
    model.album_filter = "IV"
    tracks = model.all_tracks()
    tracks.clear()
    assert len(model) == 1


def test_track_model_role_names(db):
    names = LibraryTrackModel(db).role_names()
    assert names[TrackRole.FILE_PATH] == "filePath"
    assert names[TrackRole.DURATION_SECONDS] == "durationSeconds"
    assert set(names) == set(TrackRole)