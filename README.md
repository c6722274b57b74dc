# mediaconsole

The non-graphical core of a home media console, using only the Python
standard library (3.10 or later):

- `mediaconsole.eiscp` – framing of eISCP packets, the TCP transport for ISCP
  commands understood by networked AV receivers;
- `mediaconsole.connection` – `EiscpConnection`, an asyncio TCP connection to a
  receiver that reconnects by itself;
- `mediaconsole.quadrature` – `QuadratureDecoder` for two-channel rotary encoders;
- `mediaconsole.interfaces` – abstract `AudioOutput`, `CdDrive`,
  `DisplayControl` and `GpioMonitor`, the `TocEntry` dataclass and a small
  `Signal` class for callbacks;
- `mediaconsole.stubs` – in-memory implementations of those interfaces;
- `mediaconsole.factory` – functions returning the device objects;
- `mediaconsole.library` – a FLAC music library: metadata reading
  (`flacmeta`), a SQLite track database (`database`), browse models
  (`models`), album-art caching (`artwork`) and a background scanner
  (`scanner`).

## Installation

```
pip install .
pip install ".[test]"     # with pytest and pytest-asyncio
```

## eISCP framing

```python
from mediaconsole import eiscp

packet = eiscp.build("PWRQSTN")   # 16-byte header + b"!1PWRQSTN\r"
buffer = bytearray(packet)
eiscp.parse(buffer)               # "PWRQSTN"; the packet is removed from buffer
```

`parse` takes one complete packet from the front of a `bytearray`. It strips
the `!1` prefix and trailing CR, LF and EOF (0x1A) characters. While the data
is incomplete it returns `""` and leaves the buffer alone; if the first four
bytes are not `ISCP` it clears the buffer and returns `""`.

## Receiver connection

`EiscpConnection` runs on the asyncio event loop, so `connect_to_receiver`
must be called from within a running loop. Events arrive through the
optional `on_connected`, `on_disconnected`, `on_message` and `on_error`
callbacks. After a failed attempt or a lost connection it waits and retries,
doubling the wait from `initial_backoff` (1 s) up to `max_backoff` (30 s); a
successful connection resets it.

```python
import asyncio
from mediaconsole.connection import EiscpConnection

async def main():
    conn = EiscpConnection(on_message=print)
    conn.connect_to_receiver("192.0.2.10", 60128)
    await asyncio.sleep(2)
    conn.send_command("MVLQSTN")   # ignored while not connected
    await asyncio.sleep(2)
    conn.disconnect()              # closes and stops reconnecting

asyncio.run(main())
```

## Rotary encoders

```python
from mediaconsole.quadrature import QuadratureDecoder

decoder = QuadratureDecoder()
decoder.reset(0, 0)
decoder.update(0, 1)   # +1 (clockwise)
decoder.update(0, 0)   # -1 (counter-clockwise)
```

Channel values other than 0 or 1 raise `ValueError`.

## Platform devices

The factory functions always return the in-memory implementations from
`mediaconsole.stubs`; `is_linux()` reports whether the program runs on Linux.

```python
from mediaconsole import factory

display = factory.create_display_control()
display.set_brightness(40)
display.brightness()             # 40

gpio = factory.create_gpio_monitor(None)
gpio.volume_changed.connect(print)
gpio.simulate_volume_change(2)   # prints 2
```

`StubCdDrive` reports whatever its `disc_present`, `audio_disc`, `toc` and
`disc_id` attributes hold, and counts calls to `eject` and `stop_spindle`.
`StubAudioOutput` accepts and discards frames, keeping a count.

## Music library

```python
from mediaconsole.library.database import LibraryDatabase, LibraryTrack
from mediaconsole.library.models import LibraryArtistModel, ArtistRole

with LibraryDatabase() as db:
    db.open("library.db")
    db.upsert_track(LibraryTrack(file_path="/music/a/01.flac", title="One",
                                 artist="Artist", album_artist="Artist",
                                 album="Album", mtime=1700000000))
    artists = LibraryArtistModel(db)
    artists.refresh()
    artists.data(0, ArtistRole.ALBUM_ARTIST)   # "Artist"
```

Database failures raise `LibraryDatabaseError`. `LibraryAlbumModel` lists the
albums of its `artist_filter`, oldest first; `LibraryTrackModel` lists the
tracks of `artist_filter` + `album_filter`, by disc then track number.

`LibraryScanner` walks a directory tree for `*.flac` files on a worker thread,
skips files whose modification time matches the given map, and emits tracks
in batches of 50. Its signals fire on the worker thread, and a SQLite
connection may only be used on the thread that opened it, so collect the
batches and store them afterwards:

```python
from mediaconsole.library.scanner import LibraryScanner

batches = []
scanner = LibraryScanner()
scanner.batch_ready.connect(batches.append)
scanner.start_scan("/music", db.get_all_mtimes())
scanner.wait(None)
for batch in batches:
    db.upsert_track_batch(batch)
```

`read_flac` in `mediaconsole.library.flacmeta` reads stream info, Vorbis
comments and embedded pictures. `LibraryAlbumArtProvider` caches front and
back covers from embedded pictures, falling back to files such as
`cover.jpg` or `back.jpg` in the album folder, under
`<sha1(album_artist + album)>_<front|back>.<jpg|png>`.

## What the package does not do

- It does not decode or play audio; `AudioOutput` implementations only
  receive frames, and the only one provided discards them.
- It does not talk to real hardware: there are no drivers for GPIO, CD drives
  or display control, only the in-memory stand-ins.
- It only frames and exchanges ISCP commands; it does not interpret receiver
  responses or keep receiver state.
- It has no user interface and no command-line program.