"""Media console core: eISCP receiver protocol, encoder decoding, platform stand-ins and a FLAC library."""

__version__ = "2.0.0"