"""Framing for eISCP, the TCP transport for ISCP receiver commands.

A packet is a 16-byte header followed by an ISCP payload:

* ``ISCP`` magic (4 bytes)
* header size, big-endian (4 bytes, always 16)
* payload size, big-endian (4 bytes)
* version (1 byte, always 1) and 3 reserved zero bytes
* payload: ``!1`` + command + ``\\r``
"""

from __future__ import annotations

import struct

HEADER_SIZE = 16
MAGIC = b"ISCP"
VERSION = 1

_HEADER = struct.Struct(">4sIIB3x")
_TRAILING = "\r\n\x1a"


def build(command: str) -> bytes:
    """Frame an ISCP command such as ``"PWRQSTN"`` as a complete eISCP packet."""
    payload = b"!1" + command.encode("latin-1", errors="replace") + b"\r"
    return _HEADER.pack(MAGIC, HEADER_SIZE, len(payload), VERSION) + payload


def parse(buffer: bytearray) -> str:
    """Take one complete packet from the front of ``buffer``.

    Returns the ISCP command with its ``!1`` prefix and trailing CR, LF and
    EOF characters removed, and deletes the consumed bytes from ``buffer``.
    Returns an empty string and leaves ``buffer`` untouched when the data is
    incomplete. When the magic bytes are wrong the buffer is cleared and an
    empty string is returned.
    """
    if len(buffer) < HEADER_SIZE:
        return ""

    if bytes(buffer[:4]) != MAGIC:
        buffer.clear()
        return ""

    message_size = int.from_bytes(buffer[8:12], "big")
    total_size = HEADER_SIZE + message_size
    if len(buffer) < total_size:
        return ""

    payload = bytes(buffer[HEADER_SIZE:total_size])
    del buffer[:total_size]

    message = payload.decode("latin-1")
    if message.startswith("!1"):
        message = message[2:]
    return message.rstrip(_TRAILING)