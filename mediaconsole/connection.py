"""TCP connection to an eISCP receiver with automatic reconnection."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable, Optional

from mediaconsole.eiscp import build, parse

log = logging.getLogger(__name__)

INITIAL_BACKOFF_SECONDS = 1.0
MAX_BACKOFF_SECONDS = 30.0
_READ_SIZE = 4096


class EiscpConnection:
    """Keeps a TCP connection to a receiver open and exchanges ISCP commands.

    Runs on the asyncio event loop. After a failed attempt or a lost
    connection it waits and tries again, doubling the wait each time up to
    ``max_backoff`` seconds; a successful connection resets the wait.
    Events are reported through the optional callbacks.
    """

    def __init__(
        self,
        *,
        on_connected: Optional[Callable[[], None]] = None,
        on_disconnected: Optional[Callable[[], None]] = None,
        on_message: Optional[Callable[[str], None]] = None,
        on_error: Optional[Callable[[str], None]] = None,
        initial_backoff: float = INITIAL_BACKOFF_SECONDS,
        max_backoff: float = MAX_BACKOFF_SECONDS,
    ) -> None:
        self.on_connected = on_connected
        self.on_disconnected = on_disconnected
        self.on_message = on_message
        self.on_error = on_error
        self._initial_backoff = initial_backoff
        self._max_backoff = max_backoff
        self._backoff = initial_backoff
        self._host = ""
        self._port = 0
        self._auto_reconnect = True
        self._buffer = bytearray()
        self._writer: Optional[asyncio.StreamWriter] = None
        self._task: Optional[asyncio.Task] = None

    @property
    def backoff(self) -> float:
        """Seconds to wait before the next reconnection attempt."""
        return self._backoff

    def connect_to_receiver(self, host: str, port: int) -> None:
        """Start connecting; reconnects automatically until :meth:`disconnect`.

        Must be called while an asyncio event loop is running.
        """
        loop = asyncio.get_running_loop()
        self._host = host
        self._port = port
        self._auto_reconnect = True
        log.info("Connecting to %s:%d", host, port)

        self._cancel_task()
        self._drop_transport()
        self._task = loop.create_task(self._run())

    def disconnect(self) -> None:
        """Close the connection and stop reconnecting."""
        self._auto_reconnect = False
        self._cancel_task()
        was_connected = self._drop_transport()
        log.info("Disconnected (manual)")
        if was_connected:
            self._fire(self.on_disconnected)

    def send_command(self, command: str) -> None:
        """Send an ISCP command such as ``"MVL1A"``; does nothing when not connected."""
        if not self.is_connected():
            return
        assert self._writer is not None
        self._writer.write(build(command))
        log.debug("Sent: %s", command)

    def is_connected(self) -> bool:
        """Whether the TCP connection is currently established."""
        return self._writer is not None and not self._writer.is_closing()

    async def _run(self) -> None:
        while True:
            try:
                reader, writer = await asyncio.open_connection(self._host, self._port)
            except OSError as exc:
                self._report_error(str(exc))
            else:
                self._writer = writer
                self._backoff = self._initial_backoff
                self._buffer.clear()
                log.info("Connected to %s:%d", self._host, self._port)
                self._fire(self.on_connected)

                await self._read_until_closed(reader)

                self._drop_transport()
                log.info("Disconnected from receiver")
                self._fire(self.on_disconnected)

            if not self._auto_reconnect:
                return
            log.info("Reconnecting in %.3f s", self._backoff)
            await asyncio.sleep(self._backoff)
            self._backoff = min(self._backoff * 2, self._max_backoff)

    async def _read_until_closed(self, reader: asyncio.StreamReader) -> None:
        while True:
            try:
                data = await reader.read(_READ_SIZE)
            except OSError as exc:
                self._report_error(str(exc))
                return
            if not data:
                return
            self._buffer.extend(data)
            while message := parse(self._buffer):
                log.debug("Received: %s", message)
                self._fire(self.on_message, message)

    def _report_error(self, error: str) -> None:
        log.warning("Socket error: %s", error)
        self._fire(self.on_error, error)

    def _cancel_task(self) -> None:
        if self._task is not None and not self._task.done():
            self._task.cancel()
        self._task = None

    def _drop_transport(self) -> bool:
        writer, self._writer = self._writer, None
        if writer is None:
            return False
        was_open = not writer.is_closing()
        writer.close()
        return was_open

    @staticmethod
    def _fire(callback, *args) -> None:
        if callback is not None:
            callback(*args)