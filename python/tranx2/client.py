"""Callback client for a TranX-2 serial connection.

The client reads every line from its connection and pushes decoded
records to a handler.  Decode failures are reported through
handler.on_error() and the loop carries on; only a failure to read the
next line (transport error or end of stream) ends serve().
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Protocol

from .codec import (
    NOISE_PREFIX, PASSING_PREFIX, DecodeError, Passing,
    decode_noise, decode_passing,
)
from .stream import LineReader
from .transport import (
    DEFAULT_BAUDRATE, DEFAULT_BYTESIZE, DEFAULT_PARITY, DEFAULT_STOPBITS,
    SerialTransport,
)

logger = logging.getLogger(__name__)


class Handler(Protocol):
    """Callbacks required to handle TranX-2 events."""

    def on_passing(self, rec: Passing) -> None: ...
    def on_noise(self, noise: int) -> None: ...
    def on_error(self, err: DecodeError) -> None: ...


@dataclass
class CallbackHandler:
    """Handler built from three plain callables."""

    on_passing: Callable[[Passing], None]
    on_noise: Callable[[int], None]
    on_error: Callable[[DecodeError], None]


class Client:
    """High level callback API for a TranX-2 connection.

    Serial settings can be changed on the instance before listen().  Any
    transport may be assigned to ``conn`` instead of calling listen().
    """

    def __init__(self, port: str, handler: Handler,
                 baudrate: int = DEFAULT_BAUDRATE,
                 bytesize: int = DEFAULT_BYTESIZE,
                 stopbits: float = DEFAULT_STOPBITS,
                 parity: str = DEFAULT_PARITY,
                 timeout: float | None = None):
        self.port = port
        self.handler = handler
        self.baudrate = baudrate
        self.bytesize = bytesize
        self.stopbits = stopbits
        self.parity = parity
        self.timeout = timeout
        self.conn: Any = None

    def listen(self) -> None:
        """Open the serial port using the client's settings."""
        self.conn = SerialTransport(
            self.port, baudrate=self.baudrate, bytesize=self.bytesize,
            stopbits=self.stopbits, parity=self.parity, timeout=self.timeout,
        )

    def serve(self) -> None:
        """Read lines and dispatch them until the connection fails.

        Always ends by raising: EOFError at end of stream, or whatever
        the transport raised.
        """
        if self.conn is None:
            raise RuntimeError("no connection, call listen() first")

        lines = LineReader(self.conn)
        while True:
            line = lines.read_line()
            if not line:
                continue

            marker = line[:1]
            if marker == NOISE_PREFIX:
                try:
                    noise = decode_noise(line)
                except DecodeError as exc:
                    self.handler.on_error(exc)
                else:
                    self.handler.on_noise(noise)
            elif marker == PASSING_PREFIX:
                try:
                    rec = decode_passing(line)
                except DecodeError as exc:
                    self.handler.on_error(exc)
                else:
                    self.handler.on_passing(rec)
            else:
                logger.debug("ignoring line %r", line)

    def close(self) -> None:
        if self.conn is not None:
            self.conn.close()
            self.conn = None

    def __enter__(self):
        self.listen()
        return self

    def __exit__(self, *exc):
        self.close()
