"""Line-oriented reading and writing of TranX-2 streams."""

from __future__ import annotations

import logging
from typing import Any, Iterator

from .codec import (
    NOISE_PREFIX, PASSING_PREFIX, Passing,
    decode_noise, decode_passing, encode_noise, encode_passing,
)

logger = logging.getLogger(__name__)


class LineReader:
    """Stateful line framer over a byte-chunk transport.

    Splits on "\\n" and drops one trailing "\\r".  At end of stream any
    unterminated tail is returned as a final line, after which
    read_line() raises EOFError.  Transport errors propagate unchanged.
    """

    def __init__(self, transport: Any, max_line_size: int = 4096,
                 chunk_size: int = 4096):
        self.transport = transport
        self.max_line_size = max_line_size
        self.chunk_size = chunk_size
        self._buf = bytearray()
        self._eof = False
        self._discarding = False

    def read_line(self) -> bytes:
        while True:
            idx = self._buf.find(b"\n")
            if idx >= 0:
                line = bytes(self._buf[:idx])
                del self._buf[:idx + 1]
                if self._discarding:
                    self._discarding = False
                    continue
                if line.endswith(b"\r"):
                    line = line[:-1]
                if len(line) > self.max_line_size:
                    self._warn_oversize()
                    continue
                return line

            if self._eof:
                line = bytes(self._buf).rstrip(b"\r")
                self._buf.clear()
                if line and not self._discarding:
                    if len(line) <= self.max_line_size:
                        return line
                    self._warn_oversize()
                raise EOFError("end of stream")

            # room for a trailing "\r" whose "\n" has not arrived yet
            if len(self._buf) > self.max_line_size + 1:
                if not self._discarding:
                    self._warn_oversize()
                self._buf.clear()
                self._discarding = True

            data = self.transport.read(self.chunk_size)
            if not data:
                self._eof = True
            else:
                self._buf.extend(data)

    def _warn_oversize(self) -> None:
        logger.warning("line exceeds max_line_size %d, discarding",
                       self.max_line_size)

    def __iter__(self) -> Iterator[bytes]:
        while True:
            try:
                yield self.read_line()
            except EOFError:
                return


class Reader:
    """Pull-style reader that returns only one record kind per call.

    read_passing() and read_noise() discard every line that is not of the
    requested kind.  Nothing is queued: a caller alternating between the
    two will silently lose the records that arrive while it waits for
    the other kind.  Use Client for mixed streams.

    Decode errors are raised from the call that hit them; the next call
    continues with the following line.
    """

    def __init__(self, transport: Any, max_line_size: int = 4096):
        self._lines = LineReader(transport, max_line_size=max_line_size)

    def _next_line(self, marker: bytes) -> bytes:
        while True:
            line = self._lines.read_line()
            if line[:1] == marker:
                return line
            if line:
                logger.debug("skipping line %r", line)

    def read_passing(self) -> Passing:
        return decode_passing(self._next_line(PASSING_PREFIX))

    def read_noise(self) -> int:
        return decode_noise(self._next_line(NOISE_PREFIX))

    def passings(self) -> Iterator[Passing]:
        """Yield passings until end of stream."""
        while True:
            try:
                yield self.read_passing()
            except EOFError:
                return

    def noises(self) -> Iterator[int]:
        """Yield noise levels until end of stream."""
        while True:
            try:
                yield self.read_noise()
            except EOFError:
                return


class Writer:
    """Encodes records onto a byte sink.  Not thread-safe."""

    def __init__(self, sink: Any):
        self._sink = sink

    def _write(self, msg: bytes) -> int:
        self._sink.write(msg)
        return len(msg)

    def write_passing(self, rec: Passing) -> int:
        """Write one passing and return the number of bytes written."""
        return self._write(encode_passing(rec))

    def write_noise(self, noise: int) -> int:
        return self._write(encode_noise(noise))

    def flush(self) -> None:
        flush = getattr(self._sink, "flush", None)
        if flush is not None:
            flush()
