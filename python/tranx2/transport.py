"""Transport adapters for TranX-2 byte streams.

read() returns b"" only at end of stream.  A transport configured with a
timeout raises TimeoutError instead of returning empty data, so readers
never mistake a quiet link for a closed one.
"""

from __future__ import annotations

import logging
import socket
from typing import Protocol

logger = logging.getLogger(__name__)

# TranX-2 serial defaults
DEFAULT_BAUDRATE = 9600
DEFAULT_BYTESIZE = 8
DEFAULT_STOPBITS = 1
DEFAULT_PARITY = "N"


class Transport(Protocol):
    """Abstract transport interface."""

    def read(self, n: int) -> bytes: ...
    def write(self, data: bytes) -> None: ...
    def close(self) -> None: ...


class SerialTransport:
    """UART / serial port transport (requires pyserial)."""

    def __init__(self, port: str, baudrate: int = DEFAULT_BAUDRATE,
                 bytesize: int = DEFAULT_BYTESIZE,
                 stopbits: float = DEFAULT_STOPBITS,
                 parity: str = DEFAULT_PARITY,
                 timeout: float | None = None):
        import serial
        # serial_for_url also accepts pyserial URLs such as "loop://"
        self._ser = serial.serial_for_url(port, baudrate, bytesize=bytesize,
                                          parity=parity, stopbits=stopbits,
                                          timeout=timeout)
        logger.info("opened serial port %s at %d baud", port, baudrate)

    def read(self, n: int) -> bytes:
        # Block for the first byte, then take whatever else is buffered
        data = self._ser.read(1)
        if not data:
            raise TimeoutError(f"no data from {self._ser.port} "
                               f"within {self._ser.timeout}s")
        waiting = self._ser.in_waiting
        if waiting and n > 1:
            data += self._ser.read(min(waiting, n - 1))
        return data

    def write(self, data: bytes) -> None:
        self._ser.write(data)

    def close(self) -> None:
        logger.info("closing serial port %s", self._ser.port)
        self._ser.close()


class TCPTransport:
    """TCP stream transport (client mode), e.g. a serial-to-ethernet bridge."""

    def __init__(self, host: str, port: int, timeout: float | None = None):
        self._sock = socket.create_connection((host, port))
        self._sock.settimeout(timeout)
        logger.info("connected to %s:%d", host, port)

    def read(self, n: int) -> bytes:
        # socket.timeout is TimeoutError; let it propagate
        return self._sock.recv(n)

    def write(self, data: bytes) -> None:
        self._sock.sendall(data)

    def close(self) -> None:
        self._sock.close()


class FileTransport:
    """Read from / write to a raw capture file (for replay or logging)."""

    def __init__(self, path: str, mode: str = "rb"):
        self._f = open(path, mode)

    def read(self, n: int) -> bytes:
        return self._f.read(n) or b""

    def write(self, data: bytes) -> None:
        self._f.write(data)

    def close(self) -> None:
        self._f.close()
