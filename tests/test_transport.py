"""Test transports against real sockets and pyserial's loopback port.

Run from the repo root:
    python3 tests/test_transport.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

import socket
import threading

from tranx2.client import Client
from tranx2.stream import Reader
from tranx2.transport import SerialTransport, TCPTransport


def serve_once(data: bytes) -> tuple[int, threading.Thread]:
    """Listen on a free port, send ``data`` to the first client, close."""
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.bind(("127.0.0.1", 0))
    srv.listen(1)
    port = srv.getsockname()[1]

    def run():
        conn, _ = srv.accept()
        with conn:
            conn.sendall(data)
        srv.close()

    t = threading.Thread(target=run, daemon=True)
    t.start()
    return port, t


def test_tcp_reader():
    print("test_tcp_reader...", end="")

    port, t = serve_once(b"#0970\r\n$09000235BF3436E021358700\r\n#096F\r\n")
    transport = TCPTransport("127.0.0.1", port, timeout=5.0)
    try:
        r = Reader(transport)
        assert r.read_passing().transponder_id == 144831
        assert r.read_noise() == 2415
        try:
            r.read_noise()
        except EOFError:
            pass
        else:
            raise AssertionError("expected EOFError when peer closes")
    finally:
        transport.close()
    t.join(timeout=5)

    print(" OK")


def test_tcp_client_serve():
    print("test_tcp_client_serve...", end="")

    port, t = serve_once(b"#0970\r\n#0971\r\n")
    noises = []

    class Handler:
        def on_passing(self, rec):
            raise AssertionError("unexpected passing")

        def on_noise(self, noise):
            noises.append(noise)

        def on_error(self, err):
            raise AssertionError(f"unexpected error {err}")

    c = Client("unused", Handler())
    c.conn = TCPTransport("127.0.0.1", port, timeout=5.0)
    try:
        c.serve()
    except EOFError:
        pass
    finally:
        c.close()
    t.join(timeout=5)
    assert noises == [2416, 2417]

    print(" OK")


def test_serial_loopback():
    print("test_serial_loopback...", end="")

    transport = SerialTransport("loop://", timeout=0.2)
    try:
        transport.write(b"#0970\r\n$09000235BF3436E021358700\r\n")
        r = Reader(transport)
        assert r.read_noise() == 2416
        assert r.read_passing().passing_ticks == 876011553

        # a quiet link with a timeout raises instead of looking like EOF
        try:
            r.read_noise()
        except TimeoutError:
            pass
        else:
            raise AssertionError("expected TimeoutError")
    finally:
        transport.close()

    print(" OK")


def test_client_listen_loopback():
    print("test_client_listen_loopback...", end="")

    events = []

    class Handler:
        def on_passing(self, rec):
            events.append(rec.transponder_id)

        def on_noise(self, noise):
            events.append(noise)

        def on_error(self, err):
            events.append(type(err).__name__)

    with Client("loop://", Handler(), baudrate=19200, timeout=0.2) as c:
        assert isinstance(c.conn, SerialTransport)
        assert c.conn._ser.baudrate == 19200
        assert c.conn._ser.timeout == 0.2
        c.conn.write(b"#0970\r\n#09\r\n$09000235BF3436E021358700\r\n")
        try:
            c.serve()
        except TimeoutError:
            pass
        else:
            raise AssertionError("expected TimeoutError")
    assert c.conn is None
    assert events == [2416, "LengthError", 144831]

    print(" OK")


if __name__ == "__main__":
    print("tranx2 transport tests")
    print("======================\n")

    test_tcp_reader()
    test_tcp_client_serve()
    test_serial_loopback()
    test_client_listen_loopback()

    print("\nAll tests passed.")
