#!/usr/bin/env python3
"""Serve simulated TranX-2 traffic over TCP, like a serial-to-ethernet bridge.

Usage:
    python examples/tcp_source.py

Then in another terminal:
    tranx2 dump --tcp localhost:4200
"""

import socket

from tranx2.simulator import Simulator, generate_transponders
from tranx2.stream import Writer


class SocketSink:
    def __init__(self, conn: socket.socket):
        self._conn = conn

    def write(self, data: bytes) -> None:
        self._conn.sendall(data)


def serve(host: str = "0.0.0.0", port: int = 4200, transponders: int = 8,
          interval_ms: int = 2000, jitter_ms: int = 400):
    """Accept TCP connections and stream simulated passings."""
    srv = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
    srv.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    srv.bind((host, port))
    srv.listen(1)
    print(f"Listening on {host}:{port}  (Ctrl-C to stop)")

    ids = generate_transponders(transponders, seed=1)
    while True:
        print("Waiting for connection...")
        conn, addr = srv.accept()
        print(f"Client connected: {addr}")
        sim = Simulator(Writer(SocketSink(conn)), ids, interval_ms,
                        jitter=jitter_ms, noise_interval=5.0)
        try:
            sim.run()
        except (BrokenPipeError, ConnectionResetError):
            print("Client disconnected.")
        except KeyboardInterrupt:
            print("\nShutting down.")
            sim.stop()
            conn.close()
            srv.close()
            return
        finally:
            conn.close()


if __name__ == "__main__":
    serve()
