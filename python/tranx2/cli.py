"""tranx2 command-line tool."""

from __future__ import annotations

import argparse
import json
import logging
import sys
from dataclasses import dataclass
from typing import TextIO

from .client import Client
from .codec import DecodeError, Passing
from .stream import Writer
from .simulator import Simulator, generate_transponders

logger = logging.getLogger(__name__)


def passing_to_json(rec: Passing) -> dict[str, int]:
    return {
        "TransponderID": rec.transponder_id,
        "PassingTicks": rec.passing_ticks,
        "Hits": rec.hits,
        "Strength": rec.strength,
        "Prefix": rec.prefix,
        "Trailing": rec.trailing,
    }


@dataclass
class JSONDumpHandler:
    """Writes each record as one JSON object per line."""

    out: TextIO
    err: TextIO

    def _emit(self, obj: dict) -> None:
        self.out.write(json.dumps(obj) + "\n")
        self.out.flush()

    def on_passing(self, rec: Passing) -> None:
        self._emit(passing_to_json(rec))

    def on_noise(self, noise: int) -> None:
        self._emit({"Noise": noise})

    def on_error(self, err: DecodeError) -> None:
        print(f"Error: {err}", file=self.err)


def _host_port(value: str) -> tuple[str, int]:
    """argparse type for "host:port"."""
    host, sep, port = value.rpartition(":")
    if not sep or not host or not port.isdecimal() or not 0 < int(port) < 65536:
        raise argparse.ArgumentTypeError(f"expected HOST:PORT, got {value!r}")
    return host, int(port)


def _open_transport(args: argparse.Namespace):
    if args.serial:
        from .transport import SerialTransport
        return SerialTransport(args.serial, baudrate=args.baud)
    if args.tcp:
        from .transport import TCPTransport
        host, port = args.tcp
        return TCPTransport(host, port)
    if args.file:
        from .transport import FileTransport
        return FileTransport(args.file)
    return None


def cmd_dump(args: argparse.Namespace) -> int:
    """Decode a stream and print records as JSON lines."""
    handler = JSONDumpHandler(sys.stdout, sys.stderr)
    client = Client(args.serial or "-", handler)
    transport = None
    try:
        transport = _open_transport(args)
        client.conn = transport if transport is not None else sys.stdin.buffer
        client.serve()
    except EOFError:
        return 0
    except OSError as exc:
        logger.debug("transport error", exc_info=True)
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        return 0
    finally:
        # stdin is not ours to close
        if transport is not None:
            transport.close()


def cmd_sim(args: argparse.Namespace) -> int:
    """Write simulated traffic to stdout."""
    writer = Writer(sys.stdout.buffer)
    sim = None
    try:
        transponders = generate_transponders(args.transponders, args.seed)
        sim = Simulator(writer, transponders, args.interval, jitter=args.jitter,
                        clock=args.clock, seed=args.seed,
                        noise_interval=args.noise_interval,
                        noise_level=args.noise_level)
        sim.run(args.duration)
    except KeyboardInterrupt:
        if sim is not None:
            sim.stop()
    except (OSError, ValueError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tranx2", description="TranX-2 protocol tool")
    parser.add_argument("-v", "--verbose", action="count", default=0,
                        help="Increase log verbosity (-vv for debug)")
    sub = parser.add_subparsers(dest="command")

    # dump
    p_dump = sub.add_parser("dump", help="Dump records as JSON lines (stdin by default)")
    src = p_dump.add_mutually_exclusive_group()
    src.add_argument("--serial", help="Serial port (e.g. /dev/ttyUSB0)")
    src.add_argument("--tcp", type=_host_port, help="TCP host:port to connect to")
    src.add_argument("--file", help="Captured stream to replay")
    p_dump.add_argument("--baud", type=int, default=9600, help="Baud rate")

    # sim
    p_sim = sub.add_parser("sim", help="Write simulated traffic to stdout")
    p_sim.add_argument("-t", "--transponders", type=int, required=True,
                       help="Number of transponders")
    p_sim.add_argument("-i", "--interval", type=int, required=True,
                       help="Average interval between passings per transponder in ms")
    p_sim.add_argument("-j", "--jitter", type=int, default=0,
                       help="Maximum jitter between passings per transponder in ms")
    p_sim.add_argument("-c", "--clock", type=int, default=0,
                       help="Start value for the device tick counter")
    p_sim.add_argument("-s", "--seed", type=int, default=None,
                       help="Seed for transponder ids and passing data")
    p_sim.add_argument("--noise-interval", type=float, default=5.0,
                       help="Seconds between noise records")
    p_sim.add_argument("--noise-level", type=int, default=2000,
                       help="Noise level to report")
    p_sim.add_argument("--duration", type=float, default=None,
                       help="Stop after this many seconds")

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)

    level = {0: logging.WARNING, 1: logging.INFO}.get(args.verbose, logging.DEBUG)
    logging.basicConfig(level=level, stream=sys.stderr,
                        format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    if args.command == "dump":
        return cmd_dump(args)
    if args.command == "sim":
        return cmd_sim(args)
    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
