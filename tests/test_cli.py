"""Test the tranx2 command-line tool.

Run from the repo root:
    python3 tests/test_cli.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

import contextlib
import io
import json
import tempfile

from tranx2 import cli

DUMP_INPUT = b"#0970\r\n$09000235BF3436E021358700\r\n\r\n$09000235BF3436\r\n#097j\r\nxyz\r\n#096F\r\n"


class _Stdout(io.TextIOWrapper):
    """Text stdout with a reachable .buffer, like sys.stdout."""


def run_cli(argv):
    out = _Stdout(io.BytesIO(), encoding="ascii", newline="")
    err = io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        rc = cli.main(argv)
    out.flush()
    return rc, out.buffer.getvalue(), err.getvalue()


def test_dump_file():
    print("test_dump_file...", end="")

    with tempfile.NamedTemporaryFile(suffix=".tranx2", delete=False) as f:
        f.write(DUMP_INPUT)
        tmppath = f.name

    try:
        rc, out, err = run_cli(["dump", "--file", tmppath])
    finally:
        os.unlink(tmppath)

    assert rc == 0
    records = [json.loads(line) for line in out.decode().splitlines()]
    assert records == [
        {"Noise": 2416},
        {"TransponderID": 144831, "PassingTicks": 876011553, "Hits": 53,
         "Strength": 135, "Prefix": 2304, "Trailing": 0},
        {"Noise": 2415},
    ]
    assert err.count("Error:") == 2

    print(" OK")


def test_dump_missing_file():
    print("test_dump_missing_file...", end="")

    rc, out, err = run_cli(["dump", "--file", "/nonexistent/capture.tranx2"])
    assert rc == 1
    assert out == b""
    assert "Error:" in err

    print(" OK")


def test_dump_stdin_left_open():
    print("test_dump_stdin_left_open...", end="")

    class FakeStdin:
        buffer = io.BytesIO(b"#0970\r\n")

    saved = sys.stdin
    sys.stdin = FakeStdin()
    try:
        rc, out, err = run_cli(["dump"])
    finally:
        sys.stdin = saved

    assert rc == 0
    assert json.loads(out) == {"Noise": 2416}
    assert not FakeStdin.buffer.closed

    print(" OK")


def test_dump_bad_tcp_address():
    print("test_dump_bad_tcp_address...", end="")

    for value in ("localhost", "localhost:http", ":4200", "localhost:0",
                  "localhost:70000"):
        try:
            run_cli(["dump", "--tcp", value])
        except SystemExit as exc:
            assert exc.code == 2, value
        else:
            raise AssertionError(f"expected usage error for {value!r}")

    assert cli._host_port("localhost:4200") == ("localhost", 4200)
    assert cli._host_port("::1:4200") == ("::1", 4200)

    print(" OK")


def test_sim_output_decodes():
    print("test_sim_output_decodes...", end="")

    rc, out, err = run_cli(["sim", "-t", "3", "-i", "10", "-j", "2", "-s", "5",
                            "--noise-interval", "0.05", "--duration", "0.25"])
    assert rc == 0

    from tranx2.stream import Reader
    from tranx2.simulator import generate_transponders

    passings = list(Reader(io.BytesIO(out)).passings())
    assert passings
    assert {p.transponder_id for p in passings} <= set(generate_transponders(3, 5))

    print(" OK")


def test_sim_bad_interval():
    print("test_sim_bad_interval...", end="")

    rc, out, err = run_cli(["sim", "-t", "1", "-i", "0", "--duration", "0.1"])
    assert rc == 1
    assert "interval" in err

    print(" OK")


def test_no_command():
    print("test_no_command...", end="")

    rc, _, _ = run_cli([])
    assert rc == 1

    print(" OK")


if __name__ == "__main__":
    print("tranx2 cli tests")
    print("================\n")

    test_dump_file()
    test_dump_missing_file()
    test_dump_stdin_left_open()
    test_dump_bad_tcp_address()
    test_sim_output_decodes()
    test_sim_bad_interval()
    test_no_command()

    print("\nAll tests passed.")
