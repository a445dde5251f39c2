"""Test the telemdecode command-line entry point.

Run from the repo root:
    python3 tests/test_cli.py
"""

import sys
import os
sys.path.insert(0, os.path.join(os.path.dirname(__file__), "..", "python"))

import builtins
import contextlib
import io
import tempfile

import telemdecode.decoder
from telemdecode.cli import main
from telemdecode.decoder import HEADER
from telemdecode.storage import DumpWriter


def run_cli(argv):
    out, err = io.StringIO(), io.StringIO()
    with contextlib.redirect_stdout(out), contextlib.redirect_stderr(err):
        status = main(argv)
    return status, out.getvalue(), err.getvalue()


@contextlib.contextmanager
def tracked_opens():
    """Record every file the decoder opens."""
    opened = []

    def tracking_open(*args, **kwargs):
        f = builtins.open(*args, **kwargs)
        opened.append(f)
        return f

    telemdecode.decoder.open = tracking_open
    try:
        yield opened
    finally:
        del telemdecode.decoder.open


def test_cli_decodes_dump():
    print("test_cli_decodes_dump...", end="")

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "TELEM.DAT")
        with DumpWriter(path) as w:
            for i in range(4):
                w.write_record(time=float(i), state=i)

        status, out, _ = run_cli([path])
        assert status == 0
        assert "Decoded 4 telemetry packets" in out

        with open(path + ".csv") as f:
            lines = f.read().splitlines()
        assert lines[0] == HEADER
        assert len(lines) == 5
        assert lines[4].startswith("3.0000,CRSCANRD,")

    print(" OK")


def test_cli_empty_dump():
    print("test_cli_empty_dump...", end="")

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "EMPTY.DAT")
        open(path, "wb").close()

        status, out, _ = run_cli([path])
        assert status == 0
        assert "Decoded 0 telemetry packets" in out
        with open(path + ".csv") as f:
            assert f.read() == HEADER + "\n"

    print(" OK")


def test_cli_missing_input():
    print("test_cli_missing_input...", end="")

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "nope.dat")
        status, out, err = run_cli([path])
        assert status == 1
        assert err.startswith("Error:")
        assert "Decoded" not in out
        assert not os.path.exists(path + ".csv")

    print(" OK")


def test_cli_unopenable_output():
    """An output path that cannot be created fails the run and frees the input."""
    print("test_cli_unopenable_output...", end="")

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "TELEM.DAT")
        with DumpWriter(path) as w:
            w.write_record(time=1.0, state=1)
        os.mkdir(path + ".csv")

        with tracked_opens() as opened:
            status, out, err = run_cli([path])
        assert status == 1
        assert err.startswith("Error:")
        assert "Decoded" not in out
        assert os.path.isdir(path + ".csv")

        assert len(opened) == 1
        assert opened[0].name == path
        assert opened[0].closed

    print(" OK")


def test_cli_truncated_dump():
    """A trailing fragment is dropped; the run still succeeds."""
    print("test_cli_truncated_dump...", end="")

    with tempfile.TemporaryDirectory() as tmp:
        path = os.path.join(tmp, "TELEM.DAT")
        with DumpWriter(path) as w:
            w.write_record(time=1.0, state=1)
            w.write_record(time=2.0, state=2)
            w.write_raw(bytes(5))

        with tracked_opens() as opened:
            status, out, _ = run_cli([path])
        assert status == 0
        assert "Decoded 2 telemetry packets" in out
        assert all(f.closed for f in opened)

        with open(path + ".csv") as f:
            lines = f.read().splitlines()
        assert len(lines) == 3
        assert lines[2].startswith("2.0000,CRUISING,")

    print(" OK")


def test_cli_requires_one_argument():
    print("test_cli_requires_one_argument...", end="")

    for argv in ([], ["a.dat", "b.dat"]):
        try:
            run_cli(argv)
        except SystemExit as e:
            assert e.code == 2
        else:
            raise AssertionError(f"accepted argv {argv}")

    print(" OK")


if __name__ == "__main__":
    print("telemdecode CLI tests")
    print("=====================\n")

    test_cli_decodes_dump()
    test_cli_empty_dump()
    test_cli_missing_input()
    test_cli_unopenable_output()
    test_cli_truncated_dump()
    test_cli_requires_one_argument()

    print("\nAll tests passed.")
