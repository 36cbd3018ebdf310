# tests/test_output.py
from __future__ import annotations

import io
import os
import re
import sys
import threading

import pytest

from execdirs.config.types import PartialLine
from execdirs.output import Channel, Sink, directory_prefix, tee_lines


class _BrokenWriter(io.RawIOBase):
    def writable(self) -> bool:
        return True

    def write(self, b) -> int:
        raise BrokenPipeError("reader went away")


class _FailingReader(io.BytesIO):
    """Yields its first line, then fails like a broken pipe would."""

    def __init__(self, data: bytes):
        super().__init__(data)
        self.calls = 0

    def readline(self, size: int | None = -1) -> bytes:
        self.calls += 1
        if self.calls > 1:
            raise OSError("read failed")
        return super().readline(size)


def _sink() -> tuple[Sink, io.BytesIO, io.BytesIO]:
    out, err = io.BytesIO(), io.BytesIO()
    return Sink(out, err), out, err


# -------------------------
# directory_prefix
# -------------------------


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX paths")
@pytest.mark.parametrize(
    "directory, expected",
    [
        ("/tmp/x/", b"/tmp/x"),
        ("/tmp/x", b"/tmp/x"),
        ("/tmp/x///", b"/tmp/x"),
        ("rel/dir/", b"rel/dir"),
        ("/", b"/"),
    ],
)
def test_directory_prefix_strips_trailing_separators(
    directory: str, expected: bytes
) -> None:
    assert directory_prefix(directory) == expected


@pytest.mark.skipif(sys.platform == "win32", reason="POSIX filesystem encoding")
def test_directory_prefix_keeps_non_utf8_bytes() -> None:
    directory = os.fsdecode(b"/tmp/caf\xe9/")
    assert directory_prefix(directory) == b"/tmp/caf\xe9"


# -------------------------
# Sink
# -------------------------


def test_sink_routes_channels() -> None:
    sink, out, err = _sink()

    assert sink.write_line(Channel.OUT, (b"a", b": ", b"x\n"))
    assert sink.write_line(Channel.ERR, (b"b", b": ", b"y\n"))

    assert out.getvalue() == b"a: x\n"
    assert err.getvalue() == b"b: y\n"


def test_sink_swallows_write_errors() -> None:
    sink = Sink(_BrokenWriter(), io.BytesIO())
    assert sink.write_line(Channel.OUT, (b"a", b": ", b"x\n")) is False


def test_sink_swallows_closed_stream() -> None:
    out = io.BytesIO()
    out.close()
    sink = Sink(out, io.BytesIO())
    assert sink.write_line(Channel.OUT, (b"a\n",)) is False


def test_concurrent_writers_never_interleave_within_a_line() -> None:
    sink, out, _ = _sink()
    payload = b"x" * 64

    def writer(n: int) -> None:
        prefix = f"dir{n}".encode()
        for _ in range(200):
            sink.write_line(Channel.OUT, (prefix, b": ", payload, b"\n"))

    threads = [threading.Thread(target=writer, args=(n,)) for n in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    lines = out.getvalue().splitlines()
    assert len(lines) == 8 * 200
    pattern = re.compile(rb"^dir\d: x{64}$")
    assert all(pattern.match(line) for line in lines)


# -------------------------
# tee_lines
# -------------------------


def test_tee_prefixes_every_line() -> None:
    sink, out, err = _sink()

    n = tee_lines(io.BytesIO(b"A\nB\n"), b"/tmp/x", sink, Channel.OUT)

    assert n == 2
    assert out.getvalue() == b"/tmp/x: A\n/tmp/x: B\n"
    assert err.getvalue() == b""


def test_tee_writes_to_requested_channel() -> None:
    sink, out, err = _sink()

    tee_lines(io.BytesIO(b"C\n"), b"d", sink, Channel.ERR)

    assert out.getvalue() == b""
    assert err.getvalue() == b"d: C\n"


def test_tee_payload_is_forwarded_unmodified() -> None:
    sink, out, _ = _sink()
    data = b"  spaced\t\xff\xfe raw: bytes \r\n\n"

    tee_lines(io.BytesIO(data), b"p", sink, Channel.OUT)

    assert out.getvalue() == b"p:   spaced\t\xff\xfe raw: bytes \r\np: \n"


def test_tee_empty_stream_writes_nothing() -> None:
    sink, out, _ = _sink()
    assert tee_lines(io.BytesIO(b""), b"p", sink, Channel.OUT) == 0
    assert out.getvalue() == b""


def test_tee_flushes_trailing_partial_line_by_default() -> None:
    sink, out, _ = _sink()

    n = tee_lines(io.BytesIO(b"A\nB"), b"p", sink, Channel.OUT)

    assert n == 2
    assert out.getvalue() == b"p: A\np: B\n"


def test_tee_drops_trailing_partial_line_when_asked() -> None:
    sink, out, _ = _sink()

    n = tee_lines(
        io.BytesIO(b"A\nB"), b"p", sink, Channel.OUT, partial=PartialLine.DROP
    )

    assert n == 1
    assert out.getvalue() == b"p: A\n"


def test_tee_stops_silently_on_read_error() -> None:
    sink, out, _ = _sink()
    stream = _FailingReader(b"A\nB\nC\n")

    n = tee_lines(stream, b"p", sink, Channel.OUT)

    assert n == 1
    assert out.getvalue() == b"p: A\n"


def test_tee_stops_reading_once_sink_fails() -> None:
    sink = Sink(_BrokenWriter(), io.BytesIO())
    stream = io.BytesIO(b"first\nsecond\nthird\n")

    n = tee_lines(stream, b"p", sink, Channel.OUT)

    assert n == 0
    assert stream.tell() == len(b"first\n")
