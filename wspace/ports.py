#!/usr/bin/env python3
"""Byte-oriented input and output ports used by the VM.

An input port offers ``read_byte`` and ``read_number``; an output port only
needs ``write(bytes)``. Ports are supplied per ``run``/``step`` call so the
same VM can talk to a console, an in-memory buffer or a prompt proxy.
"""

from __future__ import annotations

import io
from typing import Any, BinaryIO, Callable, Optional, Protocol, Union, runtime_checkable

from .decode import INT64_MAX, INT64_MIN


@runtime_checkable
class InputPort(Protocol):
    def read_byte(self) -> int: ...

    def read_number(self) -> int: ...


@runtime_checkable
class OutputPort(Protocol):
    def write(self, data: bytes) -> Any: ...


def parse_number(line: bytes) -> int:
    """Parse one decimal integer from a newline-terminated line."""

    text = line.decode("ascii", errors="replace").strip()
    if not text:
        raise ValueError("expected integer")
    try:
        value = int(text, 10)
    except ValueError:
        raise ValueError(f"expected integer, got {text!r}") from None
    if value < INT64_MIN or value > INT64_MAX:
        raise ValueError(f"value out of range: {text}")
    return value


class StreamInput:
    """Input port over a binary stream such as ``sys.stdin.buffer``."""

    def __init__(self, stream: BinaryIO) -> None:
        self.stream = stream

    def read_byte(self) -> int:
        data = self.stream.read(1)
        if not isinstance(data, (bytes, bytearray)):
            raise TypeError(f"input stream returned {type(data).__name__}, expected bytes")
        if not data:
            raise EOFError("end of input")
        return data[0]

    def read_number(self) -> int:
        line = self.stream.readline()
        if not isinstance(line, (bytes, bytearray)):
            raise TypeError(f"input stream returned {type(line).__name__}, expected bytes")
        if not line:
            raise EOFError("end of input")
        return parse_number(line)


class BufferedInput(StreamInput):
    """In-memory input, mainly for tests and embedding."""

    def __init__(self, data: Union[bytes, str] = b"") -> None:
        if isinstance(data, str):
            data = data.encode("utf-8")
        super().__init__(io.BytesIO(data))


class LineInput:
    """Input port that pulls whole lines from a callable on demand.

    ``readline`` returns the next line as bytes (or str), or an empty value at
    end of input. Bytes left over from a line are served before another line
    is requested. ``before_read`` runs before every line request, e.g. to flush
    pending output ahead of a prompt.
    """

    def __init__(
        self,
        readline: Callable[[], Union[bytes, str]],
        *,
        before_read: Optional[Callable[[], None]] = None,
        encoding: str = "utf-8",
    ) -> None:
        self._readline = readline
        self._before_read = before_read
        self._encoding = encoding
        self._buffer = b""

    @property
    def pending(self) -> bytes:
        return self._buffer

    def _fill(self) -> None:
        if self._before_read is not None:
            self._before_read()
        line = self._readline()
        if isinstance(line, str):
            line = line.encode(self._encoding)
        if not line:
            raise EOFError("end of input")
        self._buffer += line

    def read_byte(self) -> int:
        if not self._buffer:
            self._fill()
        value = self._buffer[0]
        self._buffer = self._buffer[1:]
        return value

    def read_number(self) -> int:
        if not self._buffer:
            self._fill()
        end = self._buffer.find(b"\n")
        while end < 0:
            try:
                self._fill()
            except EOFError:
                if not self._buffer:
                    raise
                end = len(self._buffer) - 1
                break
            end = self._buffer.find(b"\n")
        line, self._buffer = self._buffer[: end + 1], self._buffer[end + 1 :]
        return parse_number(line)


class StreamOutput:
    """Output port over a binary stream, optionally flushing every write."""

    def __init__(self, stream: BinaryIO, *, autoflush: bool = False) -> None:
        self.stream = stream
        self.autoflush = autoflush

    def write(self, data: bytes) -> int:
        written = self.stream.write(data)
        if self.autoflush:
            self.stream.flush()
        return written if written is not None else len(data)

    def flush(self) -> None:
        self.stream.flush()


def as_input(source: Any) -> InputPort:
    """Adapt ``bytes``, a binary stream or a port to an input port."""

    if source is None:
        return BufferedInput(b"")
    if isinstance(source, InputPort):
        return source
    if isinstance(source, io.TextIOBase):
        raise TypeError("input stream must be binary (use its .buffer)")
    if isinstance(source, (bytes, bytearray, str)):
        return BufferedInput(bytes(source) if not isinstance(source, str) else source)
    if hasattr(source, "read") and hasattr(source, "readline"):
        return StreamInput(source)
    raise TypeError(f"cannot use {type(source).__name__} as an input port")


def as_output(sink: Any) -> OutputPort:
    """Return ``sink`` if it accepts bytes writes; ``None`` discards output."""

    if sink is None:
        return StreamOutput(io.BytesIO())
    if isinstance(sink, io.TextIOBase):
        raise TypeError("output stream must be binary (use its .buffer)")
    if isinstance(sink, OutputPort):
        return sink
    raise TypeError(f"cannot use {type(sink).__name__} as an output port")


__all__ = [
    "InputPort",
    "OutputPort",
    "parse_number",
    "StreamInput",
    "BufferedInput",
    "LineInput",
    "StreamOutput",
    "as_input",
    "as_output",
]
