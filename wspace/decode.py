#!/usr/bin/env python3
"""Token decoders for Whitespace source.

Every reader takes the buffer and a start offset and returns the decoded value
together with the offset just past the token. Non-whitespace bytes are
comments and are skipped wherever they appear, including inside numbers and
labels. Reaching the end of the buffer before a token is complete raises
:class:`IncompleteCode`.
"""

from __future__ import annotations

from typing import Optional, Tuple

from .errors import IncompleteCode, Overflow
from .opcodes import LF, TAB

INT64_MAX = (1 << 63) - 1
INT64_MIN = -(1 << 63)

# Checked before each digit is shifted in: magnitudes of up to 63 significant
# bits decode, a 64th bit overflows.
NUMBER_GUARD = INT64_MAX >> 1

_SYMBOLS = {0x20: " ", 0x09: "\t", 0x0A: "\n"}


def find_white(code: bytes, start: int = 0) -> Tuple[Optional[str], int]:
    """Return the next whitespace symbol at or after ``start`` and its offset.

    ``(None, -1)`` when only comment bytes remain.
    """

    for pos in range(start, len(code)):
        symbol = _SYMBOLS.get(code[pos])
        if symbol is not None:
            return symbol, pos
    return None, -1


def read_symbol(code: bytes, start: int) -> Tuple[str, int]:
    symbol, pos = find_white(code, start)
    if symbol is None:
        raise IncompleteCode()
    return symbol, pos + 1


def read_prefix(code: bytes, start: int) -> Tuple[str, int]:
    """Read the three symbols that select an instruction."""

    symbols = []
    pos = start
    for _ in range(3):
        symbol, pos = read_symbol(code, pos)
        symbols.append(symbol)
    return "".join(symbols), pos


def read_number(code: bytes, start: int) -> Tuple[int, int]:
    """Read ``sign digits* LF``.

    A space sign is non-negative and a tab sign negative; digits are space for
    0 and tab for 1, most significant first. A newline in the sign position
    ends the token and decodes to 0, as does an empty digit sequence.
    """

    sign, pos = read_symbol(code, start)
    if sign == LF:
        return 0, pos
    value = 0
    while True:
        symbol, pos = read_symbol(code, pos)
        if symbol == LF:
            break
        if value > NUMBER_GUARD:
            raise Overflow()
        value <<= 1
        if symbol == TAB:
            value |= 1
    if sign == TAB:
        value = -value
    return value, pos


def read_label(code: bytes, start: int) -> Tuple[str, int]:
    """Read space/tab symbols up to LF; the symbols themselves are the label."""

    symbols = []
    pos = start
    while True:
        symbol, pos = read_symbol(code, pos)
        if symbol == LF:
            return "".join(symbols), pos
        symbols.append(symbol)


__all__ = [
    "INT64_MAX",
    "INT64_MIN",
    "NUMBER_GUARD",
    "find_white",
    "read_symbol",
    "read_prefix",
    "read_number",
    "read_label",
]
