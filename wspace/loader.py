#!/usr/bin/env python3
"""Incremental loader turning Whitespace bytes into program instructions.

``load`` may be called repeatedly with successive chunks of source. When a
chunk ends in the middle of an instruction it raises :class:`IncompleteCode`
with ``consumed`` set to where that instruction starts; the caller keeps
``code[consumed:]``, appends more bytes and loads again. Instructions that were
committed are never decoded twice.
"""

from __future__ import annotations

import logging
from typing import NamedTuple

from .decode import find_white, read_label, read_number, read_prefix, read_symbol
from .errors import InvalidCode, LoadError
from .opcodes import Command, ParamKind, lookup_prefix, param_kind
from .program import LabelTable, Program

LOGGER = logging.getLogger("wspace.loader")


class LoadResult(NamedTuple):
    segment: int
    consumed: int


class Loader:
    """Decodes buffers into a shared :class:`Program` and :class:`LabelTable`."""

    def __init__(self, program: Program, labels: LabelTable) -> None:
        self.program = program
        self.labels = labels

    def load(self, code: bytes) -> LoadResult:
        code = bytes(code)
        segment = self.program.segment
        before = len(self.program)
        pos = 0
        try:
            while pos < len(code):
                _, start = find_white(code, pos)
                if start < 0:
                    pos = len(code)
                    break
                pos = start
                pos = self._decode(code, pos)
        except LoadError as exc:
            exc.segment = segment
            exc.consumed = pos
            LOGGER.debug("segment %d stopped at offset %d: %s", segment, pos, exc)
            raise
        finally:
            if pos > 0:
                self.program.next_segment()
        LOGGER.debug(
            "segment %d: %d bytes, %d instructions", segment, pos, len(self.program) - before
        )
        return LoadResult(segment, pos)

    def _decode(self, code: bytes, start: int) -> int:
        prefix, pos = read_prefix(code, start)
        command, group = lookup_prefix(prefix)
        if group is not None:
            selector, pos = read_symbol(code, pos)
            command = group.get(selector)
        if command is None:
            raise InvalidCode()

        kind = param_kind(command)
        if command is Command.Push:
            # the last prefix symbol doubles as the number's sign
            value, pos = read_number(code, pos - 1)
            self.program.append(command, value, offset=start)
        elif kind is ParamKind.NUMBER:
            value, pos = read_number(code, pos)
            self.program.append(command, value, offset=start)
        elif kind is ParamKind.LABEL:
            label, pos = read_label(code, pos)
            if command is Command.Mark:
                self.labels.define(label, len(self.program) + 1)
            self.program.append(command, label, offset=start)
        else:
            self.program.append(command, offset=start)
        return pos


__all__ = ["LoadResult", "Loader"]
