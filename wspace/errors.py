#!/usr/bin/env python3
"""Exception hierarchy shared by the loader and the execution engine."""

from __future__ import annotations

from typing import Optional


class WhitespaceError(RuntimeError):
    """Base class for every loader and VM failure."""

    message = "whitespace error"

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.message)


class LoadError(WhitespaceError, ValueError):
    """Raised when ``load`` stops before the end of the buffer.

    ``consumed`` is the offset of the instruction that could not be decoded;
    everything before it has been committed to the program. ``segment`` is the
    segment number the call decoded into.
    """

    def __init__(self, message: Optional[str] = None, *, segment: Optional[int] = None, consumed: int = 0) -> None:
        super().__init__(message)
        self.segment = segment
        self.consumed = consumed


class IncompleteCode(LoadError):
    """The buffer ends in the middle of an instruction; feed more bytes."""

    message = "incomplete sequence"


class InvalidCode(LoadError):
    message = "invalid sequence"


class Overflow(LoadError):
    message = "integer overflow"


class DuplicateLabel(LoadError):
    message = "label already exists"


class ExecutionError(WhitespaceError):
    """Raised by ``VM.step`` and ``VM.run``."""


class AlreadyTerminated(ExecutionError):
    message = "vm already terminated"


class NotLoaded(ExecutionError):
    """The program counter is past the loaded program. Not a failure."""

    message = "no program loaded"


class NotEnoughStack(ExecutionError):
    message = "not enough stack to do"


class InvalidParameter(ExecutionError):
    message = "invalid parameter"


class UndefinedLabel(ExecutionError):
    message = "undefined label"


class EmptyCallStack(ExecutionError):
    message = "callstack is empty"


class Cancelled(ExecutionError):
    """The cancellation signal fired between two instructions."""

    message = "context done"


__all__ = [
    "WhitespaceError",
    "LoadError",
    "IncompleteCode",
    "InvalidCode",
    "Overflow",
    "DuplicateLabel",
    "ExecutionError",
    "AlreadyTerminated",
    "NotLoaded",
    "NotEnoughStack",
    "InvalidParameter",
    "UndefinedLabel",
    "EmptyCallStack",
    "Cancelled",
]
