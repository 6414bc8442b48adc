"""Whitespace loader, stack VM and tools."""

from .errors import (
    AlreadyTerminated,
    Cancelled,
    DuplicateLabel,
    EmptyCallStack,
    ExecutionError,
    IncompleteCode,
    InvalidCode,
    InvalidParameter,
    LoadError,
    NotEnoughStack,
    NotLoaded,
    Overflow,
    UndefinedLabel,
    WhitespaceError,
)
from .loader import Loader, LoadResult
from .opcodes import Command, ParamKind
from .ports import BufferedInput, LineInput, StreamInput, StreamOutput
from .program import Instruction, LabelTable, Program
from .session import ExecutionSession, SessionConfig
from .vm import VM

__version__ = "0.1.0"

__all__ = [
    "VM",
    "Loader",
    "LoadResult",
    "Command",
    "ParamKind",
    "Instruction",
    "Program",
    "LabelTable",
    "BufferedInput",
    "LineInput",
    "StreamInput",
    "StreamOutput",
    "ExecutionSession",
    "SessionConfig",
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
