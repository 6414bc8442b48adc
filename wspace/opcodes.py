#!/usr/bin/env python3
"""Shared command definitions for the Whitespace loader and VM.

Keeping the canonical prefix tables in a single module prevents drift between
the loader, the assembler and the listing renderer.
"""

from __future__ import annotations

import enum
from typing import Dict, Optional, Tuple

SPACE = " "
TAB = "\t"
LF = "\n"
WHITESPACE = (SPACE, TAB, LF)
WHITESPACE_BYTES = frozenset(b" \t\n")


class Command(enum.Enum):
    Push = "push"
    Dup = "dup"
    Copy = "copy"
    Swap = "swap"
    Discard = "discard"
    Slide = "slide"

    Add = "add"
    Sub = "sub"
    Mul = "mul"
    Div = "div"
    Mod = "mod"

    Store = "store"
    Retrieve = "retrieve"

    Mark = "mark"
    Call = "call"
    Jump = "jump"
    JZero = "jz"
    JNeg = "jn"
    Ret = "ret"
    End = "end"

    WriteChar = "wchar"
    WriteNum = "wnum"
    ReadChar = "rchar"
    ReadNum = "rnum"


class ParamKind(enum.Enum):
    NONE = "none"
    NUMBER = "number"
    LABEL = "label"


# Ordered so listings and docs iterate in a stable order. The Push prefix ends
# with the sign symbol of its number, so both signs are listed.
COMMAND_LIST: Tuple[Tuple[Command, str, ParamKind], ...] = (
    (Command.Push, "  ", ParamKind.NUMBER),
    (Command.Dup, " \n ", ParamKind.NONE),
    (Command.Copy, " \t ", ParamKind.NUMBER),
    (Command.Swap, " \n\t", ParamKind.NONE),
    (Command.Discard, " \n\n", ParamKind.NONE),
    (Command.Slide, " \t\n", ParamKind.NUMBER),
    (Command.Add, "\t   ", ParamKind.NONE),
    (Command.Sub, "\t  \t", ParamKind.NONE),
    (Command.Mul, "\t  \n", ParamKind.NONE),
    (Command.Div, "\t \t ", ParamKind.NONE),
    (Command.Mod, "\t \t\t", ParamKind.NONE),
    (Command.Store, "\t\t ", ParamKind.NONE),
    (Command.Retrieve, "\t\t\t", ParamKind.NONE),
    (Command.Mark, "\n  ", ParamKind.LABEL),
    (Command.Call, "\n \t", ParamKind.LABEL),
    (Command.Jump, "\n \n", ParamKind.LABEL),
    (Command.JZero, "\n\t ", ParamKind.LABEL),
    (Command.JNeg, "\n\t\t", ParamKind.LABEL),
    (Command.Ret, "\n\t\n", ParamKind.NONE),
    (Command.End, "\n\n\n", ParamKind.NONE),
    (Command.WriteChar, "\t\n  ", ParamKind.NONE),
    (Command.WriteNum, "\t\n \t", ParamKind.NONE),
    (Command.ReadChar, "\t\n\t ", ParamKind.NONE),
    (Command.ReadNum, "\t\n\t\t", ParamKind.NONE),
)

PARAM_KINDS: Dict[Command, ParamKind] = {cmd: kind for cmd, _, kind in COMMAND_LIST}
COMMAND_PREFIXES: Dict[Command, str] = {cmd: prefix for cmd, prefix, _ in COMMAND_LIST}
COMMANDS_BY_NAME: Dict[str, Command] = {cmd.value: cmd for cmd in Command}

# Three-symbol prefixes that fully select a command.
SINGLE_PREFIXES: Dict[str, Command] = {
    prefix: cmd for cmd, prefix, _ in COMMAND_LIST if len(prefix) == 3
}
SINGLE_PREFIXES["   "] = Command.Push
SINGLE_PREFIXES["  \t"] = Command.Push

# Three-symbol prefixes that need a fourth selector symbol. A selector missing
# from a group is an invalid sequence.
GROUP_PREFIXES: Dict[str, Dict[str, Command]] = {}
for _cmd, _prefix, _kind in COMMAND_LIST:
    if len(_prefix) == 4:
        GROUP_PREFIXES.setdefault(_prefix[:3], {})[_prefix[3]] = _cmd
del _cmd, _prefix, _kind


def param_kind(command: Command) -> ParamKind:
    """Return the parameter shape a command carries."""

    return PARAM_KINDS[command]


def lookup_prefix(prefix: str) -> Tuple[Optional[Command], Optional[Dict[str, Command]]]:
    """Resolve a three-symbol prefix to a command or a selector group."""

    if prefix in SINGLE_PREFIXES:
        return SINGLE_PREFIXES[prefix], None
    return None, GROUP_PREFIXES.get(prefix)


__all__ = [
    "SPACE",
    "TAB",
    "LF",
    "WHITESPACE",
    "WHITESPACE_BYTES",
    "Command",
    "ParamKind",
    "COMMAND_LIST",
    "PARAM_KINDS",
    "COMMAND_PREFIXES",
    "COMMANDS_BY_NAME",
    "SINGLE_PREFIXES",
    "GROUP_PREFIXES",
    "param_kind",
    "lookup_prefix",
]
