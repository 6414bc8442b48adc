#!/usr/bin/env python3
"""Mnemonic assembler producing Whitespace source.

One instruction per line::

    ; print "Hi" and stop
        push 'H'
        wchar
        push 105
        wchar
    loop:
        jump done
    done:
        end

``name:`` defines a label, ``;`` or ``#`` starts a comment. Label names are
mapped to distinct space/tab bitstrings in order of first appearance.
Numbers accept any Python integer literal (``10``, ``-3``, ``0x41``) or a
quoted character.
"""

from __future__ import annotations

import argparse
import re
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Union

from .opcodes import COMMAND_PREFIXES, COMMANDS_BY_NAME, LF, SPACE, TAB, Command, ParamKind, param_kind

_LABEL_DEF_RE = re.compile(r"^([A-Za-z_.$][\w.$]*):$")
_CHAR_RE = re.compile(r"^'(.|\\n|\\t)'$")
_CHAR_AT_RE = re.compile(r"'(\\n|\\t|.)'")

# accepted alternatives for the canonical mnemonics
ALIASES: Dict[str, str] = {
    "jmp": "jump",
    "jzero": "jz",
    "jneg": "jn",
    "printc": "wchar",
    "printn": "wnum",
    "readc": "rchar",
    "readn": "rnum",
    "pop": "discard",
}


def encode_number(value: int) -> str:
    sign = TAB if value < 0 else SPACE
    digits = format(abs(value), "b") if value else ""
    return sign + digits.replace("0", SPACE).replace("1", TAB) + LF


def encode_label(index: int) -> str:
    """Bitstring for the ``index``-th label; distinct for distinct indices."""

    if index < 0:
        raise ValueError("label index must be non-negative")
    return format(index + 1, "b").replace("0", SPACE).replace("1", TAB)


def _parse_number(token: str) -> int:
    match = _CHAR_RE.match(token)
    if match:
        text = match.group(1)
        return ord({"\\n": "\n", "\\t": "\t"}.get(text, text))
    try:
        return int(token, 0)
    except ValueError:
        raise ValueError(f"Invalid number: {token}") from None


def _strip_comment(line: str) -> str:
    pos = 0
    while pos < len(line):
        literal = _CHAR_AT_RE.match(line, pos)
        if literal:
            pos = literal.end()
            continue
        if line[pos] in ";#":
            return line[:pos].strip()
        pos += 1
    return line.strip()


def assemble(lines: Union[str, Iterable[str]]) -> bytes:
    """Assemble mnemonic lines into Whitespace source bytes."""

    if isinstance(lines, str):
        lines = lines.splitlines()
    labels: Dict[str, str] = {}
    defined: set = set()
    out: List[str] = []

    def label_bits(name: str) -> str:
        if name not in labels:
            labels[name] = encode_label(len(labels))
        return labels[name]

    def define_label(name: str) -> None:
        if name in defined:
            raise ValueError(f"Duplicate label: {name}")
        defined.add(name)
        out.append(COMMAND_PREFIXES[Command.Mark] + label_bits(name) + LF)

    for lineno, raw in enumerate(lines, 1):
        text = _strip_comment(raw)
        if not text:
            continue
        match = _LABEL_DEF_RE.match(text)
        if match:
            define_label(match.group(1))
            continue
        parts = text.split(None, 1)
        mnemonic = parts[0].lower()
        mnemonic = ALIASES.get(mnemonic, mnemonic)
        command = COMMANDS_BY_NAME.get(mnemonic)
        if command is None:
            raise ValueError(f"line {lineno}: unknown mnemonic {parts[0]!r}")
        operand = parts[1].strip() if len(parts) > 1 else None
        kind = param_kind(command)
        if kind is ParamKind.NONE:
            if operand is not None:
                raise ValueError(f"line {lineno}: {mnemonic} takes no operand")
            out.append(COMMAND_PREFIXES[command])
            continue
        if operand is None:
            raise ValueError(f"line {lineno}: {mnemonic} requires an operand")
        if kind is ParamKind.NUMBER:
            out.append(COMMAND_PREFIXES[command] + encode_number(_parse_number(operand)))
        elif command is Command.Mark:
            define_label(operand)
        else:
            out.append(COMMAND_PREFIXES[command] + label_bits(operand) + LF)
    return "".join(out).encode("ascii")


def main(argv: List[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Whitespace mnemonic assembler")
    ap.add_argument("input", type=Path, help="mnemonic source file")
    ap.add_argument("-o", "--output", type=Path, help="write Whitespace source here (default stdout)")
    args = ap.parse_args(argv)
    try:
        code = assemble(args.input.read_text(encoding="utf-8"))
    except ValueError as exc:
        print(f"{args.input}: {exc}", file=sys.stderr)
        return 1
    if args.output:
        args.output.write_bytes(code)
    else:
        sys.stdout.buffer.write(code)
    return 0


__all__ = ["ALIASES", "encode_number", "encode_label", "assemble", "main"]


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
