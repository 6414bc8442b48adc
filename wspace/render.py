#!/usr/bin/env python3
"""Human-readable views of source, instructions and VM state."""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, List, Optional, Union

from tabulate import tabulate

if TYPE_CHECKING:  # pragma: no cover
    from .program import Instruction
    from .vm import VM

_VISIBLE = {0x20: ".", 0x09: "_", 0x0A: ","}


def visualize(code: Union[bytes, str]) -> str:
    """Show space, tab and newline as ``.``, ``_`` and ``,``; drop the rest."""

    if isinstance(code, str):
        code = code.encode("utf-8")
    return "".join(_VISIBLE[b] for b in code if b in _VISIBLE)


def format_parameter(instruction: "Instruction") -> str:
    value = instruction.parameter
    if value is None:
        return ""
    if isinstance(value, str):
        return f'"{visualize(value)}"'
    return str(value)


def format_instruction(instruction: "Instruction") -> str:
    """``(segment:offset) Command param``"""

    param = format_parameter(instruction)
    text = f"({instruction.segment}:{instruction.offset}) {instruction.command.name}"
    return f"{text} {param}" if param else text


def render_program(program: Iterable["Instruction"], *, pc: Optional[int] = None) -> str:
    rows: List[List[object]] = []
    for index, ins in enumerate(program):
        marker = ">" if pc is not None and index == pc else ""
        rows.append([marker, index, f"{ins.segment}:{ins.offset}", ins.command.name, format_parameter(ins)])
    if not rows:
        return "(empty program)"
    return tabulate(rows, headers=["", "index", "seg:pos", "command", "param"], tablefmt="github")


def render_state(vm: "VM") -> str:
    """Program listing, stack, heap and call stack as used by ``%debug``."""

    parts = ["program:", render_program(vm.program, pc=vm.pc), ""]
    parts.append(f"pc: {vm.pc}  terminated: {vm.terminated}  segment: {vm.segment}  steps: {vm.steps}")
    parts.append(f"stack: {vm.stack}")
    parts.append(f"call stack: {vm.call_stack}")
    if vm.heap:
        heap_rows = [[addr, value] for addr, value in sorted(vm.heap.items())]
        parts.append("heap:")
        parts.append(tabulate(heap_rows, headers=["address", "value"], tablefmt="github"))
    else:
        parts.append("heap: {}")
    if len(vm.labels):
        label_rows = [[f'"{visualize(name)}"', target] for name, target in vm.labels.items()]
        parts.append("labels:")
        parts.append(tabulate(label_rows, headers=["label", "target"], tablefmt="github"))
    return "\n".join(parts)


__all__ = [
    "visualize",
    "format_parameter",
    "format_instruction",
    "render_program",
    "render_state",
]
