#!/usr/bin/env python3
"""Stack machine executing a loaded Whitespace program."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, TextIO

from .errors import (
    AlreadyTerminated,
    Cancelled,
    EmptyCallStack,
    ExecutionError,
    InvalidParameter,
    NotEnoughStack,
    NotLoaded,
)
from .loader import Loader, LoadResult
from .opcodes import Command
from .ports import InputPort, OutputPort, as_input, as_output
from .program import Instruction, LabelTable, Program
from .render import format_instruction

LOGGER = logging.getLogger("wspace.vm")

_WORD = 1 << 64
_SIGN = 1 << 63


def wrap_int(value: int) -> int:
    """Fold ``value`` into signed 64-bit two's complement."""

    value &= _WORD - 1
    return value - _WORD if value & _SIGN else value


def trunc_div(a: int, b: int) -> int:
    """Integer division truncating toward zero. Raises ZeroDivisionError."""

    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


def trunc_mod(a: int, b: int) -> int:
    return a - b * trunc_div(a, b)


class VM:
    """Whitespace virtual machine.

    ``program``, ``labels``, ``stack``, ``heap`` and ``call_stack`` live as long
    as the VM and survive any number of load/run cycles. ``pc`` and
    ``terminated`` are control state; callers reset them with
    :meth:`reset_control` before running an independent top-level program.
    """

    def __init__(self, *, trace_file: Optional[TextIO] = None) -> None:
        self.program = Program()
        self.labels = LabelTable()
        self.loader = Loader(self.program, self.labels)
        self.pc = 0
        self.terminated = False
        self.stack: List[int] = []
        self.heap: Dict[int, int] = {}
        self.call_stack: List[int] = []
        self.steps = 0
        self.trace_out = trace_file

    @property
    def segment(self) -> int:
        return self.program.segment

    def load(self, code: bytes) -> LoadResult:
        return self.loader.load(code)

    def current_instruction(self) -> Optional[Instruction]:
        if 0 <= self.pc < len(self.program):
            return self.program[self.pc]
        return None

    def reset_control(self) -> None:
        """Point ``pc`` past the loaded program and clear ``terminated``."""

        self.pc = len(self.program)
        self.terminated = False

    def snapshot_state(self) -> Dict[str, Any]:
        return {
            "pc": self.pc,
            "terminated": self.terminated,
            "segment": self.segment,
            "steps": self.steps,
            "stack": list(self.stack),
            "heap": dict(self.heap),
            "call_stack": list(self.call_stack),
            "labels": self.labels.to_dict(),
            "program_len": len(self.program),
        }

    def run(self, stdin: Any = None, stdout: Any = None, cancel: Any = None) -> None:
        """Step until ``End``, the end of the loaded program, or an error.

        ``cancel`` is polled before every instruction (anything with
        ``is_set()``, e.g. :class:`threading.Event`). When it fires,
        :class:`Cancelled` is raised and the VM is left untouched so a later
        ``run`` resumes at the same instruction.
        """

        in_port = as_input(stdin)
        out_port = as_output(stdout)
        while not self.terminated:
            if cancel is not None and cancel.is_set():
                raise Cancelled()
            try:
                self._execute(in_port, out_port)
            except NotLoaded:
                break

    def step(self, stdin: Any = None, stdout: Any = None) -> None:
        """Execute one instruction.

        ``stdin`` must be a port or a stream that keeps its read position
        between calls; raw ``bytes`` would restart at offset 0 on every step.
        """

        if isinstance(stdin, (bytes, bytearray, str)):
            raise TypeError("step() needs an input port; wrap the data in BufferedInput")
        self._execute(as_input(stdin), as_output(stdout))

    def _halt(self, exc: BaseException) -> BaseException:
        self.terminated = True
        LOGGER.debug("halted at pc=%d: %s", self.pc, exc)
        return exc

    def _need(self, depth: int) -> None:
        if len(self.stack) < depth:
            raise self._halt(NotEnoughStack())

    def _target(self, label: str) -> int:
        try:
            return self.labels.resolve(label)
        except ExecutionError as exc:
            raise self._halt(exc) from None

    def _execute(self, stdin: InputPort, stdout: OutputPort) -> None:
        if self.terminated:
            raise AlreadyTerminated()
        if self.pc < 0 or self.pc >= len(self.program):
            raise NotLoaded()

        op = self.program[self.pc]
        cmd = op.command
        stack = self.stack
        if self.trace_out is not None:
            self.trace_out.write(format_instruction(op) + "\n")

        if cmd is Command.Push:
            stack.append(op.parameter)
            self.pc += 1
        elif cmd is Command.Dup:
            self._need(1)
            stack.append(stack[-1])
            self.pc += 1
        elif cmd is Command.Copy:
            idx = op.parameter
            if idx < 0 or idx >= len(stack):
                raise self._halt(InvalidParameter())
            stack.append(stack[-idx - 1])
            self.pc += 1
        elif cmd is Command.Swap:
            self._need(2)
            stack[-1], stack[-2] = stack[-2], stack[-1]
            self.pc += 1
        elif cmd is Command.Discard:
            self._need(1)
            stack.pop()
            self.pc += 1
        elif cmd is Command.Slide:
            n = op.parameter
            if n < 0 or n >= len(stack) - 1:
                raise self._halt(InvalidParameter())
            top = stack[-1]
            del stack[len(stack) - n - 1 :]
            stack.append(top)
            self.pc += 1
        elif cmd in (Command.Add, Command.Sub, Command.Mul, Command.Div, Command.Mod):
            self._need(2)
            b = stack[-1]
            a = stack[-2]
            if cmd is Command.Add:
                result = a + b
            elif cmd is Command.Sub:
                result = a - b
            elif cmd is Command.Mul:
                result = a * b
            else:
                if b == 0:
                    raise self._halt(ZeroDivisionError("integer division by zero"))
                result = trunc_div(a, b) if cmd is Command.Div else trunc_mod(a, b)
            stack.pop()
            stack[-1] = wrap_int(result)
            self.pc += 1
        elif cmd is Command.Store:
            self._need(2)
            value = stack.pop()
            address = stack.pop()
            self.heap[address] = value
            self.pc += 1
        elif cmd is Command.Retrieve:
            self._need(1)
            stack[-1] = self.heap.get(stack[-1], 0)
            self.pc += 1
        elif cmd is Command.Mark:
            self.pc += 1
        elif cmd is Command.Call:
            target = self._target(op.parameter)
            self.call_stack.append(self.pc + 1)
            self.pc = target
        elif cmd is Command.Jump:
            self.pc = self._target(op.parameter)
        elif cmd in (Command.JZero, Command.JNeg):
            target = self._target(op.parameter)
            self._need(1)
            value = stack.pop()
            taken = value == 0 if cmd is Command.JZero else value < 0
            self.pc = target if taken else self.pc + 1
        elif cmd is Command.Ret:
            if not self.call_stack:
                raise self._halt(EmptyCallStack())
            self.pc = self.call_stack.pop()
        elif cmd is Command.End:
            self.terminated = True
        elif cmd in (Command.WriteChar, Command.WriteNum):
            self._need(1)
            value = stack[-1]
            data = bytes([value & 0xFF]) if cmd is Command.WriteChar else str(value).encode("ascii")
            try:
                stdout.write(data)
            except Exception as exc:
                self._halt(exc)
                raise
            stack.pop()
            self.pc += 1
        elif cmd in (Command.ReadChar, Command.ReadNum):
            self._need(1)
            try:
                value = stdin.read_byte() if cmd is Command.ReadChar else stdin.read_number()
            except Exception as exc:
                self._halt(exc)
                raise
            self.heap[stack.pop()] = value
            self.pc += 1
        else:  # pragma: no cover - Command is a closed enum
            raise self._halt(ExecutionError(f"unknown command {cmd!r}"))
        self.steps += 1


__all__ = ["VM", "wrap_int", "trunc_div", "trunc_mod"]
