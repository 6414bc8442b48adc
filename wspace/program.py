#!/usr/bin/env python3
"""Instruction records, the append-only program store and the label table."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Iterator, List, Optional, Sequence, Tuple, Union, overload

from .errors import DuplicateLabel, UndefinedLabel
from .opcodes import SPACE, TAB, Command, ParamKind, param_kind
from .render import format_instruction

Parameter = Union[int, str, None]


@dataclass(frozen=True)
class Instruction:
    """One decoded operation.

    ``parameter`` must match the command's :class:`ParamKind`: ``None`` for
    plain commands, an ``int`` for Push/Copy/Slide and a string of space/tab
    symbols for the label commands. ``segment`` and ``offset`` only record
    where the instruction came from.
    """

    command: Command
    parameter: Parameter = None
    segment: int = 0
    offset: int = 0

    def __post_init__(self) -> None:
        kind = param_kind(self.command)
        value = self.parameter
        if kind is ParamKind.NONE:
            if value is not None:
                raise TypeError(f"{self.command.name} takes no parameter (got {value!r})")
        elif kind is ParamKind.NUMBER:
            if isinstance(value, bool) or not isinstance(value, int):
                raise TypeError(f"{self.command.name} requires an integer parameter (got {value!r})")
        else:
            if not isinstance(value, str) or any(ch not in (SPACE, TAB) for ch in value):
                raise TypeError(f"{self.command.name} requires a space/tab label (got {value!r})")

    @property
    def number(self) -> int:
        if param_kind(self.command) is not ParamKind.NUMBER:
            raise AttributeError(f"{self.command.name} has no number parameter")
        return self.parameter  # type: ignore[return-value]

    @property
    def label(self) -> str:
        if param_kind(self.command) is not ParamKind.LABEL:
            raise AttributeError(f"{self.command.name} has no label parameter")
        return self.parameter  # type: ignore[return-value]

    def __str__(self) -> str:
        return format_instruction(self)


class Program(Sequence[Instruction]):
    """Cumulative instruction list; indices never change once appended."""

    def __init__(self, instructions: Optional[Sequence[Instruction]] = None, *, segment: int = 1) -> None:
        self._instructions: List[Instruction] = list(instructions or ())
        self.segment = segment

    @overload
    def __getitem__(self, index: int) -> Instruction: ...

    @overload
    def __getitem__(self, index: slice) -> List[Instruction]: ...

    def __getitem__(self, index):
        return self._instructions[index]

    def __len__(self) -> int:
        return len(self._instructions)

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self._instructions)

    def __repr__(self) -> str:
        return f"Program(len={len(self)}, segment={self.segment})"

    def append(self, command: Command, parameter: Parameter = None, *, offset: int = 0) -> Instruction:
        instruction = Instruction(command, parameter, self.segment, offset)
        self._instructions.append(instruction)
        return instruction

    def next_segment(self) -> int:
        self.segment += 1
        return self.segment


class LabelTable:
    """Label text to the program index following its ``Mark``."""

    def __init__(self) -> None:
        self._targets: Dict[str, int] = {}

    def __contains__(self, label: object) -> bool:
        return label in self._targets

    def __len__(self) -> int:
        return len(self._targets)

    def __getitem__(self, label: str) -> int:
        return self._targets[label]

    def __iter__(self) -> Iterator[str]:
        return iter(self._targets)

    def items(self) -> List[Tuple[str, int]]:
        return list(self._targets.items())

    def define(self, label: str, target: int) -> None:
        if label in self._targets:
            raise DuplicateLabel()
        self._targets[label] = target

    def resolve(self, label: str) -> int:
        try:
            return self._targets[label]
        except KeyError:
            raise UndefinedLabel() from None

    def to_dict(self) -> Dict[str, int]:
        return dict(self._targets)


__all__ = ["Parameter", "Instruction", "Program", "LabelTable"]
