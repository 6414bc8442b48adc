#!/usr/bin/env python3
"""Interactive Whitespace REPL.

Lines typed at the prompt are appended to a pending buffer and loaded as they
become complete; whatever got committed runs immediately against the same VM,
so stack and heap persist between lines. Program input is read from the same
terminal through its own line buffer.
"""

from __future__ import annotations

import logging
import signal
import threading
from contextlib import contextmanager
from dataclasses import dataclass
from pathlib import Path
from typing import BinaryIO, Callable, Iterator, Optional, TextIO, Tuple

from prompt_toolkit import PromptSession
from prompt_toolkit.history import FileHistory, InMemoryHistory

from .errors import Cancelled, IncompleteCode, LoadError
from .ports import LineInput
from .render import render_state, visualize
from .vm import VM

LOGGER = logging.getLogger("wspace.repl")

ReadCode = Callable[[str], str]
ReadInput = Callable[[], str]


@dataclass
class ReplConfig:
    history_path: Optional[Path] = None
    interactive: bool = True


@contextmanager
def cancel_on_interrupt(event: threading.Event) -> Iterator[None]:
    """Turn SIGINT into ``event.set()`` for the duration of the block."""

    if threading.current_thread() is not threading.main_thread():
        yield
        return
    previous = signal.signal(signal.SIGINT, lambda signum, frame: event.set())
    try:
        yield
    finally:
        signal.signal(signal.SIGINT, previous)


def build_line_readers(config: ReplConfig, stdin: TextIO, stdout: BinaryIO) -> Tuple[ReadCode, ReadInput]:
    """Return ``(read_code, read_input)`` callables for the REPL.

    Both raise :class:`EOFError` at end of input.
    """

    if config.interactive:
        history = FileHistory(str(config.history_path)) if config.history_path else InMemoryHistory()
        code_session: PromptSession = PromptSession(history=history)
        input_session: PromptSession = PromptSession()

        def read_code(prompt: str) -> str:
            return code_session.prompt(prompt)

        def read_input() -> str:
            return input_session.prompt("")

        return read_code, read_input

    def read_line() -> str:
        line = stdin.readline()
        if not line:
            raise EOFError
        return line[:-1] if line.endswith("\n") else line

    def read_code_stream(prompt: str) -> str:
        stdout.write(prompt.encode("utf-8"))
        stdout.flush()
        return read_line()

    return read_code_stream, read_line


class WhitespaceREPL:
    def __init__(
        self,
        vm: Optional[VM] = None,
        *,
        read_code: ReadCode,
        read_input: Optional[ReadInput] = None,
        stdout: BinaryIO,
        stderr: TextIO,
    ) -> None:
        self.vm = vm or VM()
        self.read_code = read_code
        self.read_input = read_input or (lambda: read_code(""))
        self.stdout = stdout
        self.stderr = stderr
        self.pending = b""
        self.cancel = threading.Event()
        self.program_input = LineInput(self._read_program_line, before_read=self._flush)

    def prompt(self) -> str:
        return f"[{self.vm.segment}]{visualize(self.pending)}>"

    def run(self) -> int:
        while not self.vm.terminated:
            self._flush()
            try:
                line = self.read_code(self.prompt())
            except (EOFError, KeyboardInterrupt):
                self.stderr.write("\n")
                return 0
            self.feed(line + "\n")
        self._flush()
        return 0

    def feed(self, line: str) -> None:
        """Handle one input line (including its newline)."""

        if line.startswith("%"):
            self._magic(line.strip())
            return

        vm = self.vm
        self.pending += line.encode("utf-8")
        try:
            _, consumed = vm.load(self.pending)
            self.pending = self.pending[consumed:]
        except IncompleteCode as exc:
            consumed = exc.consumed
            self.pending = self.pending[consumed:]
        except LoadError as exc:
            consumed = exc.consumed
            self._report(f"{exc.segment}:{exc.consumed}: {exc}")
            self.pending = b""
        if consumed == 0:
            return
        self._execute()

    def _execute(self) -> None:
        vm = self.vm
        self.cancel.clear()
        try:
            with cancel_on_interrupt(self.cancel):
                vm.run(self.program_input, self.stdout, self.cancel)
        except Exception as exc:
            self._flush()
            op = vm.current_instruction()
            if op is not None:
                self._report(f"{op.segment}:{op.offset}: {op.command.name}: {exc}")
            else:
                self._report(str(exc))
            vm.reset_control()

    def _magic(self, command: str) -> None:
        if command == "%debug":
            self._flush()
            self.stderr.write(render_state(self.vm) + "\n")
        else:
            self._report(f"unknown command: {command}")

    def _read_program_line(self) -> str:
        try:
            return self.read_input() + "\n"
        except EOFError:
            return ""
        except KeyboardInterrupt:
            # Ctrl-C at the input prompt cancels the run, not the REPL
            raise Cancelled() from None

    def _report(self, message: str) -> None:
        LOGGER.debug("%s", message)
        self.stderr.write(message + "\n")
        self.stderr.flush()

    def _flush(self) -> None:
        flush = getattr(self.stdout, "flush", None)
        if flush is not None:
            flush()


__all__ = [
    "ReplConfig",
    "WhitespaceREPL",
    "build_line_readers",
    "cancel_on_interrupt",
]
