#!/usr/bin/env python3
"""Execute-request helper for embedding the VM in an interactive front end.

Each request resets control state, loads the submitted source as a new
segment and runs it. Program input is proxied through ``request_input`` (one
prompt per line) and output is captured; pending output is handed to
``on_output`` before each prompt so the user sees it before answering. Stack,
heap and labels carry over from one request to the next.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Callable, Dict, Optional, Union

from .errors import LoadError
from .ports import LineInput
from .vm import VM

LOGGER = logging.getLogger("wspace.session")

JsonDict = Dict[str, Any]


@dataclass(frozen=True)
class SessionConfig:
    input_prompt: str = ">"
    encoding: str = "utf-8"
    errors: str = "replace"


class _CapturedOutput:
    def __init__(self) -> None:
        self._chunks = bytearray()

    def write(self, data: bytes) -> int:
        self._chunks.extend(data)
        return len(data)

    def drain(self) -> bytes:
        data = bytes(self._chunks)
        self._chunks.clear()
        return data


class ExecutionSession:
    """One VM serving a sequence of execute requests."""

    def __init__(
        self,
        vm: Optional[VM] = None,
        *,
        request_input: Callable[[str], str],
        on_output: Optional[Callable[[str], None]] = None,
        config: Optional[SessionConfig] = None,
    ) -> None:
        self.vm = vm or VM()
        self.request_input = request_input
        self.on_output = on_output
        self.config = config or SessionConfig()
        self.execution_count = 0

    def _decode(self, data: bytes) -> str:
        return data.decode(self.config.encoding, errors=self.config.errors)

    def execute(self, code: Union[str, bytes], cancel: Any = None) -> JsonDict:
        self.execution_count += 1
        vm = self.vm
        vm.reset_control()
        if isinstance(code, str):
            code = code.encode(self.config.encoding)

        try:
            vm.load(code)
        except LoadError as exc:
            LOGGER.debug("execute #%d: load failed: %s", self.execution_count, exc)
            return self._error(exc, f"{exc.consumed}: {exc}", b"")

        output = _CapturedOutput()

        def flush_output() -> None:
            pending = output.drain()
            if pending and self.on_output is not None:
                self.on_output(self._decode(pending))

        def readline() -> str:
            return self.request_input(self.config.input_prompt) + "\n"

        # Output is handed over only when a new line is requested; reads served
        # from an already buffered line do not flush.
        stdin = LineInput(readline, before_read=flush_output, encoding=self.config.encoding)
        try:
            vm.run(stdin, output, cancel)
        except Exception as exc:
            op = vm.current_instruction()
            where = f"{op.offset}: {op.command.name}: " if op is not None else ""
            LOGGER.debug("execute #%d: run failed: %s%s", self.execution_count, where, exc)
            return self._error(exc, f"{where}{exc}", output.drain())

        return {
            "status": "ok",
            "execution_count": self.execution_count,
            "stdout": self._decode(output.drain()),
        }

    def _error(self, exc: BaseException, text: str, stdout: bytes) -> JsonDict:
        return {
            "status": "error",
            "execution_count": self.execution_count,
            "stdout": self._decode(stdout),
            "stderr": text,
            "ename": type(exc).__name__,
        }


__all__ = ["SessionConfig", "ExecutionSession"]
