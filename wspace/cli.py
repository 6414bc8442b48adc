"""wspace CLI entry point: run a file, list it, or start the REPL."""

from __future__ import annotations

import argparse
import logging
import os
import sys
import threading
from pathlib import Path
from typing import BinaryIO, List, Optional, TextIO

from .errors import LoadError
from .ports import StreamInput, StreamOutput
from .render import render_program
from .repl import ReplConfig, WhitespaceREPL, build_line_readers, cancel_on_interrupt
from .vm import VM

LOG = logging.getLogger("wspace.cli")


def _configure_logging(level: str) -> None:
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.WARNING),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _isatty(stream) -> bool:
    try:
        return bool(stream.isatty())
    except (AttributeError, ValueError):
        return False


def build_arg_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="wspace", description="Whitespace interpreter")
    parser.add_argument("program", nargs="?", type=Path, help="Whitespace source file (omit for the interactive REPL)")
    parser.add_argument("-l", "--list", action="store_true", help="print the decoded program instead of running it")
    parser.add_argument("--trace-file", type=Path, help="write every executed instruction to this file")
    parser.add_argument("--log-level", default=os.environ.get("WSPACE_LOG", "WARNING"), help="Logging level (default WARNING)")
    parser.add_argument(
        "--history",
        type=Path,
        default=Path(os.environ.get("WSPACE_HISTORY", str(Path.home() / ".wspace_history"))),
        help="REPL history file",
    )
    return parser


def run_file(
    path: Path,
    *,
    stdin: BinaryIO,
    stdout: BinaryIO,
    stderr: TextIO,
    list_only: bool = False,
    trace_file: Optional[TextIO] = None,
) -> int:
    """Load ``path`` once and run it to completion; return the exit status."""

    try:
        code = Path(path).read_bytes()
    except OSError as exc:
        print(f"{path}: {exc}", file=stderr)
        return 1

    vm = VM(trace_file=trace_file)
    try:
        vm.load(code)
    except LoadError as exc:
        print(f"{path}:{exc.consumed}: {exc}", file=stderr)
        return 1

    if list_only:
        stdout.write((render_program(vm.program) + "\n").encode("utf-8"))
        stdout.flush()
        return 0

    cancel = threading.Event()
    out = StreamOutput(stdout, autoflush=_isatty(stdout))
    try:
        with cancel_on_interrupt(cancel):
            vm.run(StreamInput(stdin), out, cancel)
    except Exception as exc:
        out.flush()
        op = vm.current_instruction()
        if op is not None:
            print(f"{path}:{op.offset}: {op.command.name}: {exc}", file=stderr)
        else:
            print(f"{path}: {exc}", file=stderr)
        LOG.debug("run failed after %d steps", vm.steps, exc_info=True)
        return 1
    out.flush()

    if not vm.terminated:
        print("program is not terminated", file=stderr)
        return 1
    return 0


def main(argv: List[str] | None = None) -> int:
    parser = build_arg_parser()
    args = parser.parse_args(argv)
    _configure_logging(args.log_level)

    if args.program is not None:
        trace_fp = None
        if args.trace_file:
            trace_fp = open(args.trace_file, "w", encoding="utf-8")
        try:
            return run_file(
                args.program,
                stdin=sys.stdin.buffer,
                stdout=sys.stdout.buffer,
                stderr=sys.stderr,
                list_only=args.list,
                trace_file=trace_fp,
            )
        finally:
            if trace_fp:
                trace_fp.close()

    if args.list:
        parser.error("--list requires a program file")

    config = ReplConfig(
        history_path=args.history,
        interactive=_isatty(sys.stdin) and _isatty(sys.stdout),
    )
    read_code, read_input = build_line_readers(config, sys.stdin, sys.stdout.buffer)
    repl = WhitespaceREPL(
        read_code=read_code,
        read_input=read_input,
        stdout=sys.stdout.buffer,
        stderr=sys.stderr,
    )
    try:
        return repl.run()
    except KeyboardInterrupt:
        print()
        return 0


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
