from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .bf_interpreter import BrainfuckInterpreter
from .codegen import CompilationError, SystemCompiler, compile_program
from .optimizer import optimize
from .parser import ParseError, parse
from .tape import DEFAULT_MEMORY_SIZE, ExecutionError

logger = logging.getLogger(__name__)

INTERPRET = "interpret"
COMPILE = "compile"


def _read_source(path: str) -> str:
    source_path = Path(path)
    if not source_path.exists():
        raise FileNotFoundError(f"Source file not found: {path}")
    return source_path.read_text(encoding="utf-8")


def _positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"invalid integer: '{value}'") from None
    if number < 1:
        raise argparse.ArgumentTypeError(f"must be a positive integer, got {number}")
    return number


def _destination(source: str, output_dir: str) -> Path:
    name = Path(source).stem or "program.out"
    return Path(output_dir) / name


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="tapebf", description="Brainfuck interpreter and C compiler")
    parser.add_argument("source", help="Path to the Brainfuck program source code")
    parser.add_argument(
        "-m",
        "--memory",
        type=_positive_int,
        default=DEFAULT_MEMORY_SIZE,
        help=(
            "Memory cells allocated when the program starts; the tape grows beyond it "
            f"when required (default: {DEFAULT_MEMORY_SIZE})"
        ),
    )
    parser.add_argument(
        "-x",
        "--execution",
        choices=(INTERPRET, COMPILE),
        default=INTERPRET,
        help="Interpret the program directly or compile it to a native executable (default: interpret)",
    )
    parser.add_argument(
        "-o",
        "--output-dir",
        default=".",
        help="Directory receiving the compiled executable; only used in compile mode (default: .)",
    )
    parser.add_argument(
        "--cc",
        help="C compiler used in compile mode (default: $CC or cc)",
    )
    parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        help="Log debugging information to stderr",
    )
    return parser


def main(argv: Optional[list[str]] = None) -> int:
    args = build_parser().parse_args(argv)
    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s: %(message)s",
    )

    try:
        source_text = _read_source(args.source)
    except FileNotFoundError as exc:
        print(str(exc), file=sys.stderr)
        return 1
    except (OSError, UnicodeDecodeError) as exc:
        print(f"Cannot read source file {args.source}: {exc}", file=sys.stderr)
        return 1

    try:
        instructions = optimize(parse(source_text))
    except ParseError as exc:
        print(f"Parse error: {exc}", file=sys.stderr)
        return 1

    if args.execution == COMPILE:
        destination = _destination(args.source, args.output_dir)
        try:
            compile_program(args.memory, instructions, destination, SystemCompiler(args.cc))
        except CompilationError as exc:
            print(f"Compilation error: {exc}", file=sys.stderr)
            return 1
        return 0

    interpreter = BrainfuckInterpreter(memory_size=args.memory)
    stdout = sys.stdout.buffer
    try:
        interpreter.run(instructions, sys.stdin.buffer, stdout)
        stdout.flush()
    except ExecutionError as exc:
        print(f"Runtime error: {exc}", file=sys.stderr)
        return 1
    except OSError as exc:
        print(f"Runtime error: Cannot write to output: {exc}", file=sys.stderr)
        return 1
    logger.debug("Program finished with %d tape cells", len(interpreter.tape))
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
