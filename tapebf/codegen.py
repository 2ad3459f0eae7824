from __future__ import annotations

import io
import logging
import os
import subprocess
import tempfile
from pathlib import Path
from typing import Callable, List, Optional, Sequence, TextIO, Union

from .instructions import Instruction, InstructionVisitor
from .tape import CELL_MODULUS

logger = logging.getLogger(__name__)

PathLike = Union[str, "os.PathLike[str]"]
Toolchain = Callable[[Path, Path], bool]

INDENT = "    "
TEMP_PREFIX = "brainfuck-program-"


class CompilationError(Exception):
    pass


class ToolchainInvocationFailed(CompilationError):
    pass


# Runtime embedded in every generated program. Mirrors tapebf.tape.Tape.
_PRELUDE = """\
#include <stdio.h>
#include <stdlib.h>
#include <string.h>

struct tape {
    unsigned char *cells;
    size_t length;
    size_t index;
};

static struct tape tape;

static void fail(const char *message) {
    fflush(stdout);
    fprintf(stderr, "failed during execution: %s\\n", message);
    exit(1);
}

static void tape_init(size_t length) {
    tape.cells = calloc(length, 1);
    if (tape.cells == NULL) {
        fail("cannot allocate memory");
    }
    tape.length = length;
    tape.index = 0;
}

static void move_right(size_t n) {
    size_t needed;
    unsigned char *grown;
    if (n > (size_t)-1 - tape.index - 1) {
        fail("cannot allocate memory");
    }
    tape.index += n;
    if (tape.index < tape.length) {
        return;
    }
    needed = tape.index + 1;
    grown = realloc(tape.cells, needed);
    if (grown == NULL) {
        fail("cannot allocate memory");
    }
    memset(grown + tape.length, 0, needed - tape.length);
    tape.cells = grown;
    tape.length = needed;
}

static void move_left(size_t n) {
    if (n > tape.index) {
        fail("negative memory addresses are invalid");
    }
    tape.index -= n;
}

static void increment(unsigned char n) {
    tape.cells[tape.index] = (unsigned char)(tape.cells[tape.index] + n);
}

static void decrement(unsigned char n) {
    tape.cells[tape.index] = (unsigned char)(tape.cells[tape.index] - n);
}

static void output(void) {
    if (putchar(tape.cells[tape.index]) == EOF) {
        fail("cannot write to stdout");
    }
}

static void input(void) {
    int value;
    if (fflush(stdout) == EOF) {
        fail("cannot write to stdout");
    }
    value = getchar();
    if (value == EOF) {
        fail("cannot read stdin");
    }
    tape.cells[tape.index] = (unsigned char)value;
}

int main(void) {
"""

_EPILOGUE = """\
    if (fflush(stdout) == EOF) {
        fail("cannot write to stdout");
    }
    free(tape.cells);
    return 0;
}
"""


class _CEmitter(InstructionVisitor):
    def __init__(self) -> None:
        self.lines: List[str] = []
        self.depth = 1

    def _emit(self, statement: str) -> None:
        self.lines.append(INDENT * self.depth + statement)

    def move_right(self, count: int) -> None:
        self._emit(f"move_right({count}u);")

    def move_left(self, count: int) -> None:
        self._emit(f"move_left({count}u);")

    def increment(self, count: int) -> None:
        self._emit(f"increment({count % CELL_MODULUS}u);")

    def decrement(self, count: int) -> None:
        self._emit(f"decrement({count % CELL_MODULUS}u);")

    def output(self) -> None:
        self._emit("output();")

    def input(self) -> None:
        self._emit("input();")

    def enter_loop(self, body: Sequence[Instruction]) -> bool:
        self._emit("while (tape.cells[tape.index] != 0) {")
        self.depth += 1
        return True

    def repeat_loop(self, body: Sequence[Instruction]) -> bool:
        self.depth -= 1
        self._emit("}")
        return False


def generate(memory_size: int, instructions: Sequence[Instruction], out: TextIO) -> None:
    """Write a C program equivalent to ``instructions`` to ``out``."""
    if memory_size < 1:
        raise ValueError(f"Memory size must be at least 1, got {memory_size}")
    emitter = _CEmitter()
    emitter._emit(f"tape_init({memory_size}u);")
    emitter.walk(instructions)
    out.write(_PRELUDE)
    for line in emitter.lines:
        out.write(line)
        out.write("\n")
    out.write(_EPILOGUE)


def generate_source(memory_size: int, instructions: Sequence[Instruction]) -> str:
    buffer = io.StringIO()
    generate(memory_size, instructions, buffer)
    return buffer.getvalue()


class SystemCompiler:
    """Toolchain that shells out to a C compiler.

    The executable defaults to ``$CC`` and then ``cc``.
    """

    def __init__(self, executable: Optional[str] = None, flags: Sequence[str] = ("-O2",)) -> None:
        self.executable = executable or os.environ.get("CC") or "cc"
        self.flags = tuple(flags)

    def command(self, source: Path, destination: Path) -> List[str]:
        return [self.executable, *self.flags, "-o", str(destination), str(source)]

    def __call__(self, source: Path, destination: Path) -> bool:
        cmd = self.command(source, destination)
        logger.debug("Invoking toolchain: %s", " ".join(cmd))
        try:
            proc = subprocess.run(cmd, check=False)
        except OSError as exc:
            logger.error("Cannot launch C compiler %r: %s", self.executable, exc)
            return False
        if proc.returncode != 0:
            logger.error("C compiler exited with status %d", proc.returncode)
            return False
        return True


def compile_program(
    memory_size: int,
    instructions: Sequence[Instruction],
    destination: PathLike,
    toolchain: Optional[Toolchain] = None,
) -> Path:
    """Generate C for ``instructions`` and build it into ``destination``.

    The generated source lives in a uniquely named temporary file that is
    removed whether or not the toolchain succeeds.
    """
    compiler = toolchain if toolchain is not None else SystemCompiler()
    destination_path = Path(destination)
    handle, temp_name = tempfile.mkstemp(prefix=TEMP_PREFIX, suffix=".c")
    source_path = Path(temp_name)
    try:
        with os.fdopen(handle, "w", encoding="utf-8") as out:
            generate(memory_size, instructions, out)
        if not compiler(source_path, destination_path):
            raise ToolchainInvocationFailed(
                f"Failed to compile generated program {source_path} into {destination_path}"
            )
    finally:
        try:
            source_path.unlink()
        except OSError as exc:
            logger.warning("Could not remove temporary source %s: %s", source_path, exc)
    logger.debug("Compiled executable -> %s", destination_path)
    return destination_path


__all__ = [
    "CompilationError",
    "SystemCompiler",
    "Toolchain",
    "ToolchainInvocationFailed",
    "compile_program",
    "generate",
    "generate_source",
]
