from __future__ import annotations

import io
from dataclasses import dataclass, field
from typing import BinaryIO, Optional, Sequence

from .instructions import Instruction, InstructionVisitor
from .optimizer import optimize
from .parser import parse
from .tape import DEFAULT_MEMORY_SIZE, ExecutionError, Tape


class IOReadFailure(ExecutionError):
    """Raised when the program needs a byte and the input cannot supply one."""


class IOWriteFailure(ExecutionError):
    """Raised when a byte cannot be written to the output stream."""


class StepLimitExceeded(ExecutionError):
    """Raised when Brainfuck execution exceeds the configured step budget."""


class _Execution(InstructionVisitor):
    def __init__(
        self,
        tape: Tape,
        input_stream: BinaryIO,
        output_stream: BinaryIO,
        max_steps: Optional[int],
    ) -> None:
        self.tape = tape
        self.input_stream = input_stream
        self.output_stream = output_stream
        self.max_steps = max_steps
        self.steps = 0

    def visit(self, instruction: Instruction) -> None:
        self._count_step()
        super().visit(instruction)

    def _count_step(self) -> None:
        self.steps += 1
        if self.max_steps is not None and self.steps > self.max_steps:
            raise StepLimitExceeded("Brainfuck program exceeded allowed step count")

    def move_right(self, count: int) -> None:
        self.tape.move_right(count)

    def move_left(self, count: int) -> None:
        self.tape.move_left(count)

    def increment(self, count: int) -> None:
        self.tape.increment(count)

    def decrement(self, count: int) -> None:
        self.tape.decrement(count)

    def output(self) -> None:
        try:
            self.output_stream.write(bytes((self.tape.read(),)))
        except OSError as exc:
            raise IOWriteFailure(f"Cannot write to output: {exc}") from exc

    def input(self) -> None:
        self._flush()
        try:
            data = self.input_stream.read(1)
        except OSError as exc:
            raise IOReadFailure(f"Cannot read from input: {exc}") from exc
        if not data:
            raise IOReadFailure("Cannot read from input: end of stream")
        self.tape.write(data[0])

    def enter_loop(self, body: Sequence[Instruction]) -> bool:
        self._count_step()
        return self.tape.read() != 0

    def repeat_loop(self, body: Sequence[Instruction]) -> bool:
        self._count_step()
        return self.tape.read() != 0

    def _flush(self) -> None:
        flush = getattr(self.output_stream, "flush", None)
        if flush is None:
            return
        try:
            flush()
        except OSError as exc:
            raise IOWriteFailure(f"Cannot flush output: {exc}") from exc


@dataclass
class BrainfuckInterpreter:
    memory_size: int = DEFAULT_MEMORY_SIZE
    max_steps: Optional[int] = None

    tape: Tape = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.reset()

    def reset(self) -> None:
        self.tape = Tape(self.memory_size)

    def run(
        self,
        instructions: Sequence[Instruction],
        input_stream: BinaryIO,
        output_stream: BinaryIO,
    ) -> None:
        self.reset()
        execution = _Execution(self.tape, input_stream, output_stream, self.max_steps)
        execution.walk(instructions)


def run_source(
    source: str,
    input_data: bytes = b"",
    memory_size: int = DEFAULT_MEMORY_SIZE,
    max_steps: Optional[int] = None,
    optimized: bool = True,
) -> bytes:
    instructions = parse(source)
    if optimized:
        instructions = optimize(instructions)
    output = io.BytesIO()
    interpreter = BrainfuckInterpreter(memory_size=memory_size, max_steps=max_steps)
    interpreter.run(instructions, io.BytesIO(input_data), output)
    return output.getvalue()


__all__ = [
    "BrainfuckInterpreter",
    "IOReadFailure",
    "IOWriteFailure",
    "StepLimitExceeded",
    "run_source",
]
