from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Iterator, List, Optional, Sequence, Tuple


# === Instruction Nodes ===


class Instruction:
    pass


@dataclass(frozen=True)
class _Counted(Instruction):
    count: int = 1

    def __post_init__(self) -> None:
        if self.count < 1:
            raise ValueError(f"{type(self).__name__} count must be >= 1, got {self.count}")


@dataclass(frozen=True)
class MoveRight(_Counted):
    pass


@dataclass(frozen=True)
class MoveLeft(_Counted):
    pass


@dataclass(frozen=True)
class Increment(_Counted):
    pass


@dataclass(frozen=True)
class Decrement(_Counted):
    pass


@dataclass(frozen=True)
class Output(Instruction):
    pass


@dataclass(frozen=True)
class Input(Instruction):
    pass


@dataclass(frozen=True)
class Loop(Instruction):
    body: Tuple[Instruction, ...] = ()

    def __post_init__(self) -> None:
        # Accept any sequence but always store an immutable tuple.
        object.__setattr__(self, "body", tuple(self.body))


# === Traversal ===


class InstructionVisitor:
    """Walks an instruction tree, dispatching each node to a handler.

    Subclasses implement one method per simple instruction kind plus
    ``enter_loop`` and ``repeat_loop``. ``enter_loop`` decides whether a
    loop body is walked at all; ``repeat_loop`` runs after each pass over
    the body and decides whether to walk it again.

    The walk keeps its own stack of open loops, so nesting depth is not
    bounded by the interpreter's recursion limit.
    """

    def walk(self, instructions: Iterable[Instruction]) -> None:
        stack: List[Tuple[Iterator[Instruction], Optional[Loop]]] = [(iter(instructions), None)]
        while stack:
            iterator, current = stack[-1]
            instruction = next(iterator, None)
            if instruction is None:
                stack.pop()
                if current is not None and self.repeat_loop(current.body):
                    stack.append((iter(current.body), current))
                continue
            if isinstance(instruction, Loop):
                if self.enter_loop(instruction.body):
                    stack.append((iter(instruction.body), instruction))
                continue
            self.visit(instruction)

    def visit(self, instruction: Instruction) -> None:
        if isinstance(instruction, MoveRight):
            self.move_right(instruction.count)
        elif isinstance(instruction, MoveLeft):
            self.move_left(instruction.count)
        elif isinstance(instruction, Increment):
            self.increment(instruction.count)
        elif isinstance(instruction, Decrement):
            self.decrement(instruction.count)
        elif isinstance(instruction, Output):
            self.output()
        elif isinstance(instruction, Input):
            self.input()
        else:
            raise TypeError(f"Unsupported instruction: {instruction!r}")

    def move_right(self, count: int) -> None:
        raise NotImplementedError

    def move_left(self, count: int) -> None:
        raise NotImplementedError

    def increment(self, count: int) -> None:
        raise NotImplementedError

    def decrement(self, count: int) -> None:
        raise NotImplementedError

    def output(self) -> None:
        raise NotImplementedError

    def input(self) -> None:
        raise NotImplementedError

    def enter_loop(self, body: Sequence[Instruction]) -> bool:
        raise NotImplementedError

    def repeat_loop(self, body: Sequence[Instruction]) -> bool:
        raise NotImplementedError


class _SourceRenderer(InstructionVisitor):
    def __init__(self) -> None:
        self.parts: List[str] = []

    def move_right(self, count: int) -> None:
        self.parts.append(">" * count)

    def move_left(self, count: int) -> None:
        self.parts.append("<" * count)

    def increment(self, count: int) -> None:
        self.parts.append("+" * count)

    def decrement(self, count: int) -> None:
        self.parts.append("-" * count)

    def output(self) -> None:
        self.parts.append(".")

    def input(self) -> None:
        self.parts.append(",")

    def enter_loop(self, body: Sequence[Instruction]) -> bool:
        self.parts.append("[")
        return True

    def repeat_loop(self, body: Sequence[Instruction]) -> bool:
        self.parts.append("]")
        return False


class _Measure(InstructionVisitor):
    def __init__(self) -> None:
        self.count = 0
        self.depth = 0
        self.max_depth = 0

    def visit(self, instruction: Instruction) -> None:
        self.count += 1

    def enter_loop(self, body: Sequence[Instruction]) -> bool:
        self.count += 1
        self.depth += 1
        self.max_depth = max(self.max_depth, self.depth)
        return True

    def repeat_loop(self, body: Sequence[Instruction]) -> bool:
        self.depth -= 1
        return False


# === Rendering ===


_OP_NAMES = {
    MoveRight: "move_right",
    MoveLeft: "move_left",
    Increment: "increment",
    Decrement: "decrement",
    Output: "output",
    Input: "input",
    Loop: "loop",
}


def to_source(instructions: Iterable[Instruction]) -> str:
    renderer = _SourceRenderer()
    renderer.walk(instructions)
    return "".join(renderer.parts)


def to_dict(instruction: Instruction) -> dict:
    data: dict = {"op": _OP_NAMES[type(instruction)]}
    if isinstance(instruction, _Counted):
        data["count"] = instruction.count
    elif isinstance(instruction, Loop):
        data["body"] = dump(instruction.body)
    return data


def dump(instructions: Iterable[Instruction]) -> List[dict]:
    """JSON-friendly view of ``instructions``; recursive, one call per loop level."""
    return [to_dict(instruction) for instruction in instructions]


def count_instructions(instructions: Iterable[Instruction]) -> int:
    measure = _Measure()
    measure.walk(instructions)
    return measure.count


def nesting_depth(instructions: Iterable[Instruction]) -> int:
    measure = _Measure()
    measure.walk(instructions)
    return measure.max_depth


__all__ = [
    "Instruction",
    "MoveRight",
    "MoveLeft",
    "Increment",
    "Decrement",
    "Output",
    "Input",
    "Loop",
    "InstructionVisitor",
    "to_source",
    "to_dict",
    "dump",
    "count_instructions",
    "nesting_depth",
]
