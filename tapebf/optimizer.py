from __future__ import annotations

import logging
from typing import List, Sequence

from .instructions import Decrement, Increment, Instruction, Loop, MoveLeft, MoveRight

logger = logging.getLogger(__name__)

_MERGEABLE = (MoveRight, MoveLeft, Increment, Decrement)


class _Frame:
    __slots__ = ("source", "index", "optimized")

    def __init__(self, source: Sequence[Instruction]) -> None:
        self.source = source
        self.index = 0
        self.optimized: List[Instruction] = []


def optimize(instructions: Sequence[Instruction]) -> List[Instruction]:
    """Merge runs of identical moves and cell modifications.

    Adjacent instructions of the same kind collapse into one whose count is
    the sum of theirs. Opposite kinds are left alone and loop bodies are
    optimized the same way; loops themselves never merge. Loop bodies are
    processed on an explicit frame stack, so nesting depth is unbounded.
    """
    stack = [_Frame(instructions)]
    while True:
        frame = stack[-1]
        source = frame.source
        length = len(source)
        if frame.index >= length:
            stack.pop()
            if not stack:
                break
            stack[-1].optimized.append(Loop(body=frame.optimized))
            continue
        instruction = source[frame.index]
        frame.index += 1
        if isinstance(instruction, Loop):
            stack.append(_Frame(instruction.body))
            continue
        if isinstance(instruction, _MERGEABLE):
            kind = type(instruction)
            total = instruction.count
            while frame.index < length and type(source[frame.index]) is kind:
                total += source[frame.index].count
                frame.index += 1
            frame.optimized.append(kind(total))
            continue
        frame.optimized.append(instruction)
    if len(frame.optimized) != len(instructions):
        logger.debug("Optimized %d instructions down to %d", len(instructions), len(frame.optimized))
    return frame.optimized


__all__ = ["optimize"]
