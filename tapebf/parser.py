from __future__ import annotations

import logging
from typing import List, Optional, Tuple

from .instructions import (
    Decrement,
    Increment,
    Input,
    Instruction,
    Loop,
    MoveLeft,
    MoveRight,
    Output,
)
from .lexer import Token, lex

logger = logging.getLogger(__name__)


class ParseError(Exception):
    def __init__(self, message: str, position: int) -> None:
        super().__init__(f"{message} at position {position}")
        self.position = position


class UnterminatedLoop(ParseError):
    def __init__(self, position: int) -> None:
        super().__init__("Missing closing ']' for loop opened", position)


class UnexpectedCloseBracket(ParseError):
    def __init__(self, position: int) -> None:
        super().__init__("Unexpected ']'", position)


_SIMPLE = {
    Token.MOVE_RIGHT: MoveRight,
    Token.MOVE_LEFT: MoveLeft,
    Token.INCREMENT: Increment,
    Token.DECREMENT: Decrement,
    Token.OUTPUT: Output,
    Token.INPUT: Input,
}


class Parser:
    def parse(self, source: str) -> List[Instruction]:
        instructions = self._parse_blocks(source)
        logger.debug("Parsed %d top-level instructions from %d characters", len(instructions), len(source))
        return instructions

    def _parse_blocks(self, source: str) -> List[Instruction]:
        """Parse ``source`` into a nested instruction list.

        Each open loop gets its own frame on ``stack`` holding its body so
        far and the position of its opening bracket; the bottom frame is the
        top-level program and has no bracket.
        """
        stack: List[Tuple[List[Instruction], Optional[int]]] = [([], None)]
        for position, char in enumerate(source):
            token = lex(char)
            if token is Token.UNKNOWN:
                continue
            if token is Token.LOOP_START:
                stack.append(([], position))
                continue
            if token is Token.LOOP_END:
                if len(stack) == 1:
                    raise UnexpectedCloseBracket(position)
                body, _ = stack.pop()
                stack[-1][0].append(Loop(body=body))
                continue
            stack[-1][0].append(_SIMPLE[token]())
        if len(stack) > 1:
            raise UnterminatedLoop(stack[-1][1])
        return stack[0][0]


def parse(source: str) -> List[Instruction]:
    return Parser().parse(source)


__all__ = [
    "Parser",
    "ParseError",
    "UnterminatedLoop",
    "UnexpectedCloseBracket",
    "parse",
]
