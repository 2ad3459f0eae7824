from __future__ import annotations

from enum import Enum


class Token(str, Enum):
    MOVE_RIGHT = ">"
    MOVE_LEFT = "<"
    INCREMENT = "+"
    DECREMENT = "-"
    OUTPUT = "."
    INPUT = ","
    LOOP_START = "["
    LOOP_END = "]"
    UNKNOWN = ""


_SYMBOLS = {token.value: token for token in Token if token is not Token.UNKNOWN}


def lex(char: str) -> Token:
    return _SYMBOLS.get(char, Token.UNKNOWN)


__all__ = ["Token", "lex"]
