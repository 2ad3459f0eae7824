from __future__ import annotations

DEFAULT_MEMORY_SIZE = 4096
CELL_MODULUS = 256


class ExecutionError(RuntimeError):
    """Base class for failures raised while a program runs."""


class NegativeAddress(ExecutionError):
    """Raised when the cursor would move left of the first cell."""


class Tape:
    """Growable byte cells and a cursor, starting at cell 0.

    Cell arithmetic wraps modulo 256. Moving right past the end grows the
    tape with zeroed cells; moving left past cell 0 raises
    :class:`NegativeAddress` and leaves the cursor where it was.
    """

    def __init__(self, size: int = DEFAULT_MEMORY_SIZE) -> None:
        if size < 1:
            raise ValueError(f"Tape size must be at least 1, got {size}")
        self._cells = bytearray(size)
        self._cursor = 0

    def __len__(self) -> int:
        return len(self._cells)

    def __repr__(self) -> str:
        return f"Tape(length={len(self._cells)}, cursor={self._cursor})"

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def cells(self) -> bytes:
        return bytes(self._cells)

    def move_right(self, n: int = 1) -> None:
        self._cursor += n
        missing = self._cursor + 1 - len(self._cells)
        if missing > 0:
            self._cells.extend(bytes(missing))

    def move_left(self, n: int = 1) -> None:
        if n > self._cursor:
            raise NegativeAddress(
                f"Cannot move {n} cell(s) left from cell {self._cursor}: negative memory addresses are invalid"
            )
        self._cursor -= n

    def increment(self, n: int = 1) -> None:
        self._cells[self._cursor] = (self._cells[self._cursor] + n) % CELL_MODULUS

    def decrement(self, n: int = 1) -> None:
        self._cells[self._cursor] = (self._cells[self._cursor] - n) % CELL_MODULUS

    def read(self) -> int:
        return self._cells[self._cursor]

    def write(self, value: int) -> None:
        self._cells[self._cursor] = value % CELL_MODULUS


__all__ = [
    "CELL_MODULUS",
    "DEFAULT_MEMORY_SIZE",
    "ExecutionError",
    "NegativeAddress",
    "Tape",
]
