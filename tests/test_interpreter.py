import io
import random
import unittest

from tapebf import (
    BrainfuckInterpreter,
    ExecutionError,
    IOReadFailure,
    IOWriteFailure,
    NegativeAddress,
    StepLimitExceeded,
    optimize,
    parse,
    run_source,
)
from tapebf.instructions import Increment, Output

HELLO_WORLD = (
    "++++++++[>++++[>++>+++>+++>+<<<<-]>+>+>->>+[<]<-]>>.>---.+++++++..+++.>>.<-.<.+++.------.--------.>>+.>++."
)


class _BrokenStream(io.RawIOBase):
    def readable(self) -> bool:
        return True

    def writable(self) -> bool:
        return True

    def read(self, size: int = -1) -> bytes:
        raise OSError("read failed")

    def write(self, data) -> int:
        raise OSError("write failed")


class BrainfuckInterpreterTests(unittest.TestCase):
    def test_hello_world(self) -> None:
        self.assertEqual(run_source(HELLO_WORLD, memory_size=512), b"Hello World!\n")

    def test_simple_output(self) -> None:
        self.assertEqual(run_source("+" * 65 + "."), b"A")

    def test_output_is_a_single_raw_byte(self) -> None:
        self.assertEqual(run_source("-."), b"\xff")

    def test_echo_input(self) -> None:
        self.assertEqual(run_source(",.,.,.", input_data=b"abc"), b"abc")

    def test_loop_runs_until_cell_is_zero(self) -> None:
        self.assertEqual(run_source(",[.-]", input_data=b"\x03"), b"\x03\x02\x01")

    def test_loop_skipped_when_cell_is_zero(self) -> None:
        self.assertEqual(run_source("[.]+."), b"\x01")

    def test_wraparound_of_long_runs(self) -> None:
        self.assertEqual(run_source("+" * 300 + "."), bytes([44]))
        self.assertEqual(run_source("-" * 257 + "."), bytes([255]))

    def test_tape_grows_past_initial_memory(self) -> None:
        interpreter = BrainfuckInterpreter(memory_size=1)
        interpreter.run(parse("+>>>++>+"), io.BytesIO(), io.BytesIO())
        self.assertEqual(interpreter.tape.cells, bytes([1, 0, 0, 2, 1]))
        self.assertEqual(interpreter.tape.cursor, 4)

    def test_negative_address(self) -> None:
        output = io.BytesIO()
        interpreter = BrainfuckInterpreter()
        with self.assertRaises(NegativeAddress):
            interpreter.run(parse("+.<"), io.BytesIO(), output)
        self.assertEqual(output.getvalue(), b"\x01")

    def test_end_of_input(self) -> None:
        with self.assertRaises(IOReadFailure):
            run_source(",.,", input_data=b"a")

    def test_read_failure(self) -> None:
        interpreter = BrainfuckInterpreter()
        with self.assertRaises(IOReadFailure):
            interpreter.run(parse(","), _BrokenStream(), io.BytesIO())

    def test_write_failure(self) -> None:
        interpreter = BrainfuckInterpreter()
        with self.assertRaises(IOWriteFailure):
            interpreter.run(parse("+."), io.BytesIO(), _BrokenStream())

    def test_runtime_errors_share_base_class(self) -> None:
        for error in (NegativeAddress, IOReadFailure, IOWriteFailure, StepLimitExceeded):
            with self.subTest(error=error.__name__):
                self.assertTrue(issubclass(error, ExecutionError))

    def test_step_limit_exceeded(self) -> None:
        interpreter = BrainfuckInterpreter(max_steps=10)
        with self.assertRaises(StepLimitExceeded):
            interpreter.run(parse("+[]"), io.BytesIO(), io.BytesIO())

    def test_step_limit_not_hit(self) -> None:
        self.assertEqual(run_source("+++.", max_steps=2), b"\x03")

    def test_unbounded_by_default(self) -> None:
        # about 65k iterations of the inner loop
        program = "+[>+[-]+[+]<+]."
        self.assertEqual(run_source(program, optimized=False), b"\x00")

    def test_deeply_nested_loops(self) -> None:
        depth = 5000
        program = "+" + "[" * depth + "-" + "]" * depth + "+."
        self.assertEqual(run_source(program), b"\x01")
        self.assertEqual(run_source(program, optimized=False), b"\x01")

    def test_run_resets_tape(self) -> None:
        interpreter = BrainfuckInterpreter(memory_size=2)
        interpreter.run([Increment(5)], io.BytesIO(), io.BytesIO())
        output = io.BytesIO()
        interpreter.run([Output()], io.BytesIO(), output)
        self.assertEqual(output.getvalue(), b"\x00")


def _outcome(instructions, data: bytes):
    interpreter = BrainfuckInterpreter(memory_size=2)
    output = io.BytesIO()
    error = None
    try:
        interpreter.run(instructions, io.BytesIO(data), output)
    except ExecutionError as exc:
        error = type(exc)
    cursor = interpreter.tape.cursor if error is None else None
    return output.getvalue(), error, interpreter.tape.cells, cursor


class OptimizerTransparencyTests(unittest.TestCase):
    def assertTransparent(self, source: str, data: bytes = b"") -> None:
        program = parse(source)
        self.assertEqual(_outcome(optimize(program), data), _outcome(program, data), source)

    def test_random_loop_free_programs(self) -> None:
        rng = random.Random(1234)
        for _ in range(200):
            length = rng.randint(0, 60)
            source = "".join(rng.choice("><+-.,>>++") for _ in range(length))
            data = bytes(rng.randrange(256) for _ in range(source.count(",")))
            with self.subTest(source=source):
                self.assertTransparent(source, data)

    def test_looping_programs(self) -> None:
        cases = [
            (HELLO_WORLD, b""),
            ("++[>++>++<<-]>+.", b""),
            (",[.-]", b"\x05"),
            (",[>+++<-]>.", b"\x07"),
            ("+++[>+++[>++<-]<-]>>.", b""),
            ("<", b""),
            (",,", b"x"),
        ]
        for source, data in cases:
            with self.subTest(source=source):
                self.assertTransparent(source, data)


if __name__ == "__main__":
    unittest.main()
