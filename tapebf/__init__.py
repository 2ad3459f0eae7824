from .bf_interpreter import BrainfuckInterpreter, IOReadFailure, IOWriteFailure, StepLimitExceeded, run_source
from .codegen import CompilationError, SystemCompiler, ToolchainInvocationFailed, compile_program, generate
from .instructions import Decrement, Increment, Input, Loop, MoveLeft, MoveRight, Output
from .optimizer import optimize
from .parser import ParseError, UnexpectedCloseBracket, UnterminatedLoop, parse
from .tape import ExecutionError, NegativeAddress, Tape

__all__ = [
    "BrainfuckInterpreter",
    "CompilationError",
    "Decrement",
    "ExecutionError",
    "IOReadFailure",
    "IOWriteFailure",
    "Increment",
    "Input",
    "Loop",
    "MoveLeft",
    "MoveRight",
    "NegativeAddress",
    "Output",
    "ParseError",
    "StepLimitExceeded",
    "SystemCompiler",
    "Tape",
    "ToolchainInvocationFailed",
    "UnexpectedCloseBracket",
    "UnterminatedLoop",
    "compile_program",
    "generate",
    "optimize",
    "parse",
    "run_source",
]
