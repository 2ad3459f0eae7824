from __future__ import annotations

import io
from typing import List

from fastapi import FastAPI, HTTPException, status
from pydantic import BaseModel, Field

from tapebf.bf_interpreter import BrainfuckInterpreter
from tapebf.codegen import generate_source
from tapebf.instructions import Instruction, count_instructions, dump, nesting_depth, to_source
from tapebf.optimizer import optimize
from tapebf.parser import ParseError, parse
from tapebf.tape import DEFAULT_MEMORY_SIZE, ExecutionError

DEFAULT_MAX_STEPS = 1_000_000
# Deepest loop nesting /api/parse returns as nested JSON.
MAX_DUMP_DEPTH = 100

HTTP_422_UNPROCESSABLE = 422


def _string_to_input_bytes(data: str) -> bytes:
    return data.encode("latin-1")


def _parse_or_422(code: str, optimized: bool = True) -> List[Instruction]:
    try:
        instructions = parse(code)
    except ParseError as exc:
        raise HTTPException(
            status_code=HTTP_422_UNPROCESSABLE,
            detail=str(exc),
        ) from exc
    return optimize(instructions) if optimized else instructions


class ParseRequest(BaseModel):
    code: str
    optimize: bool = True


class ParseResponse(BaseModel):
    instructions: List[dict]
    source: str
    instruction_count: int


class RunRequest(BaseModel):
    code: str
    input: str = Field(default="", description="Input bytes, one character per byte (latin-1)")
    memory_size: int = Field(default=DEFAULT_MEMORY_SIZE, ge=1)
    max_steps: int = Field(default=DEFAULT_MAX_STEPS, ge=1)


class RunResponse(BaseModel):
    output: str
    output_bytes: List[int]
    tape_length: int
    cursor: int


class GenerateRequest(BaseModel):
    code: str
    memory_size: int = Field(default=DEFAULT_MEMORY_SIZE, ge=1)


class GenerateResponse(BaseModel):
    language: str
    source: str


def create_app() -> FastAPI:
    app = FastAPI(title="tapebf API", version="0.1.0")

    @app.post("/api/parse", response_model=ParseResponse)
    def parse_program(payload: ParseRequest) -> ParseResponse:
        instructions = _parse_or_422(payload.code, optimized=payload.optimize)
        depth = nesting_depth(instructions)
        if depth > MAX_DUMP_DEPTH:
            raise HTTPException(
                status_code=HTTP_422_UNPROCESSABLE,
                detail=f"Loops nest {depth} levels deep; at most {MAX_DUMP_DEPTH} can be returned as JSON",
            )
        return ParseResponse(
            instructions=dump(instructions),
            source=to_source(instructions),
            instruction_count=count_instructions(instructions),
        )

    @app.post("/api/run", response_model=RunResponse)
    def run_program(payload: RunRequest) -> RunResponse:
        instructions = _parse_or_422(payload.code)
        try:
            input_bytes = _string_to_input_bytes(payload.input)
        except UnicodeEncodeError as exc:
            raise HTTPException(
                status_code=HTTP_422_UNPROCESSABLE,
                detail="input must only contain characters in the range U+0000-U+00FF",
            ) from exc

        interpreter = BrainfuckInterpreter(memory_size=payload.memory_size, max_steps=payload.max_steps)
        output = io.BytesIO()
        try:
            interpreter.run(instructions, io.BytesIO(input_bytes), output)
        except ExecutionError as exc:
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail=str(exc),
            ) from exc

        data = output.getvalue()
        return RunResponse(
            output=data.decode("latin-1"),
            output_bytes=list(data),
            tape_length=len(interpreter.tape),
            cursor=interpreter.tape.cursor,
        )

    @app.post("/api/generate", response_model=GenerateResponse)
    def generate_program(payload: GenerateRequest) -> GenerateResponse:
        instructions = _parse_or_422(payload.code)
        return GenerateResponse(language="c", source=generate_source(payload.memory_size, instructions))

    return app


__all__ = ["create_app"]
