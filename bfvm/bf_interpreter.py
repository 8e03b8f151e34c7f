from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Callable, Iterable, Iterator, List, Optional, Tuple, Union

from .builder import compile_program
from .config import CELL_MODULUS, DEFAULT_TAPE_WINDOW, FOLDED_CELL_MODULUS, TAPE_LENGTH, EofPolicy
from .errors import StepLimitExceeded
from .program import Instruction, Kind, Program
from .streams import InputSource, as_input_source

logger = logging.getLogger(__name__)

InputData = Union[InputSource, str, Iterable[int], None]
OutputSink = Callable[[str], None]


@dataclass
class ExecutionState:
    step: int
    pc: int
    command: Optional[str]
    pointer: int
    tape_start: int
    tape: List[int]
    output: str
    program_length: int


def _truncated_mod(value: int, modulus: int) -> int:
    # Remainder keeps the sign of the dividend.
    magnitude = abs(value) % modulus
    return -magnitude if value < 0 else magnitude


@dataclass
class BrainfuckInterpreter:
    tape_length: int = TAPE_LENGTH
    optimize: bool = False
    eof_policy: EofPolicy = EofPolicy.ZERO
    folded_cell_modulus: int = FOLDED_CELL_MODULUS

    tape: bytearray = field(init=False, repr=False)
    pointer: int = field(init=False, repr=False)
    output_buffer: List[str] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        if self.tape_length <= 0:
            raise ValueError("tape_length must be positive")
        if self.folded_cell_modulus <= 0:
            raise ValueError("folded_cell_modulus must be positive")
        self.eof_policy = EofPolicy(self.eof_policy)
        self.reset()

    def reset(self) -> None:
        self.tape = bytearray(self.tape_length)
        self.pointer = 0
        self.output_buffer = []

    def compile(self, code: Union[str, Program]) -> Program:
        if isinstance(code, Program):
            return code
        return compile_program(code, fold=self.optimize)

    def run(
        self,
        code: Union[str, Program],
        input_data: InputData = None,
        max_steps: Optional[int] = None,
        output: Optional[OutputSink] = None,
    ) -> str:
        """Execute ``code`` to completion.

        Output goes to ``output`` when given, otherwise it is collected and
        returned.
        """
        program = self.compile(code)
        for _ in self._execute(program, input_data, max_steps, output):
            pass
        return "".join(self.output_buffer)

    def step(
        self,
        code: Union[str, Program],
        input_data: InputData = None,
        max_steps: Optional[int] = None,
        tape_window: int = DEFAULT_TAPE_WINDOW,
    ) -> Iterator[ExecutionState]:
        program = self.compile(code)
        program_length = len(program)
        steps = 0
        for steps, pc, instruction in self._execute(program, input_data, max_steps, None):
            yield self.snapshot(pc, instruction, steps, program_length, tape_window)

        # Emit final snapshot indicating completion
        yield self.snapshot(program_length, None, steps, program_length, tape_window)

    def _execute(
        self,
        program: Program,
        input_data: InputData,
        max_steps: Optional[int],
        output: Optional[OutputSink],
    ) -> Iterator[Tuple[int, int, Instruction]]:
        self.reset()
        source = as_input_source(input_data)
        emit = output if output is not None else self.output_buffer.append
        pc = 0
        steps = 0
        program_length = len(program)

        while pc < program_length:
            if max_steps is not None and steps >= max_steps:
                raise StepLimitExceeded("Brainfuck program exceeded allowed step count")

            instruction = program[pc]
            pc = self._execute_instruction(instruction, pc, source, emit)
            steps += 1
            yield steps, pc, instruction

        logger.debug("program halted after %d steps", steps)

    def _execute_instruction(
        self,
        instruction: Instruction,
        pc: int,
        source: InputSource,
        emit: OutputSink,
    ) -> int:
        new_pc = pc + 1
        kind = instruction.kind
        if kind is Kind.POINTER_DELTA:
            self.pointer = self._move_pointer(instruction.operand)
        elif kind is Kind.CELL_DELTA:
            self.tape[self.pointer] = self._add_to_cell(self.tape[self.pointer], instruction.operand)
        elif kind is Kind.OUTPUT:
            emit(chr(self.tape[self.pointer]))
        elif kind is Kind.INPUT:
            value = source.read()
            if value is None:
                value = self._end_of_input_value()
            if value is not None:
                self.tape[self.pointer] = value & 0xFF
        elif kind is Kind.LOOP_OPEN:
            if self.tape[self.pointer] == 0:
                new_pc = instruction.operand + 1
        elif kind is Kind.LOOP_CLOSE:
            if self.tape[self.pointer] != 0:
                new_pc = instruction.operand + 1
        return new_pc

    def _move_pointer(self, delta: int) -> int:
        target = self.pointer + _truncated_mod(delta, self.tape_length)
        if target < 0:
            target += self.tape_length
        elif target >= self.tape_length:
            target -= self.tape_length
        return target

    def _add_to_cell(self, value: int, delta: int) -> int:
        return (value + _truncated_mod(delta, self.folded_cell_modulus)) % CELL_MODULUS

    def _end_of_input_value(self) -> Optional[int]:
        if self.eof_policy is EofPolicy.ZERO:
            return 0
        if self.eof_policy is EofPolicy.MINUS_ONE:
            return -1
        return None

    def snapshot(
        self,
        pc: int,
        instruction: Optional[Instruction],
        step: int,
        program_length: int,
        tape_window: int,
    ) -> ExecutionState:
        start = max(0, self.pointer - tape_window)
        end = min(self.tape_length, self.pointer + tape_window + 1)
        tape_view = list(self.tape[start:end])
        return ExecutionState(
            step=step,
            pc=pc,
            command=str(instruction) if instruction is not None else None,
            pointer=self.pointer,
            tape_start=start,
            tape=tape_view,
            output="".join(self.output_buffer),
            program_length=program_length,
        )


__all__ = [
    "BrainfuckInterpreter",
    "ExecutionState",
    "StepLimitExceeded",
]
