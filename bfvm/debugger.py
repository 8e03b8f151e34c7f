from __future__ import annotations

from bisect import bisect_right
from collections import deque
from dataclasses import dataclass
from typing import Deque, Dict, Iterator, List, Optional, Tuple

from .bf_interpreter import BrainfuckInterpreter, ExecutionState
from .builder import compile_program
from .config import CELL_MODULUS, DEFAULT_TAPE_WINDOW, FOLDED_CELL_MODULUS, TAPE_LENGTH
from .errors import StepLimitExceeded
from .program import Kind, Program


def instruction_at(program: Program, position: int) -> int:
    """Return the index of the instruction whose source span covers ``position``.

    An instruction spans from its own source position up to the next
    instruction's, so comments and the tail of a folded run belong to the
    instruction before them.
    """
    starts = [instruction.position for instruction in program]
    if not starts or position < starts[0]:
        raise ValueError(f"No instruction at source position {position}")
    return bisect_right(starts, position) - 1


def enclosing_loops(program: Program, pc: int) -> List[Tuple[int, int]]:
    """(open, close) index pairs of the loops containing ``pc``, outermost first."""
    loops: List[Tuple[int, int]] = []
    for index in range(min(pc, len(program))):
        instruction = program[index]
        if instruction.kind is Kind.LOOP_OPEN and instruction.operand >= pc:
            loops.append((index, instruction.operand))
    return loops


@dataclass
class DebugSession:
    """Step a resolved program one instruction at a time.

    Breakpoints live on instruction indices; ``break_at_source`` maps a
    source offset onto the instruction covering it. A breakpoint stops the
    session before the instruction at that index runs.
    """

    code: str
    input_data: str = ""
    optimize: bool = False
    strict_wrap: bool = False
    max_steps: Optional[int] = None
    tape_window: int = DEFAULT_TAPE_WINDOW
    trace_size: int = 200
    tape_length: int = TAPE_LENGTH

    def __post_init__(self) -> None:
        self.program: Program = compile_program(self.code, fold=self.optimize)
        self.breakpoints: Dict[int, int] = {}
        self.rewind()

    def rewind(self) -> None:
        self.interpreter = BrainfuckInterpreter(
            tape_length=self.tape_length,
            optimize=self.optimize,
            folded_cell_modulus=CELL_MODULUS if self.strict_wrap else FOLDED_CELL_MODULUS,
        )
        self._states: Iterator[ExecutionState] = self.interpreter.step(
            self.program,
            input_data=self.input_data,
            max_steps=self.max_steps,
            tape_window=self.tape_window,
        )
        self.state = self.interpreter.snapshot(0, None, 0, len(self.program), self.tape_window)
        self.trace: Deque[ExecutionState] = deque([self.state], maxlen=self.trace_size)
        self.finished = False
        self.stopped_at: Optional[int] = None

    def advance(self, count: Optional[int] = 1, honor_breakpoints: bool = True) -> List[ExecutionState]:
        """Execute up to ``count`` instructions (all of them when ``None``)."""
        taken: List[ExecutionState] = []
        self.stopped_at = None
        while not self.finished and (count is None or len(taken) < count):
            try:
                state = next(self._states)
            except StepLimitExceeded:
                self.finished = True
                raise
            self.state = state
            self.trace.append(state)
            taken.append(state)
            if state.command is None:
                self.finished = True
            elif honor_breakpoints and state.pc in self.breakpoints:
                self.stopped_at = state.pc
                break
        return taken

    def break_at(self, index: int) -> int:
        if not 0 <= index < len(self.program):
            raise ValueError(f"Instruction index {index} out of range")
        self.breakpoints[index] = self.program[index].position
        return index

    def break_at_source(self, position: int) -> int:
        if position >= len(self.code):
            raise ValueError(f"Source position {position} is past the end of the program")
        return self.break_at(instruction_at(self.program, position))

    def clear_breakpoint(self, index: int) -> bool:
        return self.breakpoints.pop(index, None) is not None

    def loops(self) -> List[Tuple[int, int]]:
        return enclosing_loops(self.program, self.state.pc)


__all__ = ["DebugSession", "enclosing_loops", "instruction_at"]
