from __future__ import annotations

import logging
from dataclasses import replace
from typing import List, Sequence

from .errors import UnmatchedLoopClose, UnmatchedLoopOpen
from .program import Instruction, Kind, Program

logger = logging.getLogger(__name__)


def resolve_jumps(instructions: Sequence[Instruction], optimized: bool = False) -> Program:
    """Pair every loop bracket with its partner and freeze the program.

    Each matched bracket gets the partner's instruction index as operand.
    An unmatched ``]`` fails as soon as it is seen; leftover ``[`` report the
    earliest one still open.
    """
    resolved: List[Instruction] = list(instructions)
    stack: List[int] = []
    for index, instruction in enumerate(resolved):
        if instruction.kind is Kind.LOOP_OPEN:
            stack.append(index)
        elif instruction.kind is Kind.LOOP_CLOSE:
            if not stack:
                raise UnmatchedLoopClose(index, instruction.position)
            start = stack.pop()
            resolved[start] = replace(resolved[start], operand=index)
            resolved[index] = replace(instruction, operand=start)
    if stack:
        first = stack[0]
        raise UnmatchedLoopOpen(first, resolved[first].position)

    program = Program(tuple(resolved), optimized=optimized)
    logger.debug("resolved program of %d instructions", len(program))
    return program


__all__ = ["resolve_jumps"]
