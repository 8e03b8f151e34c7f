from __future__ import annotations

import logging
from pathlib import Path
from typing import List, Optional

from .errors import UnreadableSource
from .program import FOLDABLE_KINDS, OPERATORS, Instruction, Program
from .resolver import resolve_jumps

logger = logging.getLogger(__name__)


def load_source(path: str) -> str:
    try:
        return Path(path).read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise UnreadableSource(path) from exc


def build_instructions(source: str, fold: bool = False) -> List[Instruction]:
    """Translate source text into an unresolved instruction list.

    Characters outside the eight operators are skipped. With ``fold`` set,
    consecutive pointer moves (or cell deltas) are merged into one
    instruction carrying their signed sum; I/O and loop brackets always
    stand alone.
    """
    instructions: List[Instruction] = []
    pending: Optional[Instruction] = None

    for position, char in enumerate(source):
        decoded = OPERATORS.get(char)
        if decoded is None:
            continue
        kind, unit = decoded
        if not fold:
            instructions.append(Instruction(kind, unit, position))
            continue
        if pending is not None and pending.kind is kind and kind in FOLDABLE_KINDS:
            pending = Instruction(kind, pending.operand + unit, pending.position)
            continue
        if pending is not None:
            instructions.append(pending)
        if kind in FOLDABLE_KINDS:
            pending = Instruction(kind, unit, position)
        else:
            pending = None
            instructions.append(Instruction(kind, unit, position))

    if pending is not None:
        instructions.append(pending)

    logger.debug(
        "built %d instructions from %d characters (fold=%s)",
        len(instructions),
        len(source),
        fold,
    )
    return instructions


def compile_program(source: str, fold: bool = False) -> Program:
    return resolve_jumps(build_instructions(source, fold=fold), optimized=fold)


__all__ = ["build_instructions", "compile_program", "load_source"]
