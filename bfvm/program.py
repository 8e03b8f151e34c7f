from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterator, List, Tuple


class Kind(str, Enum):
    NOOP = "noop"
    OUTPUT = "output"
    INPUT = "input"
    LOOP_OPEN = "loop_open"
    LOOP_CLOSE = "loop_close"
    POINTER_DELTA = "pointer_delta"
    CELL_DELTA = "cell_delta"


# operator -> (kind, unit operand)
OPERATORS: Dict[str, Tuple[Kind, int]] = {
    ">": (Kind.POINTER_DELTA, 1),
    "<": (Kind.POINTER_DELTA, -1),
    "+": (Kind.CELL_DELTA, 1),
    "-": (Kind.CELL_DELTA, -1),
    ".": (Kind.OUTPUT, 0),
    ",": (Kind.INPUT, 0),
    "[": (Kind.LOOP_OPEN, 0),
    "]": (Kind.LOOP_CLOSE, 0),
}

FOLDABLE_KINDS = frozenset({Kind.POINTER_DELTA, Kind.CELL_DELTA})
LOOP_KINDS = frozenset({Kind.LOOP_OPEN, Kind.LOOP_CLOSE})

_SIMPLE_SYMBOLS = {
    Kind.NOOP: "nop",
    Kind.OUTPUT: ".",
    Kind.INPUT: ",",
    Kind.LOOP_OPEN: "[",
    Kind.LOOP_CLOSE: "]",
}
_DELTA_SYMBOLS = {
    Kind.POINTER_DELTA: (">", "<"),
    Kind.CELL_DELTA: ("+", "-"),
}


@dataclass(frozen=True)
class Instruction:
    """One executable unit.

    For pointer/cell deltas ``operand`` is the signed net run length. For
    loop brackets it is the index of the partner bracket once the program
    has been resolved. ``position`` is the source offset of the first
    operator that contributed to the instruction.
    """

    kind: Kind
    operand: int = 0
    position: int = 0

    def __str__(self) -> str:
        if self.kind in _DELTA_SYMBOLS:
            forward, backward = _DELTA_SYMBOLS[self.kind]
            symbol = forward if self.operand >= 0 else backward
            magnitude = abs(self.operand)
            return symbol if magnitude == 1 else f"{symbol}{magnitude}"
        return _SIMPLE_SYMBOLS[self.kind]


@dataclass(frozen=True)
class Program:
    """A resolved, immutable instruction sequence."""

    instructions: Tuple[Instruction, ...]
    optimized: bool = False

    def __len__(self) -> int:
        return len(self.instructions)

    def __getitem__(self, index: int) -> Instruction:
        return self.instructions[index]

    def __iter__(self) -> Iterator[Instruction]:
        return iter(self.instructions)

    def partner(self, index: int) -> int:
        instruction = self.instructions[index]
        if instruction.kind not in LOOP_KINDS:
            raise ValueError(f"Instruction {index} is not a loop bracket")
        return instruction.operand

    def listing(self) -> str:
        lines: List[str] = []
        for index, instruction in enumerate(self.instructions):
            line = f"{index:6d}  {str(instruction):<8}{instruction.kind.value}"
            if instruction.kind in LOOP_KINDS:
                line += f" -> {instruction.operand}"
            lines.append(line)
        return "\n".join(lines)


__all__ = [
    "FOLDABLE_KINDS",
    "Instruction",
    "Kind",
    "LOOP_KINDS",
    "OPERATORS",
    "Program",
]
