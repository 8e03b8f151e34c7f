from __future__ import annotations

from enum import Enum

TAPE_LENGTH = 64000
CELL_MODULUS = 256
# Folded cell deltas are reduced modulo 255 before the 8-bit add. This keeps
# parity with the reference optimizing engine; use CELL_MODULUS for true
# 8-bit semantics on runs of 255 or more.
FOLDED_CELL_MODULUS = 255
DEFAULT_TAPE_WINDOW = 10


class EofPolicy(str, Enum):
    """What an input instruction stores when the input source is exhausted."""

    ZERO = "zero"
    UNCHANGED = "unchanged"
    MINUS_ONE = "minus-one"


__all__ = [
    "CELL_MODULUS",
    "DEFAULT_TAPE_WINDOW",
    "EofPolicy",
    "FOLDED_CELL_MODULUS",
    "TAPE_LENGTH",
]
