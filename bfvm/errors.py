from __future__ import annotations


class BrainfuckError(Exception):
    """Base class for every failure surfaced by bfvm."""

    exit_code = 1


class UnreadableSource(BrainfuckError):
    exit_code = 1

    def __init__(self, path: str) -> None:
        super().__init__(f"Failed to read file '{path}'")
        self.path = path


class UnmatchedBracket(BrainfuckError):
    """A loop bracket without a partner.

    ``index`` is the position in the instruction sequence, ``position`` the
    offset in the source text. Unit-step programs report the source offset,
    folded programs the instruction index.
    """

    bracket = "?"

    def __init__(self, index: int, position: int) -> None:
        super().__init__(f"Unmatched '{self.bracket}' at instruction {index} (source position {position})")
        self.index = index
        self.position = position

    def reported_index(self, optimized: bool) -> int:
        return self.index if optimized else self.position


class UnmatchedLoopClose(UnmatchedBracket):
    bracket = "]"
    exit_code = 2


class UnmatchedLoopOpen(UnmatchedBracket):
    bracket = "["
    exit_code = 3


class StepLimitExceeded(BrainfuckError, RuntimeError):
    """Raised when Brainfuck execution exceeds the configured step budget."""

    exit_code = 4


__all__ = [
    "BrainfuckError",
    "StepLimitExceeded",
    "UnmatchedBracket",
    "UnmatchedLoopClose",
    "UnmatchedLoopOpen",
    "UnreadableSource",
]
