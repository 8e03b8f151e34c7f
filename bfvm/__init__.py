from .bf_interpreter import BrainfuckInterpreter, ExecutionState
from .builder import build_instructions, compile_program, load_source
from .config import TAPE_LENGTH, EofPolicy
from .debugger import DebugSession
from .errors import (
    BrainfuckError,
    StepLimitExceeded,
    UnmatchedBracket,
    UnmatchedLoopClose,
    UnmatchedLoopOpen,
    UnreadableSource,
)
from .program import Instruction, Kind, Program
from .resolver import resolve_jumps
from .streams import BufferedInput, StreamInput

__all__ = [
    "BrainfuckError",
    "BrainfuckInterpreter",
    "BufferedInput",
    "DebugSession",
    "EofPolicy",
    "ExecutionState",
    "Instruction",
    "Kind",
    "Program",
    "StepLimitExceeded",
    "StreamInput",
    "TAPE_LENGTH",
    "UnmatchedBracket",
    "UnmatchedLoopClose",
    "UnmatchedLoopOpen",
    "UnreadableSource",
    "build_instructions",
    "compile_program",
    "load_source",
    "resolve_jumps",
]
