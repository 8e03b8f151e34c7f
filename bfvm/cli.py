from __future__ import annotations

import argparse
import logging
import sys
from typing import Callable, Optional

from .bf_interpreter import BrainfuckInterpreter
from .builder import compile_program, load_source
from .config import CELL_MODULUS, FOLDED_CELL_MODULUS, TAPE_LENGTH, EofPolicy
from .errors import StepLimitExceeded, UnmatchedBracket, UnreadableSource
from .streams import BufferedInput, InputSource, StreamInput

BANNER = (
    "A simple brainfuck interpreter\n"
    "Cell width:    8 bit, wrapping\n"
    "Cell count:    {cells}\n"
    "Usage:         bfvm <filepath>\n"
)


def _build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="bfvm", description="Brainfuck virtual machine")
    parser.add_argument("source", nargs="?", help="Path to Brainfuck source file")
    parser.add_argument(
        "-O",
        "--optimize",
        action="store_true",
        help="Fold runs of pointer moves and cell deltas before execution",
    )
    parser.add_argument(
        "--strict-wrap",
        action="store_true",
        help="Reduce folded cell deltas modulo 256 instead of 255",
    )
    parser.add_argument(
        "--eof",
        choices=[policy.value for policy in EofPolicy],
        default=EofPolicy.ZERO.value,
        help="Value stored by ',' at end of input (default: zero)",
    )
    parser.add_argument(
        "--input",
        help="Input string supplied to the program instead of stdin",
    )
    parser.add_argument(
        "--tape-length",
        type=int,
        default=TAPE_LENGTH,
        help=f"Number of tape cells (default: {TAPE_LENGTH})",
    )
    parser.add_argument(
        "--max-steps",
        type=int,
        default=None,
        help="Abort after this many executed instructions",
    )
    parser.add_argument(
        "--dump",
        action="store_true",
        help="Print the resolved instruction listing instead of running",
    )
    parser.add_argument("-v", "--verbose", action="store_true", help="Enable debug logging")
    return parser


def _stdout_sink() -> Callable[[str], None]:
    # Program output is always UTF-8, whatever the locale's encoding.
    # In-memory text streams have no byte layer and take the text as is.
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is None:
        return sys.stdout.write
    sys.stdout.flush()

    def write(text: str) -> None:
        buffer.write(text.encode("utf-8"))

    return write


def _flush_stdout() -> None:
    sys.stdout.flush()
    buffer = getattr(sys.stdout, "buffer", None)
    if buffer is not None:
        buffer.flush()


def main(argv: Optional[list[str]] = None) -> int:
    parser = _build_parser()
    args = parser.parse_args(argv)
    if args.tape_length <= 0:
        parser.error("--tape-length must be positive")

    if args.verbose:
        logging.basicConfig(
            level=logging.DEBUG,
            stream=sys.stderr,
            format="%(levelname)5s %(name)s: %(message)s",
        )

    if args.source is None:
        sys.stdout.write(BANNER.format(cells=args.tape_length))
        return 0

    try:
        source_text = load_source(args.source)
        program = compile_program(source_text, fold=args.optimize)
    except UnreadableSource as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return exc.exit_code
    except UnmatchedBracket as exc:
        index = exc.reported_index(args.optimize)
        print(f"Error: No partner for bracket at position {index}", file=sys.stderr)
        return exc.exit_code

    if args.dump:
        listing = program.listing()
        if listing:
            print(listing)
        return 0

    interpreter = BrainfuckInterpreter(
        tape_length=args.tape_length,
        optimize=args.optimize,
        eof_policy=EofPolicy(args.eof),
        folded_cell_modulus=CELL_MODULUS if args.strict_wrap else FOLDED_CELL_MODULUS,
    )
    input_source: InputSource = BufferedInput(args.input) if args.input is not None else StreamInput()
    try:
        interpreter.run(
            program,
            input_data=input_source,
            max_steps=args.max_steps,
            output=_stdout_sink(),
        )
    except StepLimitExceeded as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return exc.exit_code
    finally:
        _flush_stdout()

    return 0


if __name__ == "__main__":
    raise SystemExit(main())
