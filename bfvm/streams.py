from __future__ import annotations

import sys
from typing import BinaryIO, Iterable, Iterator, Optional, Protocol, Union


class InputSource(Protocol):
    def read(self) -> Optional[int]:
        """Return the next byte value, or ``None`` at end of input."""


class BufferedInput:
    """In-memory input, fed from a string or an iterable of byte values."""

    def __init__(self, data: Union[str, Iterable[int], None] = None) -> None:
        if data is None:
            values: Iterable[int] = []
        elif isinstance(data, str):
            values = [ord(ch) for ch in data]
        else:
            values = data
        self._values: Iterator[int] = iter(values)

    def read(self) -> Optional[int]:
        return next(self._values, None)


class StreamInput:
    """Blocking one-byte reads from a binary stream (stdin by default)."""

    def __init__(self, stream: Optional[BinaryIO] = None) -> None:
        self._stream = stream if stream is not None else sys.stdin.buffer

    def read(self) -> Optional[int]:
        chunk = self._stream.read(1)
        if not chunk:
            return None
        return chunk[0]


def as_input_source(data: Union[InputSource, str, Iterable[int], None]) -> InputSource:
    if data is not None and hasattr(data, "read"):
        return data  # type: ignore[return-value]
    return BufferedInput(data)  # type: ignore[arg-type]


__all__ = ["BufferedInput", "InputSource", "StreamInput", "as_input_source"]
