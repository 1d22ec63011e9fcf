"""Chunked line counting with bounded memory usage."""
from __future__ import annotations

from pathlib import Path

from common.errors import ErrorCode, SplitError


class LineCounter:
    """Counts newline-delimited lines without materializing the entire file.

    Uses the same convention as the line source: every ``\\n`` ends a line and
    trailing bytes without a terminator form one more line.
    """

    def __init__(self, *, chunk_size: int = 1_048_576) -> None:
        self.chunk_size = max(1024, chunk_size)

    def count(self, path: Path) -> int:
        line_count = 0
        last_char = b""
        try:
            handle = path.open("rb")
        except OSError as exc:
            raise SplitError(ErrorCode.OPEN_FAILED, path, exc) from exc
        with handle:
            while True:
                try:
                    chunk = handle.read(self.chunk_size)
                except OSError as exc:
                    raise SplitError(ErrorCode.READ_FAILED, path, exc) from exc
                if not chunk:
                    break
                line_count += chunk.count(b"\n")
                last_char = chunk[-1:]
        if last_char not in {b"\n", b""}:
            line_count += 1
        return line_count
