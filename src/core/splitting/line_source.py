"""Forward-only line reader with bounded buffering."""
from __future__ import annotations

import os
from pathlib import Path
from typing import BinaryIO, Iterator, Optional

from common.errors import ErrorCode, SplitError

DEFAULT_BUFFER_BYTES = 1_048_576


class LineSource:
    """Yields raw lines (``bytes`` including the trailing ``\\n``) from one file.

    Lines are split on ``b"\\n"`` only; a ``\\r`` before it is kept as part of
    the line, and a final line without a terminator is still yielded. Every
    line is an independent ``bytes`` object, so callers may hold on to earlier
    lines while reading later ones.

    The source is exhausted exactly once: after end of file or a read error
    the handle is closed and iteration stops for good.
    """

    def __init__(self, path: Path, handle: BinaryIO) -> None:
        self.path = path
        self.lines_read = 0
        self._handle: Optional[BinaryIO] = handle

    @classmethod
    def open(cls, path: str | os.PathLike[str], *, buffer_bytes: int = DEFAULT_BUFFER_BYTES) -> "LineSource":
        """Open ``path`` for reading without consuming any data."""

        target = Path(path)
        try:
            handle = target.open("rb", buffering=max(1, buffer_bytes))
        except OSError as exc:
            raise SplitError(ErrorCode.OPEN_FAILED, target, exc) from exc
        return cls(target, handle)

    @property
    def closed(self) -> bool:
        return self._handle is None

    def __iter__(self) -> Iterator[bytes]:
        return self

    def __next__(self) -> bytes:
        if self._handle is None:
            raise StopIteration
        try:
            line = self._handle.readline()
        except OSError as exc:
            self.close()
            raise SplitError(ErrorCode.READ_FAILED, self.path, exc) from exc
        if not line:
            self.close()
            raise StopIteration
        self.lines_read += 1
        return line

    def close(self) -> None:
        if self._handle is not None:
            handle, self._handle = self._handle, None
            handle.close()

    def __enter__(self) -> "LineSource":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()
