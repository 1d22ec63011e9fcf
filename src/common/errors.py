"""Shared error codes and exceptions for the splitter and its callers."""
from __future__ import annotations

import os
from enum import Enum
from typing import Any, Dict, Optional


class ErrorCode(str, Enum):
    CONFIG_ERROR = "CONFIG_ERROR"
    OPEN_FAILED = "OPEN_FAILED"
    READ_FAILED = "READ_FAILED"
    CHUNK_CREATE_FAILED = "CHUNK_CREATE_FAILED"
    WRITE_FAILED = "WRITE_FAILED"
    FLUSH_FAILED = "FLUSH_FAILED"


class BackendError(RuntimeError):
    """Exception carrying a structured error code for CLI/agents."""

    def __init__(self, code: ErrorCode, message: str, *, context: Optional[Dict[str, Any]] = None) -> None:
        super().__init__(message)
        self.code = code
        self.context = context or {}

    def __str__(self) -> str:  # pragma: no cover - formatting sugar
        base = super().__str__()
        return f"[{self.code.value}] {base}" if base else self.code.value


class SplitError(BackendError):
    """I/O failure while splitting; the originating OSError is chained as __cause__."""

    def __init__(self, code: ErrorCode, path: str | os.PathLike[str], error: OSError) -> None:
        reason = error.strerror or str(error) or type(error).__name__
        super().__init__(
            code,
            f"{_VERBS[code]} '{os.fspath(path)}': {reason}",
            context={"path": os.fspath(path), "errno": error.errno},
        )


_VERBS = {
    ErrorCode.OPEN_FAILED: "Cannot open input",
    ErrorCode.READ_FAILED: "Read failed on",
    ErrorCode.CHUNK_CREATE_FAILED: "Cannot create chunk",
    ErrorCode.WRITE_FAILED: "Write failed on",
    ErrorCode.FLUSH_FAILED: "Flush failed on",
}
