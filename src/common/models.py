"""Data models shared across UI, core splitter, and configuration layers."""
from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import List, Optional


@dataclass(slots=True)
class SplitState:
    """Rotation counters owned by a single split call."""

    lines_read: int = 0
    lines_in_chunk: int = 0
    chunk_index: int = 0

    def rotate(self) -> None:
        self.chunk_index += 1
        self.lines_in_chunk = 0


@dataclass(slots=True)
class SplitProgress:
    """Progress payload reported back to UI during long splits."""

    file_path: Path
    processed_lines: int
    chunk_index: int
    current_phase: str
    lines_per_second: Optional[float] = None


@dataclass(slots=True)
class SplitSummary:
    """Outcome of splitting a single input file."""

    input_path: Path
    lines_read: int
    lines_written: int
    lines_skipped: int
    output_files: List[str] = field(default_factory=list)
    duration_seconds: float = 0.0
    lines_per_second: float = 0.0

    @property
    def chunk_count(self) -> int:
        return len(self.output_files)


@dataclass(slots=True)
class GlobalSettings:
    """Global knobs that apply across profiles."""

    read_buffer_bytes: int = 1_048_576
    write_buffer_bytes: int = 1_048_576
    progress_every_lines: int = 100_000


@dataclass(slots=True)
class ProfileSettings:
    """Named sizing preset for a kind of input."""

    description: str
    lines_per_chunk: int = 1000
    skip_first: bool = False


@dataclass(slots=True)
class RuntimeConfig:
    """Resolved configuration for a single run."""

    global_settings: GlobalSettings
    profile: ProfileSettings
