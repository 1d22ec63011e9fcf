"""Dry-run planning of the chunk files a split would produce."""
from __future__ import annotations

import json
import os
from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import List

from common.config import require_lines_per_chunk
from common.versioning import PLAN_ARTIFACT_VERSION

from .line_counter import LineCounter
from .naming import chunk_filename


@dataclass(slots=True)
class PlanEntry:
    chunk_index: int
    output_path: str
    line_count: int


@dataclass(slots=True)
class SplitPlan:
    input_path: str
    lines_per_chunk: int
    skip_first: bool
    total_lines: int
    post_skip_lines: int
    entries: List[PlanEntry] = field(default_factory=list)


class SplitPlanner:
    """Predicts chunk names and sizes from a line count, without writing anything."""

    def __init__(self, lines_per_chunk: int, *, skip_first: bool = False, counter: LineCounter | None = None) -> None:
        self.lines_per_chunk = require_lines_per_chunk(lines_per_chunk)
        self.skip_first = skip_first
        self.counter = counter or LineCounter()

    def build_plan(self, input_path: str | os.PathLike[str]) -> SplitPlan:
        total_lines = self.counter.count(Path(input_path))
        post_skip = total_lines - 1 if self.skip_first and total_lines else total_lines
        entries: List[PlanEntry] = []
        remaining = post_skip
        chunk_index = 0
        while True:
            line_count = min(self.lines_per_chunk, remaining)
            entries.append(PlanEntry(chunk_index, chunk_filename(input_path, chunk_index), line_count))
            remaining -= line_count
            if remaining <= 0:
                break
            chunk_index += 1
        return SplitPlan(
            input_path=os.fspath(input_path),
            lines_per_chunk=self.lines_per_chunk,
            skip_first=self.skip_first,
            total_lines=total_lines,
            post_skip_lines=post_skip,
            entries=entries,
        )

    @staticmethod
    def write_plan(plan: SplitPlan, path: Path) -> None:
        payload = {"version": PLAN_ARTIFACT_VERSION, **asdict(plan)}
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(json.dumps(payload, indent=2), encoding="utf-8")
