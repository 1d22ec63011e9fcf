"""Streaming line source and chunk rotation for splitting large files."""

from .line_counter import LineCounter
from .line_source import LineSource
from .naming import chunk_filename
from .planner import PlanEntry, SplitPlan, SplitPlanner
from .splitter import ChunkWriter, FileSplitter, split_file

__all__ = [
    "ChunkWriter",
    "FileSplitter",
    "LineCounter",
    "LineSource",
    "PlanEntry",
    "SplitPlan",
    "SplitPlanner",
    "chunk_filename",
    "split_file",
]
