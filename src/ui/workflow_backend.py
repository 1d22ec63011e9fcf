"""Backend workflow for batch splitting and convenience helpers."""
import re
from pathlib import Path
from typing import Callable, List, Optional

from common.errors import BackendError, ErrorCode
from common.models import SplitProgress, SplitSummary
from core.splitting import FileSplitter

SUPPORTED_EXTENSIONS = {".csv", ".tsv", ".txt", ".log"}

# stems ending in _<n> look like output of an earlier split
_CHUNK_STEM = re.compile(r"_\d+$")


def collect_input_files(input_folder: str) -> List[Path]:
    if not input_folder:
        raise BackendError(ErrorCode.CONFIG_ERROR, "Input folder is required")
    folder = Path(input_folder)
    return sorted(
        p
        for p in folder.glob("**/*")
        if p.is_file() and p.suffix.lower() in SUPPORTED_EXTENSIONS and not _CHUNK_STEM.search(p.stem)
    )


def run_batch_workflow(
    input_folder: str,
    lines_per_chunk: int,
    skip_first: bool,
    progress_callback: Optional[Callable[[SplitProgress], None]] = None,
) -> List[SplitSummary]:
    files = collect_input_files(input_folder)
    if not files:
        print("No input files found in input folder.")
        return []
    print(f"Found {len(files)} files for processing.")

    splitter = FileSplitter(lines_per_chunk, skip_first=skip_first)
    summaries = []
    for path in files:
        summary = splitter.split(path, progress_callback=progress_callback)
        print(f"[batch] {path} -> {summary.chunk_count} chunk(s), {summary.lines_written} lines")
        summaries.append(summary)
    print(f"Split complete. {len(summaries)} file(s) processed.")
    return summaries
