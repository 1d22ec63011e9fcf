"""Line-count based file splitting with deterministic chunk rotation."""
from __future__ import annotations

import os
import time
from pathlib import Path
from typing import BinaryIO, Callable, List, Optional

from common.config import require_lines_per_chunk
from common.errors import ErrorCode, SplitError
from common.models import RuntimeConfig, SplitProgress, SplitState, SplitSummary

from .line_source import DEFAULT_BUFFER_BYTES, LineSource
from .naming import chunk_filename

ProgressCallback = Optional[Callable[[SplitProgress], None]]

DEFAULT_LINES_PER_CHUNK = 1000


class ChunkWriter:
    """Owns the single open output chunk for one split.

    Chunks are created with truncate semantics, so re-running a split
    overwrites earlier output. A chunk that has been finalized is never
    reopened.
    """

    def __init__(self, input_path: str | os.PathLike[str], *, buffer_bytes: int = DEFAULT_BUFFER_BYTES) -> None:
        self.input_path = os.fspath(input_path)
        self.buffer_bytes = max(1, buffer_bytes)
        self.output_files: List[str] = []
        self._handle: Optional[BinaryIO] = None
        self._path: Optional[str] = None

    @property
    def is_open(self) -> bool:
        return self._handle is not None

    def open_chunk(self, chunk_index: int) -> str:
        if self._handle is not None:
            raise RuntimeError(f"Chunk '{self._path}' is still open")
        path = chunk_filename(self.input_path, chunk_index)
        try:
            self._handle = open(path, "wb", buffering=self.buffer_bytes)
        except OSError as exc:
            raise SplitError(ErrorCode.CHUNK_CREATE_FAILED, path, exc) from exc
        self._path = path
        self.output_files.append(path)
        return path

    def write(self, line: bytes) -> None:
        assert self._handle is not None and self._path is not None
        try:
            self._handle.write(line)
        except OSError as exc:
            raise SplitError(ErrorCode.WRITE_FAILED, self._path, exc) from exc

    def finalize(self) -> None:
        """Flush and close the current chunk, if any."""

        if self._handle is None:
            return
        handle, path = self._handle, self._path
        self._handle = None
        self._path = None
        try:
            # close() flushes the buffer before releasing the descriptor
            handle.close()
        except OSError as exc:
            raise SplitError(ErrorCode.FLUSH_FAILED, path or self.input_path, exc) from exc

    def __enter__(self) -> "ChunkWriter":
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if exc is None:
            self.finalize()
            return
        # the failure in flight stays the reported one; a close error on the
        # way out is recorded on it
        try:
            self.finalize()
        except SplitError as close_error:
            exc.add_note(str(close_error))


class FileSplitter:
    """Partitions an input file into chunk files of at most ``lines_per_chunk`` lines."""

    def __init__(
        self,
        lines_per_chunk: int = DEFAULT_LINES_PER_CHUNK,
        *,
        skip_first: bool = False,
        read_buffer_bytes: int = DEFAULT_BUFFER_BYTES,
        write_buffer_bytes: int = DEFAULT_BUFFER_BYTES,
        progress_every_lines: int = 100_000,
    ) -> None:
        self.lines_per_chunk = require_lines_per_chunk(lines_per_chunk)
        self.skip_first = bool(skip_first)
        self.read_buffer_bytes = max(1, read_buffer_bytes)
        self.write_buffer_bytes = max(1, write_buffer_bytes)
        self.progress_every_lines = max(1, progress_every_lines)

    @classmethod
    def from_config(cls, config: RuntimeConfig) -> "FileSplitter":
        return cls(
            config.profile.lines_per_chunk,
            skip_first=config.profile.skip_first,
            read_buffer_bytes=config.global_settings.read_buffer_bytes,
            write_buffer_bytes=config.global_settings.write_buffer_bytes,
            progress_every_lines=config.global_settings.progress_every_lines,
        )

    def split(
        self,
        input_path: str | os.PathLike[str],
        *,
        progress_callback: ProgressCallback = None,
    ) -> SplitSummary:
        """Split ``input_path`` and return a summary once the last chunk is closed.

        Chunk 0 is created before any line is read, so an input with no
        lines still produces one empty chunk. Later chunks are created only
        when a line needs them. Errors abort immediately; chunks written so
        far are left on disk as they are.
        """

        start_time = time.perf_counter()
        state = SplitState()
        lines_written = 0
        with LineSource.open(input_path, buffer_bytes=self.read_buffer_bytes) as source, ChunkWriter(
            input_path, buffer_bytes=self.write_buffer_bytes
        ) as writer:
            writer.open_chunk(state.chunk_index)
            for line in source:
                is_first = state.lines_read == 0
                state.lines_read += 1
                if is_first and self.skip_first:
                    continue
                if not writer.is_open:
                    writer.open_chunk(state.chunk_index)
                writer.write(line)
                state.lines_in_chunk += 1
                lines_written += 1
                if state.lines_in_chunk >= self.lines_per_chunk:
                    writer.finalize()
                    state.rotate()
                    if progress_callback:
                        self._emit_progress(progress_callback, source.path, state, "rotate", start_time)
                elif progress_callback and state.lines_read % self.progress_every_lines == 0:
                    self._emit_progress(progress_callback, source.path, state, "split", start_time)
            writer.finalize()
            output_files = list(writer.output_files)

        duration = time.perf_counter() - start_time
        if progress_callback:
            self._emit_progress(progress_callback, Path(input_path), state, "complete", start_time)
        return SplitSummary(
            input_path=Path(input_path),
            lines_read=state.lines_read,
            lines_written=lines_written,
            lines_skipped=state.lines_read - lines_written,
            output_files=output_files,
            duration_seconds=duration,
            lines_per_second=state.lines_read / duration if duration else float(state.lines_read),
        )

    @staticmethod
    def _emit_progress(
        callback: Callable[[SplitProgress], None],
        file_path: Path,
        state: SplitState,
        phase: str,
        start_time: float,
    ) -> None:
        rate = None
        elapsed = time.perf_counter() - start_time
        if state.lines_read and elapsed > 0:
            rate = state.lines_read / elapsed
        callback(
            SplitProgress(
                file_path=file_path,
                processed_lines=state.lines_read,
                chunk_index=state.chunk_index,
                current_phase=phase,
                lines_per_second=rate,
            )
        )


def split_file(
    input_path: str | os.PathLike[str],
    lines_per_chunk: int = DEFAULT_LINES_PER_CHUNK,
    skip_first: bool = False,
    *,
    progress_callback: ProgressCallback = None,
) -> SplitSummary:
    """Split ``input_path`` into ``{stem}_{n}.{ext}`` files of ``lines_per_chunk`` lines."""

    splitter = FileSplitter(lines_per_chunk, skip_first=skip_first)
    return splitter.split(input_path, progress_callback=progress_callback)
