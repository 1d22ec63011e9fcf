from __future__ import annotations

import errno
from pathlib import Path
from typing import List

import pytest

from common.errors import BackendError, ErrorCode
from common.models import GlobalSettings, ProfileSettings, RuntimeConfig, SplitProgress
from core.splitting import FileSplitter, split_file
from core.splitting import splitter as splitter_module


def write_lines(path: Path, count: int) -> List[bytes]:
    lines = [f"row-{idx},value-{idx}\n".encode("utf-8") for idx in range(count)]
    path.write_bytes(b"".join(lines))
    return lines


def chunk_lines(path: Path) -> List[bytes]:
    return path.read_bytes().splitlines(keepends=True)


def test_twenty_five_lines_into_three_chunks(tmp_path: Path) -> None:
    source = tmp_path / "data.csv"
    lines = write_lines(source, 25)

    summary = split_file(source, 10)

    chunks = [tmp_path / f"data_{idx}.csv" for idx in range(3)]
    assert summary.output_files == [str(path) for path in chunks]
    assert [len(chunk_lines(path)) for path in chunks] == [10, 10, 5]
    assert b"".join(path.read_bytes() for path in chunks) == b"".join(lines)
    assert not (tmp_path / "data_3.csv").exists()
    assert summary.lines_read == 25
    assert summary.lines_written == 25
    assert summary.lines_skipped == 0


def test_skip_first_with_twenty_one_lines(tmp_path: Path) -> None:
    source = tmp_path / "export.csv"
    lines = write_lines(source, 21)

    summary = split_file(source, 10, skip_first=True)

    assert summary.chunk_count == 2
    first = chunk_lines(tmp_path / "export_0.csv")
    second = chunk_lines(tmp_path / "export_1.csv")
    assert first == lines[1:11]
    assert second == lines[11:21]
    assert lines[0] not in first + second
    assert not (tmp_path / "export_2.csv").exists()
    assert summary.lines_skipped == 1


def test_even_multiple_leaves_no_empty_trailing_chunk(tmp_path: Path) -> None:
    source = tmp_path / "even.txt"
    write_lines(source, 20)

    summary = split_file(source, 10)

    assert summary.chunk_count == 2
    assert not (tmp_path / "even_2.txt").exists()


def test_empty_input_creates_single_empty_chunk(tmp_path: Path) -> None:
    source = tmp_path / "empty.csv"
    source.write_bytes(b"")

    summary = split_file(source, 10)

    chunk = tmp_path / "empty_0.csv"
    assert summary.output_files == [str(chunk)]
    assert chunk.read_bytes() == b""


def test_header_only_input_with_skip_creates_empty_chunk(tmp_path: Path) -> None:
    source = tmp_path / "header.csv"
    source.write_bytes(b"id,name\n")

    summary = split_file(source, 5, skip_first=True)

    assert summary.chunk_count == 1
    assert (tmp_path / "header_0.csv").read_bytes() == b""


@pytest.mark.parametrize("lines_per_chunk", [1, 2, 3, 7, 50])
@pytest.mark.parametrize("skip_first", [False, True])
def test_exact_partition(tmp_path: Path, lines_per_chunk: int, skip_first: bool) -> None:
    source = tmp_path / "payload.dat"
    lines = write_lines(source, 17)
    expected = lines[1:] if skip_first else lines

    summary = split_file(source, lines_per_chunk, skip_first=skip_first)

    sizes = [len(chunk_lines(Path(name))) for name in summary.output_files]
    assert all(size == lines_per_chunk for size in sizes[:-1])
    assert 1 <= sizes[-1] <= lines_per_chunk
    assert b"".join(Path(name).read_bytes() for name in summary.output_files) == b"".join(expected)


def test_terminators_are_preserved(tmp_path: Path) -> None:
    source = tmp_path / "windows.txt"
    payload = b"a\r\nb\r\nc\r\nd"
    source.write_bytes(payload)

    split_file(source, 2)

    assert (tmp_path / "windows_0.txt").read_bytes() == b"a\r\nb\r\n"
    assert (tmp_path / "windows_1.txt").read_bytes() == b"c\r\nd"


def test_file_without_extension(tmp_path: Path) -> None:
    source = tmp_path / "README"
    write_lines(source, 3)

    summary = split_file(source, 2)

    assert summary.output_files == [str(tmp_path / "README_0"), str(tmp_path / "README_1")]


def test_rerun_overwrites_outputs(tmp_path: Path) -> None:
    source = tmp_path / "data.csv"
    write_lines(source, 12)
    (tmp_path / "data_0.csv").write_bytes(b"stale content that is much longer than a chunk\n" * 100)

    split_file(source, 5)
    first_run = {name: (tmp_path / name).read_bytes() for name in ("data_0.csv", "data_1.csv", "data_2.csv")}
    split_file(source, 5)
    second_run = {name: (tmp_path / name).read_bytes() for name in first_run}

    assert first_run == second_run
    assert len(chunk_lines(tmp_path / "data_0.csv")) == 5


def test_missing_input_fails_before_creating_outputs(tmp_path: Path) -> None:
    source = tmp_path / "missing.csv"

    with pytest.raises(BackendError) as exc:
        split_file(source, 10)

    assert exc.value.code == ErrorCode.OPEN_FAILED
    assert list(tmp_path.iterdir()) == []


@pytest.mark.parametrize("bad_value", [0, -3, "ten", None])
def test_invalid_lines_per_chunk_rejected(tmp_path: Path, bad_value) -> None:
    source = tmp_path / "data.csv"
    write_lines(source, 3)

    with pytest.raises(BackendError) as exc:
        split_file(source, bad_value)

    assert exc.value.code == ErrorCode.CONFIG_ERROR
    assert not (tmp_path / "data_0.csv").exists()


def test_chunk_create_failure_keeps_finished_chunks(tmp_path: Path) -> None:
    source = tmp_path / "data.csv"
    lines = write_lines(source, 5)
    (tmp_path / "data_1.csv").mkdir()

    with pytest.raises(BackendError) as exc:
        split_file(source, 2)

    assert exc.value.code == ErrorCode.CHUNK_CREATE_FAILED
    assert exc.value.context["path"] == str(tmp_path / "data_1.csv")
    assert chunk_lines(tmp_path / "data_0.csv") == lines[:2]


class _BrokenHandle:
    def __init__(self, *, fail_write: bool = False, fail_close: bool = False) -> None:
        self.fail_write = fail_write
        self.fail_close = fail_close
        self.closed = False

    def write(self, data: bytes) -> int:
        if self.fail_write:
            raise OSError(errno.ENOSPC, "No space left on device")
        return len(data)

    def close(self) -> None:
        self.closed = True
        if self.fail_close:
            raise OSError(errno.ENOSPC, "No space left on device")


def test_write_failure_is_reported(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = tmp_path / "data.csv"
    write_lines(source, 3)
    handles: List[_BrokenHandle] = []

    def fake_open(path, mode="r", buffering=-1):
        handle = _BrokenHandle(fail_write=True)
        handles.append(handle)
        return handle

    monkeypatch.setattr(splitter_module, "open", fake_open, raising=False)

    with pytest.raises(BackendError) as exc:
        split_file(source, 2)

    assert exc.value.code == ErrorCode.WRITE_FAILED
    assert exc.value.context["errno"] == errno.ENOSPC
    assert all(handle.closed for handle in handles)


def test_flush_failure_is_reported(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = tmp_path / "data.csv"
    write_lines(source, 1)

    def fake_open(path, mode="r", buffering=-1):
        return _BrokenHandle(fail_close=True)

    monkeypatch.setattr(splitter_module, "open", fake_open, raising=False)

    with pytest.raises(BackendError) as exc:
        split_file(source, 10)

    assert exc.value.code == ErrorCode.FLUSH_FAILED
    assert exc.value.context["path"] == str(tmp_path / "data_0.csv")


def test_progress_events_cover_rotations_and_completion(tmp_path: Path) -> None:
    source = tmp_path / "data.csv"
    write_lines(source, 7)
    events: List[SplitProgress] = []

    splitter = FileSplitter(3, progress_every_lines=2)
    splitter.split(source, progress_callback=events.append)

    phases = [event.current_phase for event in events]
    assert phases.count("rotate") == 2
    assert phases[-1] == "complete"
    assert events[-1].processed_lines == 7
    assert [event.processed_lines for event in events if event.current_phase == "rotate"] == [3, 6]


def test_splitter_from_config(tmp_path: Path) -> None:
    runtime = RuntimeConfig(
        global_settings=GlobalSettings(read_buffer_bytes=64, write_buffer_bytes=64, progress_every_lines=10),
        profile=ProfileSettings(description="test", lines_per_chunk=4, skip_first=True),
    )
    source = tmp_path / "with_header.csv"
    lines = write_lines(source, 9)

    summary = FileSplitter.from_config(runtime).split(source)

    assert summary.chunk_count == 2
    assert chunk_lines(tmp_path / "with_header_0.csv") == lines[1:5]
    assert chunk_lines(tmp_path / "with_header_1.csv") == lines[5:9]


def test_write_failure_wins_over_close_failure(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = tmp_path / "data.csv"
    write_lines(source, 3)

    def fake_open(path, mode="r", buffering=-1):
        return _BrokenHandle(fail_write=True, fail_close=True)

    monkeypatch.setattr(splitter_module, "open", fake_open, raising=False)

    with pytest.raises(BackendError) as exc:
        split_file(source, 2)

    assert exc.value.code == ErrorCode.WRITE_FAILED
    assert any("FLUSH_FAILED" in note for note in exc.value.__notes__)


def test_disk_full_reported_as_write_failure(tmp_path: Path) -> None:
    if not Path("/dev/full").exists():
        pytest.skip("/dev/full is not available")
    source = tmp_path / "data.csv"
    write_lines(source, 2000)
    (tmp_path / "data_0.csv").symlink_to("/dev/full")

    splitter = FileSplitter(5000, write_buffer_bytes=64)
    with pytest.raises(BackendError) as exc:
        splitter.split(source)

    assert exc.value.code == ErrorCode.WRITE_FAILED
    assert exc.value.context["errno"] == errno.ENOSPC


class _InterruptedHandle:
    def __init__(self, lines: List[bytes]) -> None:
        self.lines = list(lines)
        self.closed = False

    def readline(self) -> bytes:
        if not self.lines:
            raise OSError(errno.EIO, "Input/output error")
        return self.lines.pop(0)

    def close(self) -> None:
        self.closed = True


def test_read_failure_mid_stream_keeps_written_chunks(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    source = tmp_path / "data.csv"
    lines = [b"a\n", b"b\n", b"c\n"]
    handle = _InterruptedHandle(lines)

    def fake_open(cls, path, *, buffer_bytes=0):
        return cls(Path(path), handle)

    monkeypatch.setattr(splitter_module.LineSource, "open", classmethod(fake_open))

    with pytest.raises(BackendError) as exc:
        split_file(source, 2)

    assert exc.value.code == ErrorCode.READ_FAILED
    assert handle.closed
    assert chunk_lines(tmp_path / "data_0.csv") == lines[:2]
    assert chunk_lines(tmp_path / "data_1.csv") == lines[2:]
    assert not (tmp_path / "data_2.csv").exists()
