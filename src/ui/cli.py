"""CLI shell for splitting files and previewing split plans."""
from __future__ import annotations

import argparse
from pathlib import Path
from typing import Any, Dict

from common.config import load_runtime_config
from common.errors import BackendError
from common.models import RuntimeConfig, SplitProgress
from common.progress import ProgressLogger, TelemetryRecorder
from common.versioning import SPLITFILE_VERSION
from core.splitting import FileSplitter, SplitPlanner


def positive_int(value: str) -> int:
    try:
        number = int(value)
    except ValueError as exc:
        raise argparse.ArgumentTypeError(f"invalid integer value: '{value}'") from exc
    if number <= 0:
        raise argparse.ArgumentTypeError(f"must be greater than zero, got {number}")
    return number


def render_progress(progress: SplitProgress) -> None:
    rate = f" lines/s={progress.lines_per_second:,.0f}" if progress.lines_per_second else ""
    print(
        f"[split/progress] {progress.file_path.name} lines={progress.processed_lines}"
        f" chunk={progress.chunk_index} phase={progress.current_phase}{rate}"
    )


def resolve_runtime(args: argparse.Namespace) -> RuntimeConfig:
    profile_overrides: Dict[str, Any] = {}
    if args.lines is not None:
        profile_overrides["lines_per_chunk"] = args.lines
    if args.skip_first:
        profile_overrides["skip_first"] = True
    return load_runtime_config(
        profile=args.profile,
        config_path=Path(args.config) if args.config else None,
        overrides={"profile": profile_overrides},
    )


def command_split(args: argparse.Namespace) -> None:
    runtime = resolve_runtime(args)
    lines = runtime.profile.lines_per_chunk
    skip_first = runtime.profile.skip_first
    print(f"Splitting {args.file} into files of {lines} lines each")
    print(f"{1 if skip_first else 0} lines will be skipped")

    progress_logger = ProgressLogger(Path(args.progress_log)) if args.progress_log else None

    def on_progress(progress: SplitProgress) -> None:
        if args.verbose:
            render_progress(progress)
        if progress_logger:
            progress_logger.emit(progress)

    splitter = FileSplitter.from_config(runtime)
    print(f"Opening file: {args.file}")
    summary = splitter.split(args.file, progress_callback=on_progress)
    if args.telemetry_log:
        TelemetryRecorder(Path(args.telemetry_log)).record(summary)

    for output in summary.output_files:
        print(f"[split] wrote {output}")
    print(
        f"[split] lines_read={summary.lines_read} lines_written={summary.lines_written}"
        f" skipped={summary.lines_skipped} chunks={summary.chunk_count}"
        f" seconds={summary.duration_seconds:.2f}"
    )
    print("Done!")


def command_plan(args: argparse.Namespace) -> None:
    runtime = resolve_runtime(args)
    planner = SplitPlanner(runtime.profile.lines_per_chunk, skip_first=runtime.profile.skip_first)
    plan = planner.build_plan(args.file)
    print(
        f"[plan] {plan.input_path} total_lines={plan.total_lines}"
        f" post_skip_lines={plan.post_skip_lines} chunks={len(plan.entries)}"
    )
    for entry in plan.entries:
        print(f"[plan] {entry.output_path} lines={entry.line_count}")
    if args.output:
        output_path = Path(args.output)
        planner.write_plan(plan, output_path)
        print(f"[plan] saved to {output_path}")


def add_sizing_arguments(parser: argparse.ArgumentParser) -> None:
    parser.add_argument("-f", "--file", required=True, help="Input file to split")
    parser.add_argument(
        "-l",
        "--lines",
        type=positive_int,
        help="Lines per output file (defaults to the profile value, 1000 for 'default')",
    )
    parser.add_argument(
        "-s",
        "--skip-first",
        action="store_true",
        help="Drop the first line of the input (e.g., a CSV header)",
    )
    parser.add_argument(
        "--profile",
        default="default",
        help="Profile from config/defaults.json (e.g., default, csv, logs)",
    )
    parser.add_argument("--config", help="Alternative configuration JSON")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="splitfile",
        description="A useful utility for splitting files, and optionally removing the first header line.",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {SPLITFILE_VERSION}")
    subparsers = parser.add_subparsers(dest="command")

    split = subparsers.add_parser("split", help="Split a file into numbered chunk files")
    add_sizing_arguments(split)
    split.add_argument(
        "--progress-log",
        help="Path to JSONL file for structured progress events",
    )
    split.add_argument(
        "--telemetry-log",
        help="Optional JSONL file capturing per-split throughput",
    )
    split.add_argument("-v", "--verbose", action="store_true", help="Print progress events")
    split.set_defaults(func=command_split)

    plan = subparsers.add_parser("plan", help="Show the chunk files a split would produce")
    add_sizing_arguments(plan)
    plan.add_argument("--output", help="Path to write the plan as JSON")
    plan.set_defaults(func=command_plan)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    print(f"Splitfile utility v{SPLITFILE_VERSION}")
    print("")
    if not hasattr(args, "func"):
        parser.print_help()
        return 0
    try:
        args.func(args)
    except BackendError as exc:
        print(f"Error: {exc}")
        return 1
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
