#!/usr/bin/env python3
"""Entry point for the docblocks CLI."""

from __future__ import annotations

import argparse
import difflib
import json
import logging
import sys
from pathlib import Path
from textwrap import dedent
from typing import Iterable, Optional, Tuple

from docblocks import __version__
from docblocks.app.sync import BlockSyncService, SyncReport, export_registry
from docblocks.app.sync.output import FORMATS
from docblocks.domain.blocks.errors import BlockSyncError, SyncConfigError
from docblocks.domain.blocks.events import RegionStatus
from docblocks.domain.blocks.value_objects import split_lines
from docblocks.settings import LOG_LEVELS, RuntimeSettings, load_settings
from docblocks.utils.config import SyncConfig, load_config

EXIT_OK = 0
EXIT_FAILURE = 1
EXIT_USAGE = 2

LOG_FORMAT = "%(levelname)s %(name)s: %(message)s"

HELP_OVERVIEW = dedent(
    """
    Keep documentation examples in sync with tagged source code.

    Source blocks:
      // START <id:adding_numbers>
      fn add_numbers(a: i32, b: i32) -> i32 { a + b }
      // END

    Documentation regions:
      <!-- adding_numbers -->
      (replaced with the block content)
      <!-- adding_numbers -->

    Commands:
      - docblocks collect [PATH]                 - print every collected block
      - docblocks replace SRC [DOCS]             - rewrite regions in place
      - docblocks replace --check SRC [DOCS]     - fail when documentation drifted
    """
)


def _configure_logging(level: str) -> None:
    logging.basicConfig(format=LOG_FORMAT, stream=sys.stderr)
    logging.getLogger("docblocks").setLevel(getattr(logging, level))


def _prepare(args: argparse.Namespace) -> Tuple[Optional[BlockSyncService], int]:
    settings: RuntimeSettings = load_settings()
    _configure_logging(getattr(args, "log_level", None) or settings.log_level)
    config_arg = getattr(args, "config", None)
    try:
        config = load_config(Path(config_arg) if config_arg else None)
    except SyncConfigError as exc:
        print(f"docblocks: {exc.message}", file=sys.stderr)
        if exc.remediation:
            print(f"  remediation: {exc.remediation}", file=sys.stderr)
        return None, EXIT_USAGE
    jobs = getattr(args, "jobs", None) or config.jobs or settings.jobs
    return BlockSyncService(config, jobs=jobs), EXIT_OK


def _print_errors(errors: Iterable[BlockSyncError]) -> None:
    for error in errors:
        where = f"{error.location} " if error.path is not None else ""
        print(f"error: {where}[{error.code}] {error.message}", file=sys.stderr)
        if error.remediation:
            print(f"  remediation: {error.remediation}", file=sys.stderr)


def _collect_cmd(args: argparse.Namespace) -> int:
    service, code = _prepare(args)
    if service is None:
        return code
    root = Path(args.path)
    try:
        result = service.collect(root)
    except BlockSyncError as exc:
        _print_errors([exc])
        return EXIT_FAILURE
    if not result.ok:
        _print_errors(result.errors)
        return EXIT_FAILURE
    if not result.registry:
        print(f"docblocks collect: no blocks found under {root}", file=sys.stderr)
        return EXIT_FAILURE

    output = Path(args.output).expanduser() if args.output else None
    try:
        written = export_registry(result.registry, fmt=args.format, output=output, stream=sys.stdout)
    except BlockSyncError as exc:
        _print_errors([exc])
        return EXIT_FAILURE
    except OSError as exc:
        print(f"docblocks collect: export failed: {exc}", file=sys.stderr)
        return EXIT_FAILURE
    for path in written:
        logging.getLogger(__name__).info("wrote %s", path)
    return EXIT_OK


def _replace_cmd(args: argparse.Namespace) -> int:
    service, code = _prepare(args)
    if service is None:
        return code
    collect_root = Path(args.collect_folder)
    doc_root = Path(args.doc_folder) if args.doc_folder else collect_root
    try:
        report = service.replace(collect_root, doc_root, check=args.check)
    except BlockSyncError as exc:
        _print_errors([exc])
        return EXIT_FAILURE

    if args.json:
        print(json.dumps(report.as_dict(), ensure_ascii=False, indent=2))
    else:
        _print_replace_report(report)
        _print_errors(report.errors)
    return EXIT_FAILURE if report.failed else EXIT_OK


def _print_replace_report(report: SyncReport) -> None:
    mode = "check" if report.check else "replace"
    print(f"docblocks {mode}: status={'error' if report.failed else 'ok'}")
    for outcome in report.outcomes:
        print(f"  {outcome.status.value:<12} {outcome.id:<24} {outcome.path}:{outcome.line}")
        if outcome.status is RegionStatus.WOULD_CHANGE:
            diff = difflib.unified_diff(
                split_lines(outcome.actual or ""),
                split_lines(outcome.expected or ""),
                fromfile=f"{outcome.path} (current)",
                tofile=f"{outcome.id} (source)",
                lineterm="",
            )
            for line in diff:
                print(f"      {line}")
    summary = report.summary()
    counts = " ".join(f"{status.value}={summary[status.value]}" for status in RegionStatus)
    print(f"summary: {counts} documents={summary['documents']} written={summary['written']}")


def _positive_int(value: str) -> int:
    number = int(value)
    if number < 1:
        raise argparse.ArgumentTypeError("must be a positive integer")
    return number


def _common_options() -> argparse.ArgumentParser:
    common = argparse.ArgumentParser(add_help=False)
    common.add_argument(
        "--log-level",
        type=str.upper,
        choices=LOG_LEVELS,
        default=argparse.SUPPRESS,
        help="Log verbosity (default: WARNING or $DOCBLOCKS_LOG_LEVEL)",
    )
    common.add_argument(
        "-c",
        "--config",
        default=argparse.SUPPRESS,
        help="YAML configuration (include/exclude globs, marker syntax overrides)",
    )
    common.add_argument(
        "-j",
        "--jobs",
        type=_positive_int,
        default=argparse.SUPPRESS,
        help="Worker threads for file scanning (default: CPU count or $DOCBLOCKS_JOBS)",
    )
    return common


def build_parser() -> argparse.ArgumentParser:
    common = _common_options()
    parser = argparse.ArgumentParser(
        prog="docblocks",
        description=HELP_OVERVIEW,
        formatter_class=argparse.RawTextHelpFormatter,
        parents=[common],
    )
    parser.add_argument("--version", action="version", version=f"docblocks {__version__}")

    sub = parser.add_subparsers(dest="command", required=True)

    collect_cmd = sub.add_parser("collect", help="Collect documentation blocks", parents=[common])
    collect_cmd.add_argument("path", nargs="?", default=".", help="Source tree to scan (default: current directory)")
    collect_cmd.add_argument("-o", "--output", help="Write results to this file or folder instead of stdout")
    collect_cmd.add_argument("-f", "--format", choices=FORMATS, help="Export ids, contents and origins as JSON/YAML")
    collect_cmd.set_defaults(func=_collect_cmd)

    replace_cmd = sub.add_parser(
        "replace",
        help="Collect blocks and replace documentation regions",
        parents=[common],
    )
    replace_cmd.add_argument("collect_folder", metavar="COLLECT-FOLDER", help="Source tree to collect blocks from")
    replace_cmd.add_argument(
        "doc_folder",
        metavar="DOC-FOLDER",
        nargs="?",
        help="Documentation tree to update (default: COLLECT-FOLDER)",
    )
    replace_cmd.add_argument(
        "--check",
        "--dry-run",
        dest="check",
        action="store_true",
        help="Report drift without writing; exit non-zero when any region differs",
    )
    replace_cmd.add_argument("--json", action="store_true", help="Emit a machine-readable report")
    replace_cmd.set_defaults(func=_replace_cmd)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
