"""Entry point for ``python -m pic_schedule``.

Subcommands:
    scan   -- Default. Read events from an image and save them.
    parse  -- Run the text extractor over a text file and print JSON.

Exit codes:
    0 -- Success (including zero events found).
    1 -- An error occurred (file not found, invalid image, config error).
    2 -- Argument parsing error (handled by argparse).
"""

from __future__ import annotations

import argparse
import json
import sys
from pathlib import Path

from pic_schedule.config import ConfigError
from pic_schedule.exceptions import InvalidImageError
from pic_schedule.extractor import extract_events
from pic_schedule.log import setup_logging
from pic_schedule.pipeline import run_scan
from pic_schedule.report import print_scan_result

_SUBCOMMANDS = {"scan", "parse"}


def build_parser() -> argparse.ArgumentParser:
    """Build the CLI argument parser with ``scan`` and ``parse``."""
    parser = argparse.ArgumentParser(
        prog="pic-schedule",
        description="Turn photos of schedules and flyers into calendar events.",
    )
    subparsers = parser.add_subparsers(dest="command")

    scan_parser = subparsers.add_parser(
        "scan",
        help="Read events from an image and save them to Google Calendar.",
    )
    scan_parser.add_argument("image", type=str, help="Path to the image file.")
    scan_parser.add_argument(
        "--dry-run",
        action="store_true",
        default=False,
        help="Extract and show events but do not save them.",
    )
    scan_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )

    parse_parser = subparsers.add_parser(
        "parse",
        help="Extract events from a text file and print them as JSON.",
    )
    parse_parser.add_argument(
        "text_file",
        nargs="?",
        default="-",
        help="Path to the text file (default: read stdin).",
    )
    parse_parser.add_argument(
        "-v",
        "--verbose",
        action="store_true",
        default=False,
        help="Enable debug-level logging.",
    )

    return parser


def _resolve_command(
    parser: argparse.ArgumentParser,
    argv: list[str],
) -> argparse.Namespace:
    """Parse *argv*, routing to ``scan`` when no subcommand is given.

    ``pic-schedule flyer.png`` and ``pic-schedule --dry-run flyer.png``
    behave like ``pic-schedule scan ...``.
    """
    if not argv:
        argv = ["scan"]
    elif argv[0] in {"-h", "--help"}:
        pass
    elif argv[0] not in _SUBCOMMANDS:
        argv = ["scan", *argv]
    return parser.parse_args(argv)


def _handle_scan(args: argparse.Namespace) -> int:
    try:
        result = run_scan(Path(args.image), dry_run=args.dry_run)
    except (FileNotFoundError, PermissionError, InvalidImageError, ConfigError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        return 1

    print_scan_result(result)
    return 0


def _handle_parse(args: argparse.Namespace) -> int:
    if args.text_file == "-":
        text = sys.stdin.read()
    else:
        path = Path(args.text_file)
        if not path.is_file():
            print(f"Error: File not found: {path}", file=sys.stderr)
            return 1
        try:
            text = path.read_text(encoding="utf-8")
        except (PermissionError, UnicodeDecodeError) as exc:
            print(f"Error: Cannot read {path}: {exc}", file=sys.stderr)
            return 1

    records = extract_events(text)
    json.dump([r.to_json_dict() for r in records], sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


def main(argv: list[str] | None = None) -> int:
    """Run the pic-schedule CLI and return the exit code."""
    parser = build_parser()
    args = _resolve_command(parser, argv if argv is not None else sys.argv[1:])

    setup_logging("DEBUG" if getattr(args, "verbose", False) else "INFO")

    if args.command == "parse":
        return _handle_parse(args)
    return _handle_scan(args)


if __name__ == "__main__":
    raise SystemExit(main())
