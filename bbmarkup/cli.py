"""Command-line interface for bbmarkup.

WHY: Archive maintainers want to inspect how a page body parses, render
it to HTML, or normalize it, straight from the terminal and from shell
scripts. The CLI wires file reading, parsing, the pluggable formatters,
and file saving behind a single command.

HOW: Uses argparse to accept an input file (or "-" for stdin), an output
format selection, a tag allow-list, and an output directory. Parses the
text once and runs every selected formatter over the same token tree.
Status messages go to stderr; output files are saved next to the source
(or to --output-dir), or a single format is printed with --stdout.

RULES:
- Positional argument: input file path, or "-" for stdin
- --formats: comma-separated formatter keys (default: all registered)
- --allow: comma-separated tag allow-list (default: BBMARKUP_ALLOWED_NAMES)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (page-tree-2.json)
- --stdout requires exactly one format and writes nothing to disk
- Status output goes to stderr (not stdout)
- Exit codes: 0 = success, 1 = error
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import List, Optional

from bbmarkup.config import (
    DEFAULT_ALLOWED_NAMES,
    LOG_FORMAT,
    LOG_LEVEL,
    MAX_NESTING_DEPTH,
    parse_allowed_names,
)
from bbmarkup.core.builder import parse_all
from bbmarkup.formatters import FORMATTERS
from bbmarkup.formatters.base import FormatterOutput

logger = logging.getLogger(__name__)


def _status(msg: str) -> None:
    """Print a status message to stderr so stdout can be piped."""
    print(msg, file=sys.stderr, flush=True)


def _fail(msg: str) -> None:
    print("Error: {}".format(msg), file=sys.stderr)
    sys.exit(1)


def _resolve_output_path(
    stem: str,
    suffix: str,
    output_dir: Path,
) -> Path:
    """Resolve the output file path, adding a numeric suffix on conflict.

    WHY: Users may run the tool repeatedly on the same page. Overwriting
    previous output would lose work.

    RULES:
    - First attempt: {stem}{suffix} (e.g. page12-tree.json)
    - Conflict: split suffix at last dot, insert counter before extension
      (e.g. page12-tree-2.json)
    - Counter starts at 2 and increments

    Args:
        stem: Source filename stem (without extension).
        suffix: Formatter's suffix (e.g. "-tree.json").
        output_dir: Directory to save the output file.

    Returns:
        A Path that does not yet exist.
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx > 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        # ".txt"/".html" style suffixes have no name part
        suffix_name = ""
        suffix_ext = suffix

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(output: FormatterOutput, stem: str, output_dir: Path) -> Path:
    """Write one formatter output as UTF-8 and return where it went."""
    path = _resolve_output_path(stem, output.suffix, output_dir)
    path.write_text(output.content, encoding="utf-8")
    return path


def _select_formats(value: Optional[str]) -> List[str]:
    if not value:
        return list(FORMATTERS.keys())
    keys = [f.strip() for f in value.split(",") if f.strip()]
    for key in keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            _fail("Unknown format '{}'. Available formats: {}".format(key, available))
    return keys


def _read_source(input_file: str) -> str:
    if input_file == "-":
        return sys.stdin.read()
    path = Path(input_file)
    if not path.is_file():
        _fail("File not found: {}".format(path))
    return path.read_text(encoding="utf-8")


def run(args: argparse.Namespace) -> None:
    """Parse the input once and run every selected formatter over it."""
    format_keys = _select_formats(args.formats)
    if args.stdout and len(format_keys) != 1:
        _fail("--stdout needs exactly one format (got {})".format(len(format_keys)))

    allowed = parse_allowed_names(args.allow) if args.allow is not None else DEFAULT_ALLOWED_NAMES

    source = _read_source(args.input_file)
    tokens = parse_all(source, allowed, MAX_NESTING_DEPTH)
    logger.info("Parsed %d chars into %d top-level tokens", len(source), len(tokens))

    if args.stdout:
        output = FORMATTERS[format_keys[0]]().format(tokens)[0]
        sys.stdout.write(output.content)
        return

    if args.input_file == "-":
        stem = "stdin"
        default_dir = Path.cwd()
    else:
        input_path = Path(args.input_file).resolve()
        stem = input_path.stem
        default_dir = input_path.parent

    output_dir = Path(args.output_dir).resolve() if args.output_dir else default_dir
    if not output_dir.is_dir():
        _fail("Output directory does not exist: {}".format(output_dir))

    saved_files: List[Path] = []
    for key in format_keys:
        formatter = FORMATTERS[key]()
        _status("  Running {} formatter...".format(formatter.name))
        for output in formatter.format(tokens):
            saved_path = _save_output(output, stem, output_dir)
            saved_files.append(saved_path)
            _status("  Saved: {}".format(saved_path.name))

    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable: tests can inspect the parser without running anything.
    """
    parser = argparse.ArgumentParser(
        prog="bbmarkup",
        description="Parse bracket markup and write it out as normalized markup, "
                    "a JSON token tree, HTML, or plain text.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the markup file, or '-' to read standard input.",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all.".format(", ".join(sorted(FORMATTERS.keys()))),
    )

    parser.add_argument(
        "--allow",
        default=None,
        help="Comma-separated tag names to recognise; other brackets stay text. "
             "Default: BBMARKUP_ALLOWED_NAMES, or every valid name.",
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as input file).",
    )

    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Print the single selected format to stdout instead of saving files.",
    )

    return parser


def main(argv: Optional[List[str]] = None) -> None:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    """
    logging.basicConfig(level=LOG_LEVEL, format=LOG_FORMAT)
    parser = build_parser()
    args = parser.parse_args(argv)
    run(args)


if __name__ == "__main__":
    main()
