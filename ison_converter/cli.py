"""Command-line interface for the ISON Converter.

WHY: Users need a simple way to convert files between ISON, ISONL and
JSON from the terminal. The CLI wires together format detection,
parsing into the Document model, pluggable formatter output, and file
saving behind a single command.

HOW: Uses argparse to accept an input file, an optional explicit input
format, output format selection, output directory and delimiter. Status
messages go to stderr; output files are saved next to the source (or to
--output-dir), or the single selected format is written to stdout.

RULES:
- Positional argument: input file path
- Input format comes from --from, else from the file extension
- --formats: comma-separated formatter keys (default: every format
  except the input's own)
- Output naming: {stem}{suffix}, numeric suffix for conflicts (users-2.json)
- The input file is never overwritten
- --stdout requires exactly one output format
- Status output goes to stderr (not stdout); errors exit with status 1
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path
from typing import List, Optional

from ison_converter import __version__
from ison_converter.config import configure_logging, default_dump_options, detect_format
from ison_converter.core.convert import READERS, get_formatter, parse_text
from ison_converter.core.files import read_file, write_file
from ison_converter.errors import IsonError
from ison_converter.formatters import FORMATTERS
from ison_converter.formatters.base import FormatterOutput


class CLIError(Exception):
    """A user-facing error that ends the run with exit status 1."""


def _status(msg: str) -> None:
    """Print a status message to stderr.

    WHY: Status output must not pollute stdout so the CLI can be piped.
    """
    print(msg, file=sys.stderr, flush=True)


def _resolve_output_path(
    stem: str,
    suffix: str,
    output_dir: Path,
) -> Path:
    """Resolve the output file path, adding numeric suffix on conflict.

    WHY: Users may run the converter multiple times on the same file, and
    a JSON input converted to ".json" would otherwise land on itself.
    Numeric suffixes (users-2.json) prevent data loss.

    HOW: Check if {stem}{suffix} exists. If so, increment a counter
    and insert it before the file extension until a free name is found.

    RULES:
    - First attempt: {stem}{suffix} (e.g. users.isonl)
    - Conflict: insert counter before the extension (e.g. users-2.isonl)
    - Counter starts at 2 and increments

    Args:
        stem: Source filename stem (without extension).
        suffix: Formatter's suffix (e.g. ".isonl").
        output_dir: Directory to save the output file.

    Returns:
        A Path that does not yet exist.
    """
    base_path = output_dir / "{}{}".format(stem, suffix)
    if not base_path.exists():
        return base_path

    dot_idx = suffix.rfind(".")
    if dot_idx >= 0:
        suffix_name = suffix[:dot_idx]
        suffix_ext = suffix[dot_idx:]
    else:
        suffix_name = suffix
        suffix_ext = ""

    counter = 2
    while True:
        candidate = output_dir / "{}{}-{}{}".format(stem, suffix_name, counter, suffix_ext)
        if not candidate.exists():
            return candidate
        counter += 1


def _save_output(
    output: FormatterOutput,
    stem: str,
    output_dir: Path,
) -> Path:
    """Save a single formatter output to a conflict-free path and return it."""
    path = _resolve_output_path(stem, output.suffix, output_dir)
    write_file(path, output.content)
    return path


def _select_formats(raw: Optional[str], source_format: str) -> List[str]:
    if not raw:
        return [key for key in FORMATTERS if key != source_format]
    format_keys = [f.strip() for f in raw.split(",") if f.strip()]
    for key in format_keys:
        if key not in FORMATTERS:
            available = ", ".join(sorted(FORMATTERS.keys()))
            raise CLIError("Unknown format '{}'. Available formats: {}".format(key, available))
    if not format_keys:
        raise CLIError("No output formats selected")
    return format_keys


def _run(args: argparse.Namespace) -> None:
    """Execute one conversion run.

    RULES:
    - Validate input and output paths before reading anything
    - Status messages to stderr at each step
    - With --stdout nothing is written to disk
    """
    input_path = Path(args.input_file).resolve()
    if not input_path.is_file():
        raise CLIError("File not found: {}".format(input_path))

    source_format = args.source_format or detect_format(input_path)
    if source_format is None:
        raise CLIError(
            "Cannot detect the format of '{}'. Use --from with one of: {}".format(
                input_path.name, ", ".join(sorted(READERS))
            )
        )

    output_dir = Path(args.output_dir).resolve() if args.output_dir else input_path.parent
    if not args.stdout and not output_dir.is_dir():
        raise CLIError("Output directory does not exist: {}".format(output_dir))

    format_keys = _select_formats(args.formats, source_format)
    if args.stdout and len(format_keys) != 1:
        raise CLIError("--stdout needs exactly one format (use --formats)")

    options = default_dump_options(args.delimiter)

    _status("Reading {} ({})...".format(input_path.name, source_format))
    document = parse_text(read_file(input_path), source_format)
    _status("  {} block(s), {} row(s)".format(
        len(document), sum(block.row_count for block in document)
    ))

    if args.stdout:
        output = get_formatter(format_keys[0]).format(document, options)
        sys.stdout.write(output.content)
        sys.stdout.flush()
        return

    saved_files: List[Path] = []
    for key in format_keys:
        formatter = get_formatter(key)
        _status("  Running {} formatter...".format(formatter.name))
        output = formatter.format(document, options)
        saved_path = _save_output(output, input_path.stem, output_dir)
        saved_files.append(saved_path)
        _status("  Saved: {}".format(saved_path.name))

    _status("")
    _status("Done! Saved {} file(s) to {}".format(len(saved_files), output_dir))


def build_parser() -> argparse.ArgumentParser:
    """Build the argparse parser for the CLI.

    WHY: Separating parser construction from main() makes the CLI
    testable: tests can inspect the parser without running a conversion.
    """
    parser = argparse.ArgumentParser(
        prog="ison-convert",
        description="Convert documents between ISON, ISONL and JSON.",
    )

    parser.add_argument(
        "input_file",
        help="Path to the .ison, .isonl or .json file to convert.",
    )

    parser.add_argument(
        "--from",
        dest="source_format",
        choices=sorted(READERS),
        default=None,
        help="Input format (default: detected from the file extension).",
    )

    parser.add_argument(
        "--formats",
        default=None,
        help="Comma-separated list of output formats. "
             "Available: {}. Default: all except the input format.".format(
                 ", ".join(sorted(FORMATTERS.keys()))
             ),
    )

    parser.add_argument(
        "--output-dir",
        default=None,
        help="Directory to save output files (default: same as input file).",
    )

    parser.add_argument(
        "--delimiter",
        default=None,
        help="Token separator for ISON output; '\\t' means tab (default: space).",
    )

    parser.add_argument(
        "--stdout",
        action="store_true",
        help="Write the single selected format to stdout instead of a file.",
    )

    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging (skipped lines, ignored rows).",
    )

    parser.add_argument(
        "--version",
        action="version",
        version="%(prog)s {}".format(__version__),
    )

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Entry point for the CLI.

    RULES:
    - argv=None means use sys.argv (normal CLI invocation)
    - Explicit argv is for testing
    - Returns the process exit status
    """
    parser = build_parser()
    args = parser.parse_args(argv)
    configure_logging("DEBUG" if args.verbose else None)

    try:
        _run(args)
    except (CLIError, IsonError) as exc:
        print("Error: {}".format(exc), file=sys.stderr)
        return 1
    except KeyboardInterrupt:
        _status("\nCancelled by user.")
        return 130
    return 0


if __name__ == "__main__":
    sys.exit(main())
