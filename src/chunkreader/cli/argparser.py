"""Command-line argument parsing for chunkreader.

This module defines the command-line interface, converts human-readable sizes,
and maps the parsed arguments onto reader options.
"""

import argparse
from pathlib import Path
from typing import Any, Dict, Optional

from humanfriendly import InvalidSize
from humanfriendly import parse_size as humanfriendly_parse_size

from chunkreader import __version__
from chunkreader.separator import Separator


def parse_size(size_str: str) -> int:
    """Parse a human-readable byte count.

    Args:
        size_str: Size string like '64KiB', '1MB', '2.5K', or just '1024'.

    Returns:
        Size in bytes.

    Raises:
        argparse.ArgumentTypeError: If ``size_str`` is not a valid size.
    """
    try:
        return int(humanfriendly_parse_size(size_str, binary=False))
    except InvalidSize as e:
        raise argparse.ArgumentTypeError(f"Invalid size format '{size_str}': {e}")


def parse_hex_separator(value: str) -> bytes:
    """Parse a separator given as hexadecimal digits, e.g. '0d0a' or '0D 0A'.

    Raises:
        argparse.ArgumentTypeError: If the value is not an even number of hex digits
            or is empty.
    """
    try:
        separator = bytes.fromhex(value)
    except ValueError:
        raise argparse.ArgumentTypeError(f"Invalid hexadecimal separator '{value}'")
    if not separator:
        raise argparse.ArgumentTypeError("Separator must not be empty")
    return separator


def create_parser() -> argparse.ArgumentParser:
    """Create and configure the command-line argument parser.

    Returns:
        An ArgumentParser instance configured with chunkreader's options.
    """
    description = """
    chunkreader: Stream a file in fixed-size or separator-delimited chunks.

    The file is read with positional reads of a fixed size. With a separator, each
    chunk ends right after the next occurrence of the separator, however many reads
    that takes. Chunks are written unchanged (raw) or as JSON lines carrying the
    byte interval of every chunk.

    By default the file is watched while it is read, and the command fails if it
    changes underneath.
    """

    epilog = """
    Examples:
      # Dump a file in 4 KiB chunks as JSON lines
      chunkreader -c 4KiB -f json data.bin

      # Split a log on line feeds, dropping the line feed
      chunkreader -s lf -t -f json server.log

      # Split on a custom byte pattern
      chunkreader -x "ff d8" image-stream.bin

      # Skip a 512 byte header and print a summary to stderr
      chunkreader -O 512 -S stderr -o body.bin data.bin

      # Read a file that is still being written to
      chunkreader -W growing.log
    """

    parser = argparse.ArgumentParser(
        prog="chunkreader",
        description=description,
        epilog=epilog,
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )

    parser.add_argument(
        "-V", "--version", action="version", version=f"chunkreader {__version__}", help="Show the version and exit"
    )
    parser.add_argument("file", type=Path, help="The file to read.")
    parser.add_argument(
        "-c",
        "--chunk-size",
        type=parse_size,
        default=100,
        metavar="SIZE",
        help="Bytes per read, e.g. 100, 4KiB, 1MB (default: 100).",
    )
    parser.add_argument(
        "-O",
        "--start-offset",
        type=parse_size,
        default=0,
        metavar="SIZE",
        help="Byte offset to start reading at (default: 0).",
    )

    separator_group = parser.add_mutually_exclusive_group()
    separator_group.add_argument(
        "-s",
        "--separator",
        choices=["cr", "lf", "crlf", "nul"],
        help="Split chunks after this separator.",
    )
    separator_group.add_argument(
        "-x",
        "--separator-hex",
        type=parse_hex_separator,
        metavar="HEX",
        help="Split chunks after this byte pattern, given as hexadecimal digits.",
    )
    parser.add_argument(
        "-t",
        "--trim-separator",
        action="store_true",
        help="Remove the separator from the end of each chunk.",
    )
    parser.add_argument(
        "-W",
        "--no-watch",
        action="store_true",
        help="Do not fail when the file is modified while it is being read.",
    )
    parser.add_argument(
        "-p",
        "--poll-interval",
        type=int,
        default=1000,
        metavar="MS",
        help="Milliseconds between two modification checks (default: 1000, minimum: 10).",
    )
    parser.add_argument(
        "-f",
        "--format",
        choices=["raw", "json"],
        default="raw",
        help="Output format for chunks (default: raw).",
    )
    parser.add_argument(
        "-o",
        "--output",
        type=Path,
        metavar="FILE",
        help="Output file path. If not specified, output is written to stdout.",
    )
    parser.add_argument(
        "-S",
        "--summary",
        metavar="DEST",
        choices=["stderr", "stdout", "file"],
        help="Print summary report. Valid destinations: stderr, stdout, file (requires -o)",
    )

    return parser


def validate_args(args: argparse.Namespace) -> None:
    """Validate command-line arguments.

    Performs additional validation beyond what argparse can handle.

    Args:
        args: Parsed command-line arguments.

    Raises:
        ValueError: If any arguments fail validation.
    """
    if args.summary == "file" and not args.output:
        raise ValueError("--summary=file requires -o/--output to be specified")

    if args.trim_separator and args.separator is None and args.separator_hex is None:
        raise ValueError("-t/--trim-separator requires -s/--separator or -x/--separator-hex")


def reader_options(args: argparse.Namespace) -> Dict[str, Any]:
    """Translate parsed arguments into ``create_reader`` keyword options."""
    separator: Optional[bytes] = None
    if args.separator is not None:
        separator = Separator.from_name(args.separator)
    elif args.separator_hex is not None:
        separator = args.separator_hex

    return {
        "start_offset": args.start_offset,
        "chunk_size": args.chunk_size,
        "separator": separator,
        "trim_separator": args.trim_separator,
        "throw_on_file_modification": not args.no_watch,
        "file_modification_poll_interval": args.poll_interval,
    }
