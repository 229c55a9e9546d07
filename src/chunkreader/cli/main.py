"""Command-line interface for chunkreader.

This module streams the chunks of a single file to stdout or to an output file,
either as raw bytes or as JSON lines that carry the byte interval of each chunk.

Signal Handling Notes:
    - SIGPIPE: Handled when the output pipe is closed (e.g., when piping to `head`) on Unix-like systems
    - SIGINT: Handled for clean exit on Ctrl+C
    In both cases the reader is closed, releasing the file and its modification watcher.

Exit Codes:
    0: Successful completion
    1: Runtime error during execution (including modification of the file while reading)
    2: Command-line syntax error
    126: Permission denied
    130: Interrupted by SIGINT (Ctrl+C)
    141: Broken pipe (SIGPIPE) on Unix-like systems

Example:
    # Split a file on CRLF and show each line with its byte interval
    $ chunkreader -s crlf -t -f json data.txt

    # Display version information
    $ chunkreader --version
"""

import base64
import json
import sys
from collections.abc import Mapping

from chunkreader.cli.argparser import create_parser, reader_options, validate_args
from chunkreader.cli.safe_writer import SafeWriter
from chunkreader.cli.signal_handler import setup_signal_handling, signal_handler
from chunkreader.io.buffered_file_reader import ChunkRecord, create_reader


def format_record(record: ChunkRecord, output_format: str) -> bytes:
    """Render one chunk for output.

    Args:
        record: The chunk to render.
        output_format: "raw" for the chunk bytes unchanged, "json" for one JSON object
            per line with the cursor interval, base64-encoded data and the length of
            that data, which excludes a trimmed separator.

    Returns:
        The bytes to write.
    """
    if output_format == "raw":
        return record.data
    line = json.dumps(
        {
            "start": record.cursor.start,
            "end": record.cursor.end,
            "length": len(record.data),
            "data": base64.b64encode(record.data).decode("ascii"),
        }
    )
    return (line + "\n").encode("utf-8")


def format_counts(counts: Mapping[str, int]) -> str:
    """Format the counts into a human-readable string."""
    return "\n".join(
        [
            f"Chunks: {counts['chunks']}",
            f"Bytes: {counts['bytes']}",
        ]
    )


def main() -> None:
    """Main entry point for the chunkreader command-line interface.

    Exit codes:
        0: Successful completion
        1: Runtime error during execution
        2: Command-line syntax error
        126: Permission denied
        130: Interrupted by SIGINT (Ctrl+C)
        141: Broken pipe (SIGPIPE) on Unix-like systems
    """
    setup_signal_handling()

    try:
        parser = create_parser()
        args = parser.parse_args()

        # Perform additional validation beyond what argparse supports directly
        validate_args(args)

        try:
            reader = create_reader(args.file, **reader_options(args))

            output_file = args.output if args.output else sys.stdout.fileno()

            with reader, SafeWriter(output_file) as safe_writer:
                counts = {"chunks": 0, "bytes": 0}
                try:
                    for record in reader:
                        safe_writer.write(format_record(record, args.format))
                        counts["chunks"] += 1
                        counts["bytes"] += record.cursor.length

                    if args.summary:
                        count_output_str = format_counts(counts)
                        if args.summary in ("stdout", "file"):
                            safe_writer.write("\n" + count_output_str + "\n")
                        elif args.summary == "stderr":
                            print(count_output_str, file=sys.stderr)

                except BrokenPipeError:
                    pass  # Leaving the with block closes the reader and the writer

        except PermissionError as e:
            print(f"Error: {str(e)}", file=sys.stderr)
            sys.exit(126)

    except Exception as e:
        print(f"Error: {str(e)}", file=sys.stderr)
        sys.exit(1)

    # Handle exit codes based on received signals
    exit_code = signal_handler.exit_code()
    if exit_code is not None:
        sys.exit(exit_code)


if __name__ == "__main__":
    main()
