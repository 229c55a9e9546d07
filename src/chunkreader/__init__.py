"""Chunked, separator-aware binary file reading.

This package provides a lazy iterator over the bytes of a file, read in
fixed-size chunks or split on a byte separator, with side-effect-free
look-ahead and optional detection of concurrent modification of the file.
"""

from importlib.metadata import PackageNotFoundError, version

from chunkreader.configuration import Configuration
from chunkreader.exceptions import ConfigurationError, FileAccessError, FileModifiedError, ReaderStateError
from chunkreader.io.buffered_file_reader import BufferedFileReader, ChunkCursor, ChunkRecord, create_reader
from chunkreader.separator import Separator

# Expose the version for both programmatic use and CLI
try:
    __version__ = version("chunkreader")
except PackageNotFoundError:
    __version__ = "unknown"

__all__ = [
    "BufferedFileReader",
    "ChunkCursor",
    "ChunkRecord",
    "Configuration",
    "ConfigurationError",
    "FileAccessError",
    "FileModifiedError",
    "ReaderStateError",
    "Separator",
    "create_reader",
]
