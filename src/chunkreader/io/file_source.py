"""Positional access to a local file.

The reader depends only on the small ``FileSource`` protocol defined here, so an
alternative source (an in-memory buffer in tests, for example) can be injected.
"""

import os
import sys
from typing import BinaryIO, Callable, Optional, Protocol, runtime_checkable

from chunkreader.types import PathType


@runtime_checkable
class FileSource(Protocol):
    """Protocol for a readable, randomly addressable byte source."""

    def read_at(self, length: int, offset: int) -> bytes:
        """Return up to ``length`` bytes starting at absolute ``offset``.

        Fewer bytes than requested are returned only when the end of the source is
        reached; an empty result means ``offset`` is at or past the end.
        """
        ...

    def close(self) -> None:
        """Release the underlying resource. Calling it twice is allowed."""
        ...


# Callable used by the reader to open a source for a path
SourceFactory = Callable[[PathType], FileSource]

# Upper bound of a single os.pread request
MAX_RAW_READ = 1 << 20


class LocalFileSource:
    """Unbuffered, positional reader for a file on the local filesystem.

    The file is opened in the constructor, so errors such as ``FileNotFoundError``,
    ``IsADirectoryError`` or ``PermissionError`` are raised unchanged to whoever
    creates the source.

    Offsets beyond what the operating system can address are treated as past the
    end of the file. Large requests are served by several raw reads of at most
    ``MAX_RAW_READ`` bytes each.

    Attributes:
        path: The path the source was opened from.

    Example:
        >>> with LocalFileSource("data.bin") as source:  # doctest: +SKIP
        ...     header = source.read_at(16, 0)
    """

    def __init__(self, path: PathType) -> None:
        self.path = path
        self._file: Optional[BinaryIO] = open(path, "rb", buffering=0)

    @property
    def closed(self) -> bool:
        return self._file is None

    def read_at(self, length: int, offset: int) -> bytes:
        """Return up to ``length`` bytes starting at absolute ``offset``.

        Args:
            length: Maximum number of bytes to return.
            offset: Absolute position of the first byte.

        Returns:
            The bytes read. The result is shorter than ``length`` only at end of file.

        Raises:
            ValueError: If the source is closed or the arguments are negative.
            OSError: If the underlying read fails.
        """
        if self._file is None:
            raise ValueError("Cannot read from closed LocalFileSource")
        if length < 0 or offset < 0:
            raise ValueError(f"Invalid read of {length} bytes at offset {offset}")

        parts = []
        remaining = length
        position = offset
        # A raw read may return less than asked for; only an empty read is end of file
        while remaining > 0:
            request = min(remaining, MAX_RAW_READ, sys.maxsize - position)
            if request <= 0:
                break
            data = self._pread(request, position)
            if not data:
                break
            parts.append(data)
            remaining -= len(data)
            position += len(data)

        return b"".join(parts)

    def _pread(self, length: int, offset: int) -> bytes:
        assert self._file is not None
        if hasattr(os, "pread"):
            return os.pread(self._file.fileno(), length, offset)
        self._file.seek(offset)
        return self._file.read(length) or b""

    def close(self) -> None:
        """Close the file. Subsequent calls do nothing."""
        if self._file is not None:
            try:
                self._file.close()
            finally:
                self._file = None

    def __enter__(self) -> "LocalFileSource":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()
