"""Signal-aware output for the chunkreader CLI.

Chunks are written as raw bytes, so the writer goes straight to the file
descriptor and never through a text layer.
"""

import errno
import os
import types
from pathlib import Path
from typing import BinaryIO, Optional, Type, Union

from chunkreader.cli.signal_handler import signal_handler


class SafeWriter:
    """Writes text or bytes to a file descriptor while watching for interruptions.

    Attributes:
        file: The file descriptor or path the writer was created with.
        fd: The file descriptor being written to.
        bytes_written: Running total of bytes written.
    """

    def __init__(self, file: Union[int, str, Path]):
        """Initialize the safe writer.

        Args:
            file: A file descriptor (int) or a path to create/truncate.

        Raises:
            TypeError: If ``file`` is neither a descriptor nor a path.
        """
        self.file = file
        self.bytes_written = 0
        self._closed = False
        self._file_obj: Optional[BinaryIO] = None

        if isinstance(file, int):
            self.fd = file
        elif isinstance(file, (str, os.PathLike)):
            self._file_obj = Path(file).open("wb")
            self.fd = self._file_obj.fileno()
        else:
            raise TypeError(f"Expected int, str, or PathLike, got {type(file).__name__}")

    def write(self, data: Union[str, bytes]) -> None:
        """Write all of ``data``, encoding text as UTF-8.

        Args:
            data: Text or bytes to write.

        Raises:
            BrokenPipeError: If SIGPIPE/SIGINT was received or the pipe is broken.
            OSError: If another I/O error occurs during writing.
            ValueError: If the writer is closed.
        """
        if self._closed:
            raise ValueError("Cannot write to closed SafeWriter")

        if signal_handler.interrupted():
            raise BrokenPipeError()

        payload = data.encode("utf-8") if isinstance(data, str) else data
        view = memoryview(payload)
        try:
            # os.write may accept only part of the buffer for pipes
            while view:
                written = os.write(self.fd, view)
                self.bytes_written += written
                view = view[written:]
        except OSError as e:
            if e.errno == errno.EPIPE:
                raise BrokenPipeError()
            raise

    def close(self) -> None:
        """Close the file if this writer opened it.

        The writer is marked closed even when closing fails with a broken pipe.
        """
        if self._closed:
            return

        if self._file_obj is not None:
            try:
                self._file_obj.close()
            except OSError as e:
                if e.errno != errno.EPIPE:
                    raise

        self._closed = True

    def __enter__(self) -> "SafeWriter":
        return self

    def __exit__(
        self,
        exc_type: Optional[Type[BaseException]],
        exc_val: Optional[BaseException],
        exc_tb: Optional[types.TracebackType],
    ) -> None:
        """Close the writer, letting an exception from the with block win over a close error."""
        try:
            self.close()
        except OSError:
            if exc_type is None:
                raise
