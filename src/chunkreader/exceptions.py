from typing import Any

FileAccessError = OSError
"""Failures opening or reading the source file.

Filesystem errors are not wrapped: they surface as the native ``OSError``
subclass raised by the operating system call, so ``errno`` and the exception
class (``FileNotFoundError``, ``IsADirectoryError``, ``PermissionError``, ...)
stay intact. ``FileAccessError`` is provided so callers can name the category.

Example:
    >>> issubclass(FileNotFoundError, FileAccessError)
    True
"""


class ConfigurationError(ValueError):
    """
    Exception raised when a reader option is missing, unknown, or out of range.

    The error is raised synchronously at construction time, before any file is
    opened. Callers are expected to fix their input; it is never retried.

    Attributes:
        field (str): Name of the offending configuration field.
        value (Any): The rejected value.

    Example:
        >>> error = ConfigurationError("chunk_size", 0, "must be > 0")
        >>> str(error)
        'Invalid chunk_size: must be > 0, got 0'
        >>> error.field
        'chunk_size'
    """

    def __init__(self, field: str, value: Any, reason: str) -> None:
        """
        Initialize the exception with the field, the rejected value, and the reason.

        Args:
            field (str): Name of the offending configuration field.
            value (Any): The rejected value.
            reason (str): Human-readable constraint that was violated.
        """
        self.field = field
        self.value = value
        super().__init__(f"Invalid {field}: {reason}, got {value!r}")


class ReaderStateError(RuntimeError):
    """
    Exception raised when a reader is used in a way its lifecycle does not allow.

    Examples are beginning iteration a second time, opening a handle that is already
    open, peeking without an open handle, or calling ``next()`` while another call on
    the same reader is still in flight.

    Example:
        >>> error = ReaderStateError("Reader iteration has already been started")
        >>> str(error)
        'Reader iteration has already been started'
    """

    pass


class FileModifiedError(RuntimeError):
    """
    Exception raised when the source file changes while it is being read.

    Raised by the reader on the first step after its modification watcher reported
    a change, provided ``throw_on_file_modification`` is enabled. The reader is
    finished after this error.

    Attributes:
        file_path (str): Path to the file that was modified.

    Example:
        >>> error = FileModifiedError("/path/to/data.bin")
        >>> str(error)
        "File '/path/to/data.bin' has been modified while processing"
    """

    def __init__(self, file_path: str) -> None:
        """
        Initialize the exception with the path to the modified file.

        Args:
            file_path (str): Path to the file that was modified.
        """
        self.file_path = file_path
        super().__init__(f"File '{file_path}' has been modified while processing")
