"""Validated, immutable options for a buffered file reader."""

from dataclasses import dataclass, fields
from typing import Any, Optional

from chunkreader.exceptions import ConfigurationError
from chunkreader.types import ByteSequence

MINIMUM_POLL_INTERVAL = 10  # milliseconds


def _require_int(field: str, value: Any) -> int:
    # bool is an int subclass but never a meaningful size or offset
    if isinstance(value, bool) or not isinstance(value, int):
        raise ConfigurationError(field, value, "must be an integer")
    return value


def _require_bool(field: str, value: Any) -> bool:
    if not isinstance(value, bool):
        raise ConfigurationError(field, value, "must be a boolean")
    return value


@dataclass(frozen=True)
class Configuration:
    """Options controlling how a file is split into chunks.

    All values are checked when the instance is created, so a configuration that
    exists is always valid. The instance cannot be modified afterwards.

    Attributes:
        start_offset: Byte offset of the first read. Bytes before it are skipped.
        chunk_size: Number of bytes requested per read. Without a separator this is
            also the size of every chunk except possibly the last one.
        separator: Byte pattern that ends a chunk, or None to split on size only.
            With a separator, chunks may be shorter or longer than ``chunk_size``.
        trim_separator: Remove the separator from the end of returned chunks. Always
            False when no separator is configured.
        throw_on_file_modification: Fail the next step if the file changes while it
            is being read.
        file_modification_poll_interval: Milliseconds between two metadata polls of
            the modification watcher. At least 10.

    Raises:
        ConfigurationError: If any value violates its constraint.

    Example:
        >>> config = Configuration(chunk_size=4, separator=b"\\n", trim_separator=True)
        >>> config.chunk_size, config.separator, config.trim_separator
        (4, b'\\n', True)
        >>> Configuration(trim_separator=True).trim_separator
        False
    """

    start_offset: int = 0
    chunk_size: int = 100
    separator: Optional[ByteSequence] = None
    trim_separator: bool = False
    throw_on_file_modification: bool = True
    file_modification_poll_interval: int = 1000

    def __post_init__(self) -> None:
        start_offset = _require_int("start_offset", self.start_offset)
        if start_offset < 0:
            raise ConfigurationError("start_offset", start_offset, "must be >= 0")

        chunk_size = _require_int("chunk_size", self.chunk_size)
        if chunk_size <= 0:
            raise ConfigurationError("chunk_size", chunk_size, "must be > 0")

        poll_interval = _require_int("file_modification_poll_interval", self.file_modification_poll_interval)
        if poll_interval < MINIMUM_POLL_INTERVAL:
            raise ConfigurationError(
                "file_modification_poll_interval", poll_interval, f"must be >= {MINIMUM_POLL_INTERVAL}"
            )

        _require_bool("trim_separator", self.trim_separator)
        _require_bool("throw_on_file_modification", self.throw_on_file_modification)

        separator = self.separator
        if separator is not None:
            # str would need an encoding, which is the caller's business
            if not isinstance(separator, (bytes, bytearray, memoryview)):
                raise ConfigurationError("separator", separator, "must be a byte sequence")
            separator = bytes(separator)
            if len(separator) == 0:
                raise ConfigurationError("separator", separator, "must not be empty")

        # Frozen dataclass: normalised values have to bypass __setattr__
        object.__setattr__(self, "separator", separator)
        if separator is None:
            object.__setattr__(self, "trim_separator", False)

    @classmethod
    def from_options(cls, **options: Any) -> "Configuration":
        """Build a configuration from keyword options.

        Args:
            **options: Any of the configuration field names.

        Returns:
            The validated configuration.

        Raises:
            ConfigurationError: If an option name is not recognised or a value is invalid.
        """
        known = {f.name for f in fields(cls)}
        for name, value in options.items():
            if name not in known:
                raise ConfigurationError(name, value, "unknown option")
        return cls(**options)
