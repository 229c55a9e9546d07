"""Chunked, separator-aware iteration over the bytes of a file."""

import os
import weakref
from dataclasses import dataclass, field
from threading import Event, Lock
from typing import Any, Callable, Iterator, List, Optional

from chunkreader.configuration import Configuration
from chunkreader.exceptions import FileModifiedError, ReaderStateError
from chunkreader.io.file_source import FileSource, LocalFileSource, SourceFactory
from chunkreader.io.modification_watcher import ModificationObserver, PollingModificationWatcher
from chunkreader.separator import find_separator, trim_separator
from chunkreader.types import PathType


@dataclass(frozen=True)
class ChunkCursor:
    """Half-open byte interval ``[start, end)`` consumed by one iteration step.

    The interval counts the bytes the cursor moved over, so it includes a trimmed
    separator even though the separator is missing from the returned data.
    """

    start: int
    end: int

    @property
    def length(self) -> int:
        return self.end - self.start


@dataclass(frozen=True)
class ChunkRecord:
    """One chunk of a file together with its position.

    Attributes:
        cursor: The interval of the file the chunk was read from.
        data: The chunk bytes, without the separator when trimming is enabled.
    """

    cursor: ChunkCursor
    data: bytes
    _peek: Callable[[int], Optional["ChunkRecord"]] = field(repr=False, compare=False)

    def peek_next(self) -> Optional["ChunkRecord"]:
        """Read the chunk following this one without advancing the reader.

        The result is the record the reader would produce for its next step if its
        cursor stood at ``self.cursor.end``. It can be called any number of times,
        also after the reader has moved on, and always returns the same record as
        long as the file is unchanged. Peeked records can be peeked again.

        Returns:
            The next record, or None if this chunk ends the file.

        Raises:
            ReaderStateError: If the reader's file is not open (anymore).
            OSError: If the underlying read fails.
        """
        return self._peek(self.cursor.end)


def read_chunk(source: FileSource, config: Configuration, offset: int) -> bytes:
    """Read the raw chunk that starts at ``offset``.

    Without a separator this is a single read of ``chunk_size`` bytes. With a
    separator, windows of ``chunk_size + len(separator)`` bytes are read until the
    separator is found or the file ends. Consecutive windows overlap by
    ``len(separator)`` bytes, so an occurrence straddling two reads is still found;
    the overlapping bytes are kept only once in the result.

    The function has no side effects on the reader, which is what makes peeking
    safe.

    Args:
        source: The open file.
        config: The reader configuration.
        offset: Absolute position of the first byte of the chunk.

    Returns:
        The chunk bytes including the separator, if one was found. An empty result
        means ``offset`` is at or past the end of the file.
    """
    separator = config.separator
    if separator is None:
        return source.read_at(config.chunk_size, offset)

    separator_length = len(separator)
    window = config.chunk_size + separator_length
    parts: List[bytes] = []
    position = offset
    while True:
        data = source.read_at(window, position)
        index = find_separator(data, separator)
        if index >= 0:
            parts.append(data[: index + separator_length])
            break
        if len(data) < window:
            # File ended before the separator; return what is left as is
            parts.append(data)
            break
        # Keep the tail for the next window; it may hold the start of the separator
        parts.append(data[:-separator_length])
        position += window - separator_length
    return b"".join(parts)


class _ReaderResources:
    """File handle and watch registration of one reader.

    Held apart from the reader so that a finalizer can release them without
    keeping the reader itself alive.
    """

    def __init__(self, file_path: PathType, watcher: Optional[ModificationObserver]) -> None:
        self.file_path = file_path
        self.watcher = watcher
        self.source: Optional[FileSource] = None
        self.watching = False

    def release(self) -> None:
        """Stop watching and close the file. Subsequent calls do nothing."""
        watching, self.watching = self.watching, False
        source, self.source = self.source, None
        try:
            if watching and self.watcher is not None:
                self.watcher.unwatch(self.file_path)
        finally:
            if source is not None:
                source.close()


class BufferedFileReader:
    """Iterator over the chunks of a file.

    The reader opens the file lazily on the first step and produces one
    ``ChunkRecord`` per ``next()`` call. It either cuts the file into pieces of
    ``chunk_size`` bytes, or, with a separator configured, into pieces that end
    right after each occurrence of the separator (optionally with the separator
    removed). Reads are positional, so the cursor bookkeeping is exact and peeking
    at later chunks never disturbs the iteration.

    When ``throw_on_file_modification`` is enabled, a modification watcher polls the
    file's metadata in the background; the step following a detected change raises
    ``FileModifiedError``.

    The file and the watcher are released when the iteration is exhausted, when an
    error is raised, or when ``close()`` is called, whichever comes first. A reader
    that is dropped without being closed, such as one left by ``break`` in a
    ``for`` loop, releases them when it is garbage collected. The reader is also a
    context manager.

    Iteration may be started only once: a second ``iter()`` raises
    ``ReaderStateError``. Calling ``next()`` directly does not count as starting, so
    a few records can be pulled by hand before handing the reader to a loop.

    The reader is meant to be driven by a single caller; a ``next()`` issued while
    another one is still running raises ``ReaderStateError`` as well.

    Args:
        file_path: Path of the file to read.
        config: Reader options. Defaults to ``Configuration()``.
        watcher: Observer used for modification detection. Defaults to a new
            ``PollingModificationWatcher``.
        source_factory: Callable opening a ``FileSource`` for a path. Defaults to
            ``LocalFileSource``.

    Example:
        >>> from chunkreader import Separator, create_reader
        >>> with create_reader("log.txt", separator=Separator.LF) as reader:  # doctest: +SKIP
        ...     for record in reader:
        ...         handle(record.cursor.start, record.data)
    """

    def __init__(
        self,
        file_path: PathType,
        config: Optional[Configuration] = None,
        watcher: Optional[ModificationObserver] = None,
        source_factory: Optional[SourceFactory] = None,
    ) -> None:
        self._file_path = file_path
        self._config = config if config is not None else Configuration()
        self._source_factory: SourceFactory = source_factory if source_factory is not None else LocalFileSource
        self._cursor = self._config.start_offset
        self._started = False
        self._finished = False
        self._modified = Event()
        self._step_lock = Lock()
        self._resources = _ReaderResources(file_path, watcher)
        weakref.finalize(self, self._resources.release)

    @classmethod
    def create(cls, file_path: PathType, **options: Any) -> "BufferedFileReader":
        """Create a reader from keyword options.

        Args:
            file_path: Path of the file to read. It is not opened yet.
            **options: Configuration fields, see ``Configuration``.

        Returns:
            A reader that has not started iterating.

        Raises:
            ConfigurationError: If an option is unknown or invalid.
        """
        return cls(file_path, Configuration.from_options(**options))

    @property
    def file_path(self) -> PathType:
        return self._file_path

    @property
    def config(self) -> Configuration:
        return self._config

    @property
    def cursor(self) -> int:
        """Byte offset of the next unread byte."""
        return self._cursor

    @property
    def is_open(self) -> bool:
        return self._resources.source is not None

    @property
    def finished(self) -> bool:
        return self._finished

    def __iter__(self) -> Iterator[ChunkRecord]:
        """Begin iteration.

        Raises:
            ReaderStateError: If iteration has already been started.
        """
        self._begin()
        return self

    def __next__(self) -> ChunkRecord:
        """Read the next chunk and advance the cursor.

        Returns:
            The next record.

        Raises:
            StopIteration: When the end of the file is reached.
            FileModifiedError: If the file changed since reading started.
            ReaderStateError: If another ``next()`` on this reader is still running.
            OSError: If the file cannot be opened or read.
        """
        if not self._step_lock.acquire(blocking=False):
            raise ReaderStateError("Concurrent next() calls on the same reader are not supported")
        try:
            if self._finished:
                raise StopIteration
            return self._step()
        finally:
            self._step_lock.release()

    def peek(self, cursor: int) -> Optional[ChunkRecord]:
        """Read the chunk starting at ``cursor`` without moving the reader.

        Args:
            cursor: Absolute byte offset to read from.

        Returns:
            The record a step from ``cursor`` would produce, or None at end of file.

        Raises:
            ReaderStateError: If the file is not open.
            OSError: If the underlying read fails.
        """
        source = self._resources.source
        if source is None:
            raise ReaderStateError("Handle not opened")
        raw = read_chunk(source, self._config, cursor)
        if not raw:
            return None
        return self._make_record(cursor, raw)

    def close(self) -> None:
        """Release the file and stop the modification watcher.

        Safe to call at any time and any number of times; resources that were never
        acquired are simply skipped. After closing, the iteration is finished.
        """
        self._finished = True
        self._resources.release()

    def __enter__(self) -> "BufferedFileReader":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.close()

    def _begin(self) -> None:
        if self._started:
            raise ReaderStateError("Reader iteration has already been started")
        self._started = True

    def _step(self) -> ChunkRecord:
        try:
            if self._resources.source is None:
                self._open_handle()
            source = self._resources.source
            assert source is not None

            if self._config.throw_on_file_modification and self._modified.is_set():
                raise FileModifiedError(os.fspath(self._file_path))

            raw = read_chunk(source, self._config, self._cursor)
        except BaseException:
            self.close()
            raise

        if not raw:
            self.close()
            raise StopIteration

        start = self._cursor
        self._cursor = start + len(raw)
        return self._make_record(start, raw)

    def _make_record(self, start: int, raw: bytes) -> ChunkRecord:
        data = raw
        if self._config.separator is not None and self._config.trim_separator:
            data = trim_separator(raw, self._config.separator)
        return ChunkRecord(cursor=ChunkCursor(start, start + len(raw)), data=data, _peek=self.peek)

    def _open_handle(self) -> None:
        resources = self._resources
        if resources.source is not None:
            raise ReaderStateError("Handle already opened")
        resources.source = self._source_factory(self._file_path)
        if self._config.throw_on_file_modification:
            if resources.watcher is None:
                resources.watcher = PollingModificationWatcher()
            # The callback must not reference the reader, or the finalizer would never run
            resources.watcher.watch(self._file_path, self._config.file_modification_poll_interval, self._modified.set)
            resources.watching = True


def create_reader(file_path: PathType, **options: Any) -> BufferedFileReader:
    """Create a chunked reader for a file.

    Nothing is opened until the first ``next()``. Options are validated right away.

    Args:
        file_path: Path of the file to read.
        **options: Configuration fields: ``start_offset``, ``chunk_size``,
            ``separator``, ``trim_separator``, ``throw_on_file_modification``,
            ``file_modification_poll_interval``.

    Returns:
        A reader that has not started iterating.

    Raises:
        ConfigurationError: If an option is unknown or invalid.

    Example:
        >>> reader = create_reader("data.bin", chunk_size=4)  # doctest: +SKIP
        >>> [record.data for record in reader]  # doctest: +SKIP
        [b'abcd', b'ef']
    """
    return BufferedFileReader.create(file_path, **options)
