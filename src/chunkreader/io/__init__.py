"""File access, change detection, and the chunked reader built on top of them."""

from chunkreader.io.buffered_file_reader import BufferedFileReader, ChunkCursor, ChunkRecord, create_reader, read_chunk
from chunkreader.io.file_source import FileSource, LocalFileSource
from chunkreader.io.modification_watcher import ModificationObserver, PollingModificationWatcher

__all__ = [
    "BufferedFileReader",
    "ChunkCursor",
    "ChunkRecord",
    "FileSource",
    "LocalFileSource",
    "ModificationObserver",
    "PollingModificationWatcher",
    "create_reader",
    "read_chunk",
]
