"""Polling-based detection of changes to a file while it is being read.

Change detection compares file metadata, not content: rewriting a file with
identical bytes still counts as a change because its modification time moves.
"""

import os
from threading import Event, Lock, Thread, current_thread
from typing import Callable, Dict, NamedTuple, Optional, Protocol, runtime_checkable

from chunkreader.types import PathType

ChangeCallback = Callable[[], None]


class FileSnapshot(NamedTuple):
    """The metadata compared between two polls."""

    mtime_ns: int
    size: int
    inode: int


def take_snapshot(path: PathType) -> Optional[FileSnapshot]:
    """Stat a file and return the metadata used for change detection.

    Returns:
        The snapshot, or None if the file does not exist (anymore).
    """
    try:
        st = os.stat(path)
    except FileNotFoundError:
        return None
    return FileSnapshot(st.st_mtime_ns, st.st_size, st.st_ino)


@runtime_checkable
class ModificationObserver(Protocol):
    """Protocol for an object that reports changes to watched files."""

    def watch(self, path: PathType, interval_ms: int, on_change: ChangeCallback) -> None:
        """Start reporting changes of ``path`` to ``on_change``, checking every ``interval_ms``."""
        ...

    def unwatch(self, path: PathType) -> None:
        """Stop watching ``path``. Unknown paths are ignored."""
        ...


class _PollingTask:
    """A single watched path, polled on its own daemon thread."""

    def __init__(self, path: PathType, interval_ms: int, on_change: ChangeCallback) -> None:
        self.path = path
        self.interval = interval_ms / 1000.0
        self.on_change = on_change
        self.stopped = Event()
        self._last = take_snapshot(path)
        self._thread = Thread(target=self._run, name=f"chunkreader-watch:{os.fspath(path)}", daemon=True)

    def start(self) -> None:
        self._thread.start()

    def stop(self) -> None:
        self.stopped.set()
        # Never join from inside the callback running on the polling thread
        if self._thread.is_alive() and self._thread is not current_thread():
            self._thread.join()

    def poll(self) -> bool:
        """Compare the current metadata with the previous poll.

        Returns:
            True if a change was detected and reported.
        """
        current = take_snapshot(self.path)
        if current == self._last:
            return False
        self._last = current
        self.on_change()
        return True

    def _run(self) -> None:
        while not self.stopped.wait(self.interval):
            self.poll()


class PollingModificationWatcher:
    """Watches files by periodically comparing their stat metadata.

    Each watched path gets a daemon thread that wakes up every ``interval_ms``
    milliseconds, stats the file, and invokes the registered callback when the
    modification time, size, or inode differ from the previous poll. A file that
    disappears is reported as a change as well.

    The callback runs on the polling thread, so it should do no more than set a
    flag (a ``threading.Event``, for instance).

    Example:
        >>> from threading import Event
        >>> changed = Event()
        >>> watcher = PollingModificationWatcher()
        >>> watcher.watch("data.bin", 100, changed.set)  # doctest: +SKIP
        >>> watcher.unwatch("data.bin")  # doctest: +SKIP
    """

    def __init__(self) -> None:
        self._tasks: Dict[str, _PollingTask] = {}
        self._lock = Lock()

    def watch(self, path: PathType, interval_ms: int, on_change: ChangeCallback) -> None:
        """Start polling ``path``.

        The baseline metadata is captured synchronously, so any change after this
        call returns is eventually reported.

        Args:
            path: The file to watch.
            interval_ms: Milliseconds between two polls. Must be positive.
            on_change: Called once per detected change.

        Raises:
            ValueError: If ``interval_ms`` is not positive.
        """
        if interval_ms <= 0:
            raise ValueError(f"interval_ms must be > 0, got {interval_ms}")

        key = os.fspath(path)
        task = _PollingTask(path, interval_ms, on_change)
        with self._lock:
            previous = self._tasks.pop(key, None)
            self._tasks[key] = task
        if previous is not None:
            previous.stop()
        task.start()

    def unwatch(self, path: PathType) -> None:
        """Stop polling ``path``. Does nothing if the path is not watched."""
        with self._lock:
            task = self._tasks.pop(os.fspath(path), None)
        if task is not None:
            task.stop()
