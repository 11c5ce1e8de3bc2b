"""File watcher — triggers a re-render when the target document is written.

Watches the directory that contains the document rather than the file
itself, so editors that save by writing a temp file and renaming it over the
original keep triggering updates.  Every raw event is resolved to an absolute
path and compared with the canonical target; everything else in the
directory is ignored.
"""

from __future__ import annotations

import asyncio
import os
import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from watchfiles import Change

from prowl._errors import WatchError

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from prowl._types import ChangeKind
    from prowl.config import ProwlConfig
    from prowl.observability.collector import PreviewCollector


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """A qualifying write to the target document.

    Attributes:
        path: Resolved absolute path of the written file.
        kind: Type of filesystem change.

    """

    path: Path
    kind: ChangeKind


# Deletions never trigger a render: there is nothing to read.
_CHANGE_KIND_MAP: dict[Change, ChangeKind] = {
    Change.added: "created",
    Change.modified: "modified",
}

# How long a quiet watch waits before yielding an empty batch.  The first
# yield, empty or not, proves the OS watch is in place.
_READY_TIMEOUT_MS = 500
_RETRY_DELAY = 1.0


def qualifying_change(change: Change, raw_path: str, target: Path) -> ChangeEvent | None:
    """Turn a raw watchfiles change into a ChangeEvent, or None if irrelevant.

    Relevant means: an added or modified file whose resolved path is the
    target.  Comparing resolved paths rather than names copes with relative
    paths and symlinks.

    """
    kind = _CHANGE_KIND_MAP.get(change)
    if kind is None:
        return None
    path = Path(raw_path).resolve()
    if path != target:
        return None
    return ChangeEvent(path=path, kind=kind)


class DocumentWatcher:
    """Watches the target document and queues ChangeEvents for the pipeline.

    watchfiles runs in a background thread; qualifying events are handed to
    the consuming event loop with ``call_soon_threadsafe``.  Events that
    arrive before anything iterates ``changes()`` are buffered, so a save
    between startup and the first request is not lost.

    Args:
        config: Resolved ProwlConfig (target and watch directories).
        collector: Optional event collector for watch failures.

    """

    def __init__(
        self,
        config: ProwlConfig,
        collector: PreviewCollector | None = None,
    ) -> None:
        self._config = config
        self._collector = collector
        self._queue: asyncio.Queue[ChangeEvent] = asyncio.Queue()
        self._loop: asyncio.AbstractEventLoop | None = None
        self._pending: list[ChangeEvent] = []
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._ready = threading.Event()
        self._setup_error: BaseException | None = None
        self._thread: threading.Thread | None = None

    @property
    def is_running(self) -> bool:
        """Whether the watcher background thread is active."""
        return self._thread is not None and self._thread.is_alive()

    def start(self, timeout: float = 10.0) -> None:
        """Start watching and block until the OS watch is established.

        Raises:
            WatchError: If a watched directory is missing or unreadable, or
                the watch backend fails before its first batch.

        """
        if self.is_running:
            return

        for directory in self._config.watch_dirs:
            if not directory.is_dir():
                msg = f"Cannot watch {directory}: not a directory"
                raise WatchError(msg)
            if not os.access(directory, os.R_OK | os.X_OK):
                msg = f"Cannot watch {directory}: permission denied"
                raise WatchError(msg)

        self._stop_event.clear()
        self._ready.clear()
        self._setup_error = None
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="prowl-watcher",
            daemon=True,
        )
        self._thread.start()

        if not self._ready.wait(timeout):
            self.stop()
            msg = f"Timed out establishing a watch on {self._config.target.parent}"
            raise WatchError(msg)

        if self._setup_error is not None:
            error = self._setup_error
            self.stop()
            msg = f"Cannot watch {self._config.target.parent}: {error}"
            raise WatchError(msg) from error

    def stop(self) -> None:
        """Signal the watcher to stop and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    async def changes(self) -> AsyncIterator[ChangeEvent]:
        """Async iterator that yields ChangeEvents in arrival order.

        Ends once the watcher has been stopped and the queue is drained.

        """
        with self._lock:
            self._loop = asyncio.get_running_loop()
            pending, self._pending = self._pending, []
        for event in pending:
            self._queue.put_nowait(event)

        while self.is_running or not self._queue.empty():
            try:
                event = await asyncio.wait_for(self._queue.get(), timeout=0.5)
            except TimeoutError:
                continue
            yield event

    def _emit(self, event: ChangeEvent) -> None:
        """Hand an event to the consuming loop (called from the watcher thread)."""
        with self._lock:
            loop = self._loop
            if loop is None:
                self._pending.append(event)
                return
        try:
            loop.call_soon_threadsafe(self._queue.put_nowait, event)
        except RuntimeError:
            # Consumer loop already closed: the server is shutting down.
            self._stop_event.set()

    def _watch_loop(self) -> None:
        """Background thread: run watchfiles, restarting after backend errors."""
        from watchfiles import watch

        target = self._config.target
        dirs = self._config.watch_dirs

        while not self._stop_event.is_set():
            try:
                for raw_changes in watch(
                    *dirs,
                    watch_filter=None,
                    stop_event=self._stop_event,
                    debounce=self._config.debounce_ms,
                    step=50,
                    rust_timeout=_READY_TIMEOUT_MS,
                    yield_on_timeout=True,
                    raise_interrupt=False,
                    recursive=False,
                ):
                    self._ready.set()
                    for change_type, path_str in raw_changes:
                        event = qualifying_change(change_type, path_str, target)
                        if event is not None:
                            self._emit(event)
            except Exception as exc:
                if not self._ready.is_set():
                    self._setup_error = exc
                    self._ready.set()
                    return
                print(f"  Watch error: {exc}", file=sys.stderr)
                if self._collector is not None:
                    self._collector.record_watch_failure(str(target), str(exc))
                self._stop_event.wait(_RETRY_DELAY)
