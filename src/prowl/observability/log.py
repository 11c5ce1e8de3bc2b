"""Event log — the bounded in-memory record behind ``/__prowl/stats``.

Thread Safety:
    The watcher thread records failures while the event loop records
    renders and sessions, so every access goes through one lock.
"""

import threading
from collections import Counter, deque
from typing import Any

from prowl.observability.events import PreviewEvent


class EventLog:
    """Keeps the last ``max_events`` events; older ones fall off the end.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 1_000) -> None:
        self._max_events = max_events
        self._events: deque[PreviewEvent] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: PreviewEvent) -> None:
        with self._lock:
            self._events.append(event)

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def events(
        self,
        *,
        kind: str | None = None,
        since_ns: int = 0,
        limit: int = 50,
    ) -> list[PreviewEvent]:
        """Newest-first events, optionally narrowed.

        Args:
            kind: Event class name, e.g. ``"SessionEvent"``.
            since_ns: Skip events at or before this timestamp.
            limit: Cap on the number returned.

        """
        with self._lock:
            snapshot = list(self._events)
        matches = (
            event for event in reversed(snapshot)
            if (kind is None or type(event).__name__ == kind)
            and event.timestamp_ns > since_ns
        )
        return [event for _, event in zip(range(limit), matches)]

    def stats(self) -> dict[str, Any]:
        """Totals per event class plus the buffer size."""
        with self._lock:
            counts = Counter(type(event).__name__ for event in self._events)
            total = len(self._events)
        return {"total": total, "max_events": self._max_events, "by_type": dict(counts)}
