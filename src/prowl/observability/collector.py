"""Preview collector — one place for the pipeline, registry and watcher to
record what happened.

Thread Safety:
    The collector delegates to ``EventLog`` which is internally locked, so
    the watcher thread can record alongside the event loop.

"""

from __future__ import annotations

from prowl.observability.events import (
    DocumentRendered,
    SessionEvent,
    SnapshotBroadcast,
    WatchFailure,
    now_ns,
)
from prowl.observability.log import EventLog


class PreviewCollector:
    """Typed recording helpers on top of an EventLog.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def record_render(
        self,
        path: str,
        *,
        title: str,
        source_bytes: int = 0,
        html_bytes: int = 0,
        render_ms: float = 0.0,
    ) -> None:
        """Record a successful read + render."""
        self._log.append(
            DocumentRendered(
                path=path,
                title=title,
                source_bytes=source_bytes,
                html_bytes=html_bytes,
                render_ms=render_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_broadcast(
        self,
        *,
        delivered: int = 0,
        dropped: int = 0,
        duration_ms: float = 0.0,
    ) -> None:
        """Record a snapshot broadcast."""
        self._log.append(
            SnapshotBroadcast(
                delivered=delivered,
                dropped=dropped,
                duration_ms=duration_ms,
                timestamp_ns=now_ns(),
            )
        )

    def record_session(self, client_id: str, kind: str, *, reason: str = "") -> None:
        """Record a session lifecycle change."""
        self._log.append(
            SessionEvent(
                client_id=client_id,
                kind=kind,  # type: ignore[arg-type]
                reason=reason,
                timestamp_ns=now_ns(),
            )
        )

    def record_watch_failure(self, path: str, message: str) -> None:
        """Record a recoverable watch or read failure."""
        self._log.append(WatchFailure(path=path, message=message, timestamp_ns=now_ns()))
