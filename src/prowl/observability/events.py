"""Event model for preview observability.

All events are frozen dataclasses with:
- ``timestamp_ns``: Monotonic nanosecond timestamp
- Descriptive fields for the specific event type

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import asdict, dataclass
from typing import Literal, TypeAlias


@dataclass(frozen=True, slots=True)
class DocumentRendered:
    """The target was read and rendered into a new snapshot.

    Attributes:
        path: Absolute path to the document.
        title: Title guessed from the rendered HTML.
        source_bytes: Size of the Markdown source.
        html_bytes: Size of the sanitized HTML.
        render_ms: Time spent rendering in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    title: str
    source_bytes: int
    html_bytes: int
    render_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class SnapshotBroadcast:
    """A snapshot was pushed to the connected viewers.

    Attributes:
        delivered: Sessions that accepted the message.
        dropped: Sessions removed because delivery failed.
        duration_ms: Time spent delivering in milliseconds.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    delivered: int
    dropped: int
    duration_ms: float
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class SessionEvent:
    """A viewer session opened, closed, or was dropped.

    Attributes:
        client_id: Session identifier.
        kind: What happened to the session.
        reason: Failure text for dropped sessions.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    client_id: str
    kind: Literal["opened", "closed", "dropped"]
    reason: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class WatchFailure:
    """The watcher or a re-render hit a recoverable error.

    Attributes:
        path: The watched document.
        message: Error text.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    path: str
    message: str
    timestamp_ns: int


PreviewEvent: TypeAlias = DocumentRendered | SnapshotBroadcast | SessionEvent | WatchFailure


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()


EVENT_TYPES: dict[str, type] = {
    cls.__name__: cls
    for cls in (DocumentRendered, SnapshotBroadcast, SessionEvent, WatchFailure)
}


def event_to_dict(event: PreviewEvent) -> dict[str, object]:
    """JSON-ready form of *event*, tagged with its class name."""
    return {"type": type(event).__name__, **asdict(event)}
