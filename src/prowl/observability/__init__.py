"""Observability — what the preview server has been doing.

Records renders, broadcasts, session churn and recoverable failures as
frozen events with nanosecond timestamps, safe to produce from the watcher
thread and the event loop alike.

Quick Start:
    >>> from prowl.observability import EventLog, PreviewCollector
    >>> collector = PreviewCollector(EventLog())
    >>> collector.record_broadcast(delivered=2)
    >>> collector.log.stats()["total"]
    1

"""

from prowl.observability.collector import PreviewCollector
from prowl.observability.events import (
    EVENT_TYPES,
    DocumentRendered,
    PreviewEvent,
    SessionEvent,
    SnapshotBroadcast,
    WatchFailure,
    event_to_dict,
    now_ns,
)
from prowl.observability.log import EventLog

__all__ = [
    "EVENT_TYPES",
    "DocumentRendered",
    "EventLog",
    "PreviewCollector",
    "PreviewEvent",
    "SessionEvent",
    "SnapshotBroadcast",
    "WatchFailure",
    "event_to_dict",
    "now_ns",
]
