"""Tests for prowl.observability — events, log and collector."""

from __future__ import annotations

import threading

import pytest

from prowl.observability import (
    EVENT_TYPES,
    DocumentRendered,
    EventLog,
    PreviewCollector,
    SessionEvent,
    SnapshotBroadcast,
    WatchFailure,
    event_to_dict,
    now_ns,
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _failure(path: str = "/docs/notes.md", ts: int = 0) -> WatchFailure:
    return WatchFailure(path=path, message="boom", timestamp_ns=ts or now_ns())


# ---------------------------------------------------------------------------
# Tests
# ---------------------------------------------------------------------------


class TestEvents:
    """Event dataclasses."""

    def test_frozen(self) -> None:
        event = _failure()
        with pytest.raises(AttributeError):
            event.message = "other"  # type: ignore[misc]

    def test_now_ns_monotonic(self) -> None:
        assert now_ns() <= now_ns()


class TestEventLog:
    """EventLog storage and filtering."""

    def test_append_and_len(self) -> None:
        log = EventLog()
        log.append(_failure())
        assert len(log) == 1

    def test_bounded(self) -> None:
        log = EventLog(max_events=3)
        for i in range(5):
            log.append(_failure(path=f"/p{i}"))
        assert len(log) == 3
        assert [e.path for e in log.events()] == ["/p4", "/p3", "/p2"]

    def test_newest_first(self) -> None:
        log = EventLog()
        log.append(_failure(path="/old"))
        log.append(_failure(path="/new"))
        assert [e.path for e in log.events()] == ["/new", "/old"]

    def test_filter_by_kind(self) -> None:
        log = EventLog()
        log.append(_failure())
        log.append(SnapshotBroadcast(delivered=1, dropped=0, duration_ms=0.1, timestamp_ns=now_ns()))
        events = log.events(kind="SnapshotBroadcast")
        assert len(events) == 1
        assert isinstance(events[0], SnapshotBroadcast)

    def test_unknown_kind_matches_nothing(self) -> None:
        log = EventLog()
        log.append(_failure())
        assert log.events(kind="Nope") == []

    def test_since_is_exclusive(self) -> None:
        log = EventLog()
        log.append(_failure(path="/early", ts=100))
        log.append(_failure(path="/edge", ts=150))
        log.append(_failure(path="/late", ts=200))
        assert [e.path for e in log.events(since_ns=150)] == ["/late"]

    def test_limit(self) -> None:
        log = EventLog()
        for i in range(10):
            log.append(_failure(path=f"/p{i}"))
        assert [e.path for e in log.events(limit=2)] == ["/p9", "/p8"]
        assert log.events(limit=0) == []

    def test_stats(self) -> None:
        log = EventLog(max_events=10)
        log.append(_failure())
        log.append(_failure())
        log.append(SnapshotBroadcast(delivered=1, dropped=0, duration_ms=0.1, timestamp_ns=now_ns()))
        assert log.stats() == {
            "total": 3,
            "max_events": 10,
            "by_type": {"WatchFailure": 2, "SnapshotBroadcast": 1},
        }

    def test_concurrent_appends(self) -> None:
        log = EventLog(max_events=10_000)

        def worker() -> None:
            for _ in range(500):
                log.append(_failure())

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()
        assert len(log) == 2_000


class TestEventToDict:
    """JSON form of events for the stats endpoint."""

    def test_tagged_with_type(self) -> None:
        event = SessionEvent(client_id="c1", kind="dropped", reason="timeout", timestamp_ns=7)
        assert event_to_dict(event) == {
            "type": "SessionEvent",
            "client_id": "c1",
            "kind": "dropped",
            "reason": "timeout",
            "timestamp_ns": 7,
        }

    def test_event_types_cover_every_event(self) -> None:
        assert set(EVENT_TYPES) == {
            "DocumentRendered", "SnapshotBroadcast", "SessionEvent", "WatchFailure",
        }


class TestPreviewCollector:
    """PreviewCollector recording helpers."""

    def test_default_log(self) -> None:
        assert isinstance(PreviewCollector().log, EventLog)

    def test_record_render(self) -> None:
        collector = PreviewCollector()
        collector.record_render(
            "/docs/notes.md", title="Notes", source_bytes=10, html_bytes=20, render_ms=1.5,
        )
        event = collector.log.events(limit=1)[0]
        assert isinstance(event, DocumentRendered)
        assert event.title == "Notes"
        assert event.html_bytes == 20

    def test_record_broadcast(self) -> None:
        collector = PreviewCollector()
        collector.record_broadcast(delivered=3, dropped=1, duration_ms=2.0)
        event = collector.log.events(limit=1)[0]
        assert isinstance(event, SnapshotBroadcast)
        assert (event.delivered, event.dropped) == (3, 1)

    def test_record_session(self) -> None:
        collector = PreviewCollector()
        collector.record_session("abc", "dropped", reason="timeout")
        event = collector.log.events(limit=1)[0]
        assert isinstance(event, SessionEvent)
        assert (event.client_id, event.kind, event.reason) == ("abc", "dropped", "timeout")

    def test_record_watch_failure(self) -> None:
        collector = PreviewCollector()
        collector.record_watch_failure("/docs/notes.md", "permission denied")
        event = collector.log.events(limit=1)[0]
        assert isinstance(event, WatchFailure)
        assert event.message == "permission denied"

    def test_shared_log(self) -> None:
        log = EventLog()
        PreviewCollector(log).record_broadcast()
        assert len(log) == 1
