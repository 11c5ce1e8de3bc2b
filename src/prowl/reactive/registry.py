"""Session registry — tracks connected viewers and fans snapshots out to them.

Every viewer is a ``Session``: something with a ``client_id`` and an async
``send``.  The registry owns the set of sessions and the commit of new
snapshots into the shared ``DocumentState``; both happen under one
``asyncio.Lock`` so a viewer that connects while a broadcast is in flight
gets either the old snapshot followed by the new one, or the new one
directly.
"""

from __future__ import annotations

import asyncio
import sys
import time
import uuid
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prowl._types import ClientID, Message
    from prowl.document.snapshot import DocumentSnapshot, DocumentState
    from prowl.observability.collector import PreviewCollector


class Session:
    """A connected viewer.

    Subclasses implement ``send`` for their transport.  ``close`` is called
    when the registry gives up on a session and at shutdown.

    """

    def __init__(self, client_id: ClientID | None = None) -> None:
        self.client_id: ClientID = client_id or uuid.uuid4().hex

    async def send(self, message: Message) -> None:
        raise NotImplementedError

    async def close(self) -> None:
        return None

    def __repr__(self) -> str:
        return f"{type(self).__name__}({self.client_id!r})"


@dataclass(frozen=True, slots=True)
class BroadcastResult:
    """Outcome of one broadcast.

    Attributes:
        delivered: Number of sessions that accepted the snapshot.
        dropped: Sessions removed because delivery failed or timed out.

    """

    delivered: int
    dropped: tuple[ClientID, ...] = ()


class SessionRegistry:
    """Owns the viewer sessions and the commit of new snapshots.

    Sessions are keyed by ``client_id``, so removal is O(1) no matter how
    often viewers come and go.  Each delivery runs under its own timeout and
    all deliveries of a broadcast run concurrently: a stalled viewer costs
    at most ``send_timeout`` and never blocks delivery to the others.

    ``register`` holds the lock while the welcome is sent, so a new viewer
    that stalls on its welcome delays the next broadcast by up to
    ``send_timeout``.

    Args:
        state: The shared document state new snapshots are committed to.
        send_timeout: Seconds a single session may take to accept a message.
        collector: Optional event collector.

    """

    def __init__(
        self,
        state: DocumentState,
        *,
        send_timeout: float = 5.0,
        collector: PreviewCollector | None = None,
    ) -> None:
        self._state = state
        self._send_timeout = send_timeout
        self._collector = collector
        self._sessions: dict[ClientID, Session] = {}
        self._lock = asyncio.Lock()
        self._closing: set[asyncio.Task[None]] = set()

    @property
    def state(self) -> DocumentState:
        """The document state this registry commits to."""
        return self._state

    @property
    def session_count(self) -> int:
        """Number of currently registered sessions."""
        return len(self._sessions)

    def get_sessions(self) -> tuple[Session, ...]:
        """Snapshot of the registered sessions."""
        return tuple(self._sessions.values())

    async def register(self, session: Session) -> bool:
        """Add *session* and send it the current snapshot as a welcome.

        Returns False if the welcome could not be delivered, in which case
        the session has already been dropped again.

        """
        async with self._lock:
            self._sessions[session.client_id] = session
            if self._collector is not None:
                self._collector.record_session(session.client_id, "opened")

            error = await self._deliver(session, self._state.snapshot.to_message())
            if error is not None:
                self._drop(session, error)
                return False
            return True

    def unregister(self, session: Session) -> None:
        """Remove *session*.  Unknown or already-dropped sessions are ignored."""
        if self._sessions.get(session.client_id) is not session:
            return
        del self._sessions[session.client_id]
        if self._collector is not None:
            self._collector.record_session(session.client_id, "closed")

    async def broadcast(self, snapshot: DocumentSnapshot) -> BroadcastResult:
        """Commit *snapshot* as the current one and deliver it to every session.

        Each registered session gets exactly one delivery attempt.  Sessions
        whose delivery fails are removed; the rest are unaffected.

        """
        async with self._lock:
            self._state.commit(snapshot)

            sessions = tuple(self._sessions.values())
            if not sessions:
                return BroadcastResult(delivered=0)

            t0 = time.perf_counter()
            message = snapshot.to_message()
            errors = await asyncio.gather(
                *(self._deliver(session, message) for session in sessions)
            )

            dropped: list[ClientID] = []
            for session, error in zip(sessions, errors):
                if error is not None:
                    self._drop(session, error)
                    dropped.append(session.client_id)

            result = BroadcastResult(
                delivered=len(sessions) - len(dropped),
                dropped=tuple(dropped),
            )
            if self._collector is not None:
                self._collector.record_broadcast(
                    delivered=result.delivered,
                    dropped=len(dropped),
                    duration_ms=(time.perf_counter() - t0) * 1000,
                )
            return result

    async def close_all(self) -> None:
        """Close and forget every session (server shutdown)."""
        async with self._lock:
            sessions = tuple(self._sessions.values())
            self._sessions.clear()
        await asyncio.gather(*(self._close_quietly(s) for s in sessions))
        if self._closing:
            await asyncio.gather(*self._closing)

    async def _deliver(self, session: Session, message: Message) -> Exception | None:
        """Send one message, returning the failure instead of raising it."""
        try:
            await asyncio.wait_for(session.send(message), timeout=self._send_timeout)
        except Exception as exc:
            return exc
        return None

    def _drop(self, session: Session, error: Exception) -> None:
        """Remove a session whose delivery failed and close it in the background."""
        if self._sessions.get(session.client_id) is session:
            del self._sessions[session.client_id]

        reason = str(error) or type(error).__name__
        print(f"  Dropped viewer {session.client_id}: {reason}", file=sys.stderr)
        if self._collector is not None:
            self._collector.record_session(session.client_id, "dropped", reason=reason)

        task = asyncio.create_task(self._close_quietly(session))
        self._closing.add(task)
        task.add_done_callback(self._closing.discard)

    async def _close_quietly(self, session: Session) -> None:
        try:
            await asyncio.wait_for(session.close(), timeout=self._send_timeout)
        except Exception:
            pass  # The transport is already broken; nothing left to report.
