"""Broadcast pipeline — connects the watcher to the session registry.

Orchestrates the change propagation flow:
    1. DocumentWatcher detects a write to the target (ChangeEvent)
    2. Read the file and render it to sanitized HTML
    3. Guess the title from the rendered HTML
    4. Commit the new DocumentSnapshot and broadcast it via SessionRegistry

Events are handled one at a time in arrival order, so two renders never
race to update the shared snapshot.  A failed read at startup is fatal; a
failed read later leaves the previous snapshot in place.
"""

from __future__ import annotations

import asyncio
import enum
import sys
import time
from typing import TYPE_CHECKING

from prowl._errors import DocumentError
from prowl.document.renderer import render_markdown
from prowl.document.snapshot import DocumentSnapshot
from prowl.document.title import guess_title

if TYPE_CHECKING:
    from prowl.config import ProwlConfig
    from prowl.document.watcher import ChangeEvent, DocumentWatcher
    from prowl.observability.collector import PreviewCollector
    from prowl.reactive.registry import BroadcastResult, SessionRegistry


class PipelineState(enum.Enum):
    """Where the pipeline is in its render/publish cycle."""

    IDLE = "idle"
    RENDERING = "rendering"
    PUBLISHING = "publishing"


class BroadcastPipeline:
    """Turns writes to the target document into snapshots pushed to viewers.

    Args:
        config: Resolved ProwlConfig (target path, fallback title).
        registry: Session registry that commits and broadcasts snapshots.
        collector: Optional event collector.

    """

    def __init__(
        self,
        config: ProwlConfig,
        registry: SessionRegistry,
        collector: PreviewCollector | None = None,
    ) -> None:
        self._config = config
        self._registry = registry
        self._collector = collector
        self._state = PipelineState.IDLE

    @property
    def state(self) -> PipelineState:
        """Current pipeline state."""
        return self._state

    def build_snapshot(self, source: bytes) -> DocumentSnapshot:
        """Render *source* and pair it with its guessed title."""
        t0 = time.perf_counter()
        html = render_markdown(source).decode("utf-8")
        title = guess_title(html, self._config.fallback_title)

        if self._collector is not None:
            self._collector.record_render(
                str(self._config.target),
                title=title,
                source_bytes=len(source),
                html_bytes=len(html),
                render_ms=(time.perf_counter() - t0) * 1000,
            )
        return DocumentSnapshot(title=title, html=html)

    def render_initial(self) -> DocumentSnapshot:
        """Render the document once at startup and commit the snapshot.

        Runs before the server accepts connections, so there is nobody to
        broadcast to.

        Raises:
            DocumentError: If the document cannot be read.

        """
        target = self._config.target
        self._state = PipelineState.RENDERING
        try:
            source = target.read_bytes()
        except OSError as exc:
            self._state = PipelineState.IDLE
            msg = f"Error reading from {target}: {exc.strerror or exc}"
            raise DocumentError(msg) from exc

        snapshot = self.build_snapshot(source)
        self._state = PipelineState.PUBLISHING
        self._registry.state.commit(snapshot)
        self._state = PipelineState.IDLE
        return snapshot

    async def handle_change(self, event: ChangeEvent) -> BroadcastResult | None:
        """Re-render after a write and broadcast the result.

        Returns the broadcast outcome, or None when nothing was published
        (the event was for another path or the read failed).

        """
        target = self._config.target
        if event.path != target:
            return None

        self._state = PipelineState.RENDERING
        try:
            source = await asyncio.to_thread(target.read_bytes)
        except OSError as exc:
            self._state = PipelineState.IDLE
            print(f"  Read error: {target.name}: {exc}", file=sys.stderr)
            if self._collector is not None:
                self._collector.record_watch_failure(str(target), str(exc))
            return None

        snapshot = self.build_snapshot(source)
        self._state = PipelineState.PUBLISHING
        try:
            result = await self._registry.broadcast(snapshot)
        finally:
            self._state = PipelineState.IDLE

        self._log_change(result)
        return result

    async def run(self, watcher: DocumentWatcher) -> None:
        """Consume watcher events until the watcher stops.

        An unexpected error while handling one event is reported and the
        loop moves on to the next.

        """
        async for event in watcher.changes():
            try:
                await self.handle_change(event)
            except Exception as exc:
                print(f"  Pipeline error: {exc}", file=sys.stderr)
                if self._collector is not None:
                    self._collector.record_watch_failure(str(event.path), str(exc))

    def _log_change(self, result: BroadcastResult) -> None:
        """Log a published update to stderr."""
        name = self._config.target.name
        viewers = "viewer" if result.delivered == 1 else "viewers"
        line = f"  {name} changed — {result.delivered} {viewers} updated"
        if result.dropped:
            line += f", {len(result.dropped)} dropped"
        print(line, file=sys.stderr)
