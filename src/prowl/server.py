"""HTTP surface — the preview page, the live update socket, and stats.

Routes:
    ``GET /``               the page, with the current snapshot baked in
    ``WS  /update``         registers a viewer session and pushes snapshots
    ``GET /__prowl/stats``  JSON summary plus recent events (``?type=``,
                            ``?since=``, ``?limit=`` narrow the list)
"""

from __future__ import annotations

import asyncio
import contextlib
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, PackageLoader, select_autoescape
from starlette.applications import Starlette
from starlette.responses import HTMLResponse, JSONResponse
from starlette.routing import Route, WebSocketRoute

from prowl.observability.events import EVENT_TYPES, event_to_dict
from prowl.reactive.registry import Session

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from starlette.requests import Request
    from starlette.websockets import WebSocket

    from prowl._types import Message
    from prowl.config import ProwlConfig
    from prowl.document.watcher import DocumentWatcher
    from prowl.observability.collector import PreviewCollector
    from prowl.reactive.pipeline import BroadcastPipeline
    from prowl.reactive.registry import SessionRegistry


UPDATE_ENDPOINT = "/update"
STATS_ENDPOINT = "/__prowl/stats"

_TEMPLATE_NAME = "view.html"
_DEFAULT_EVENT_LIMIT = 50


class WebSocketSession(Session):
    """A viewer connected over a Starlette WebSocket."""

    def __init__(self, websocket: WebSocket) -> None:
        super().__init__()
        self._websocket = websocket

    async def send(self, message: Message) -> None:
        await self._websocket.send_text(message)

    async def close(self) -> None:
        await self._websocket.close()


def _template_env() -> Environment:
    return Environment(
        loader=PackageLoader("prowl", "templates"),
        autoescape=select_autoescape(["html"]),
    )


def create_app(
    config: ProwlConfig,
    registry: SessionRegistry,
    *,
    pipeline: BroadcastPipeline | None = None,
    watcher: DocumentWatcher | None = None,
    collector: PreviewCollector | None = None,
    debug: bool = False,
) -> Starlette:
    """Build the Starlette app around an already-populated registry.

    When both *pipeline* and *watcher* are given, the app's lifespan runs
    the pipeline against the watcher for as long as the server is up and
    stops the watcher on shutdown.

    """
    template = _template_env().get_template(_TEMPLATE_NAME)

    async def page(request: Request) -> HTMLResponse:
        snapshot = registry.state.snapshot
        scheme = "wss" if request.url.scheme in ("https", "wss") else "ws"
        body = template.render(
            title=snapshot.title,
            rendered=snapshot.html,
            ws_url=f"{scheme}://{request.url.netloc}{UPDATE_ENDPOINT}",
        )
        return HTMLResponse(body)

    async def update(websocket: WebSocket) -> None:
        await websocket.accept()
        session = WebSocketSession(websocket)
        try:
            if not await registry.register(session):
                return
            # Viewers never send anything meaningful; wait for the close.
            while True:
                message = await websocket.receive()
                if message["type"] == "websocket.disconnect":
                    break
        finally:
            registry.unregister(session)

    async def stats(request: Request) -> JSONResponse:
        payload: dict[str, Any] = {
            "target": str(config.target),
            "sessions": registry.session_count,
            "generation": registry.state.generation,
            "title": registry.state.snapshot.title,
        }
        if collector is None:
            return JSONResponse(payload)

        # ?type=SessionEvent&since=<timestamp_ns>&limit=N
        params = request.query_params
        kind = params.get("type")
        if kind is not None and kind not in EVENT_TYPES:
            return JSONResponse(
                {"error": f"unknown event type {kind!r}", "types": sorted(EVENT_TYPES)},
                status_code=400,
            )
        try:
            since_ns = int(params.get("since", "0"))
            limit = int(params.get("limit", str(_DEFAULT_EVENT_LIMIT)))
        except ValueError:
            return JSONResponse({"error": "since and limit must be integers"}, status_code=400)

        events = collector.log.events(kind=kind, since_ns=since_ns, limit=max(limit, 0))
        payload["event_log"] = collector.log.stats()
        payload["events"] = [event_to_dict(event) for event in events]
        return JSONResponse(payload)

    @contextlib.asynccontextmanager
    async def lifespan(app: Starlette) -> AsyncIterator[None]:
        task: asyncio.Task[None] | None = None
        if pipeline is not None and watcher is not None:
            task = asyncio.create_task(pipeline.run(watcher))
        try:
            yield
        finally:
            if watcher is not None:
                await asyncio.to_thread(watcher.stop)
            if task is not None:
                task.cancel()
                with contextlib.suppress(asyncio.CancelledError):
                    await task
            await registry.close_all()

    return Starlette(
        debug=debug,
        routes=[
            Route("/", page, name="page"),
            WebSocketRoute(UPDATE_ENDPOINT, update, name="update"),
            Route(STATS_ENDPOINT, stats, name="stats"),
        ],
        lifespan=lifespan,
    )
