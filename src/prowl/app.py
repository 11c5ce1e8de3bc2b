"""Prowl application — wires the document, the watcher and the server.

Startup order matters: the document is rendered, then the watch is put in
place, then the listener is bound.  Any of the three failing stops the
process before a single viewer can connect to a half-working server.
"""

from __future__ import annotations

import asyncio
import socket
import sys
import time
import webbrowser
from pathlib import Path

from prowl._errors import ServerError
from prowl.config import ProwlConfig
from prowl.config_loader import load_config
from prowl.document.snapshot import DocumentSnapshot, DocumentState
from prowl.document.watcher import DocumentWatcher
from prowl.observability import EventLog, PreviewCollector
from prowl.reactive.pipeline import BroadcastPipeline
from prowl.reactive.registry import SessionRegistry


def _bind_socket(config: ProwlConfig) -> socket.socket:
    """Bind the listening socket up front so a busy port fails startup.

    Raises:
        ServerError: If the address cannot be bound.

    """
    family = socket.AF_INET6 if ":" in config.host else socket.AF_INET
    sock = socket.socket(family, socket.SOCK_STREAM)
    sock.setsockopt(socket.SOL_SOCKET, socket.SO_REUSEADDR, 1)
    try:
        sock.bind((config.host, config.port))
    except OSError as exc:
        sock.close()
        msg = f"Cannot listen on {config.host}:{config.port}: {exc.strerror or exc}"
        raise ServerError(msg) from exc
    sock.set_inheritable(True)
    return sock


def _open_browser(url: str) -> None:
    """Open *url* in the default browser, warning if none is available."""
    if not webbrowser.open(url):
        print(f"  Could not open a browser; visit {url}", file=sys.stderr)


_ALL_INTERFACES = ("0.0.0.0", "::", "")


def _startup_warnings(config: ProwlConfig, snapshot: DocumentSnapshot) -> list[str]:
    """Things worth pointing out before the first viewer connects."""
    warnings: list[str] = []
    if config.host in _ALL_INTERFACES:
        warnings.append("Listening on all interfaces; anyone on your network can view this")
    if not snapshot.html.strip():
        warnings.append(f"{config.target.name} is empty")
    return warnings


def serve(target: str | Path, **kwargs: object) -> None:
    """Preview *target* live until interrupted.

    Args:
        target: Path to the Markdown document.
        **kwargs: Override ProwlConfig fields.

    Raises:
        ConfigError: If a prowl config file next to the target is invalid.
        DocumentError: If the document cannot be read at startup.
        WatchError: If the document's directory cannot be watched.
        ServerError: If the listener cannot be bound.

    """
    import uvicorn

    from prowl.banner import print_banner
    from prowl.server import create_app

    config = load_config(Path(target), **kwargs)
    t0 = time.perf_counter()

    collector = PreviewCollector(EventLog())
    state = DocumentState(DocumentSnapshot(title=config.fallback_title))
    registry = SessionRegistry(state, send_timeout=config.send_timeout, collector=collector)
    pipeline = BroadcastPipeline(config, registry, collector)

    # Convert the document first; an unreadable target is fatal.
    snapshot = pipeline.render_initial()

    watcher = DocumentWatcher(config, collector)
    watcher.start()

    try:
        sock = _bind_socket(config)
    except ServerError:
        watcher.stop()
        raise

    app = create_app(config, registry, pipeline=pipeline, watcher=watcher, collector=collector)
    load_ms = (time.perf_counter() - t0) * 1000
    print_banner(
        config, snapshot, load_ms=load_ms, warnings=_startup_warnings(config, snapshot),
    )

    if config.open_browser:
        _open_browser(config.url)

    server = uvicorn.Server(uvicorn.Config(app, log_level="warning", lifespan="on"))
    try:
        asyncio.run(server.serve(sockets=[sock]))
    finally:
        watcher.stop()
        sock.close()
