"""Prowl — a live preview server for a single Markdown document.

Watches one file, renders it to sanitized HTML on every save, and pushes the
result to every open browser tab over a WebSocket.

Quick start::

    import prowl

    prowl.serve("notes.md")

Or from the shell::

    prowl -b notes.md

"""

from __future__ import annotations

__version__ = "0.1.0"
__all__ = [
    "DocumentSnapshot",
    "ProwlConfig",
    "__version__",
    "guess_title",
    "render_markdown",
    "serve",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import prowl`` fast; the server stack is only imported when
    ``serve`` is first touched.
    """
    if name == "ProwlConfig":
        from prowl.config import ProwlConfig

        return ProwlConfig

    if name == "DocumentSnapshot":
        from prowl.document.snapshot import DocumentSnapshot

        return DocumentSnapshot

    if name == "render_markdown":
        from prowl.document.renderer import render_markdown

        return render_markdown

    if name == "guess_title":
        from prowl.document.title import guess_title

        return guess_title

    if name == "serve":
        from prowl.app import serve

        return serve

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
