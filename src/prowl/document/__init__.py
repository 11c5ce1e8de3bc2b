"""Document layer — the previewed file as rendered, titled snapshots.

Handles Markdown rendering and sanitizing, the title heuristic, the shared
snapshot, and watching the file for writes.
"""

from prowl.document.renderer import render_markdown
from prowl.document.snapshot import DocumentSnapshot, DocumentState
from prowl.document.title import guess_title
from prowl.document.watcher import ChangeEvent, DocumentWatcher, qualifying_change

__all__ = [
    "ChangeEvent",
    "DocumentSnapshot",
    "DocumentState",
    "DocumentWatcher",
    "guess_title",
    "qualifying_change",
    "render_markdown",
]
