"""Document snapshot — the rendered title + HTML pair shown to viewers.

``DocumentState`` holds the one live snapshot.  It is created empty, filled
by the initial render before the server listens, and replaced in place by the
broadcast pipeline afterwards.  Readers (new sessions, the page route) only
ever see a whole snapshot because replacement is a single reference swap.
"""

from __future__ import annotations

import json
from dataclasses import dataclass

from prowl.config import DEFAULT_TITLE


@dataclass(frozen=True, slots=True)
class DocumentSnapshot:
    """One rendering of the target document.

    Attributes:
        title: Best-guess title (see ``guess_title``).
        html: Sanitized HTML body.

    """

    title: str = DEFAULT_TITLE
    html: str = ""

    def to_message(self) -> str:
        """Serialize as the JSON payload pushed to viewers."""
        return json.dumps({"title": self.title, "html": self.html})


class DocumentState:
    """Owner of the current ``DocumentSnapshot``.

    Only the broadcast pipeline (through the session registry) commits new
    snapshots; everything else reads ``snapshot``.

    """

    __slots__ = ("_generation", "_snapshot")

    def __init__(self, snapshot: DocumentSnapshot | None = None) -> None:
        self._snapshot = snapshot if snapshot is not None else DocumentSnapshot()
        self._generation = 0

    @property
    def snapshot(self) -> DocumentSnapshot:
        """The most recently committed snapshot."""
        return self._snapshot

    @property
    def generation(self) -> int:
        """Number of snapshots committed so far (0 until the first render)."""
        return self._generation

    def commit(self, snapshot: DocumentSnapshot) -> None:
        """Replace the current snapshot."""
        self._snapshot = snapshot
        self._generation += 1
