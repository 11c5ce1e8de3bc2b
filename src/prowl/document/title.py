"""Title heuristic — is the first thing in the document an ``<h1>``?"""

from __future__ import annotations

import html
import re

from prowl.config import DEFAULT_TITLE

_LEADING_H1 = re.compile(r"^\s*<h1>(.*?)</h1>", re.DOTALL)
_TAG = re.compile(r"<[^>]*>")


def guess_title(rendered: str | bytes, fallback: str = DEFAULT_TITLE) -> str:
    """Return the text of a leading ``<h1>``, or *fallback*.

    Only a heading that opens the document counts; one further down is
    ignored.  Inline markup inside the heading is stripped and entities are
    unescaped, so ``<h1>Fish &amp; <em>Chips</em></h1>`` gives
    ``"Fish & Chips"``.  An empty heading falls back too.

    """
    if isinstance(rendered, bytes):
        rendered = rendered.decode("utf-8", errors="replace")

    match = _LEADING_H1.match(rendered)
    if match is None:
        return fallback

    title = html.unescape(_TAG.sub("", match.group(1))).strip()
    return title or fallback
