"""Markdown renderer — Markdown bytes to sanitized HTML bytes.

The conversion uses a single fixed dialect (the CommonMark preset of
markdown-it-py, no plugins) so the same source always renders the same way.
Raw HTML is allowed through the parser and then scrubbed by nh3: script and
style elements lose their content, event-handler attributes and unsafe URL
schemes are dropped.
"""

from __future__ import annotations

import nh3
from markdown_it import MarkdownIt

_md = MarkdownIt("commonmark")


def render_markdown(source: bytes) -> bytes:
    """Render *source* to HTML that is safe to hand straight to a browser.

    Never raises: CommonMark has no syntax errors, and bytes that are not
    valid UTF-8 are decoded with replacement characters.

    """
    text = source.decode("utf-8", errors="replace")
    unsafe = _md.render(text)
    return nh3.clean(unsafe).encode("utf-8")
