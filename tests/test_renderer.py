"""Tests for prowl.document.renderer — Markdown to sanitized HTML."""

from __future__ import annotations

from prowl.document.renderer import render_markdown


class TestRenderMarkdown:
    """Conversion through the fixed CommonMark dialect."""

    def test_heading_and_paragraph(self) -> None:
        html = render_markdown(b"# Title\n\nBody")
        assert b"<h1>Title</h1>" in html
        assert b"<p>Body</p>" in html

    def test_returns_bytes(self) -> None:
        assert isinstance(render_markdown(b"text"), bytes)

    def test_same_input_same_output(self) -> None:
        source = b"# Notes\n\n* one\n* two\n\n```\ncode\n```\n\n> quote\n"
        assert render_markdown(source) == render_markdown(source)

    def test_empty_input(self) -> None:
        assert render_markdown(b"").strip() == b""

    def test_invalid_utf8_does_not_raise(self) -> None:
        html = render_markdown(b"# Caf\xe9\n")
        assert b"<h1>" in html

    def test_no_extensions_enabled(self) -> None:
        """GFM tables are not part of the dialect."""
        html = render_markdown(b"| a | b |\n|---|---|\n| 1 | 2 |\n")
        assert b"<table>" not in html

    def test_unterminated_markup_degrades(self) -> None:
        html = render_markdown(b"**bold\n\n```\nnever closed")
        assert b"<pre>" in html


class TestSanitization:
    """Unsafe HTML in the source never reaches the viewer."""

    def test_script_block_removed(self) -> None:
        html = render_markdown(b"<script>alert(1)</script>\n\nText")
        assert b"<script" not in html
        assert b"alert(1)" not in html
        assert b"<p>Text</p>" in html

    def test_event_handler_removed(self) -> None:
        html = render_markdown(b'<img src="cat.png" onerror="alert(1)">\n')
        assert b"onerror" not in html
        assert b"alert" not in html

    def test_javascript_href_removed(self) -> None:
        html = render_markdown(b'Click <a href="javascript:alert(1)">here</a>\n')
        assert b"javascript:" not in html
        assert b"here" in html

    def test_style_block_removed(self) -> None:
        html = render_markdown(b"<style>body { display: none }</style>\n\nText")
        assert b"<style" not in html
        assert b"display: none" not in html

    def test_safe_inline_html_kept(self) -> None:
        html = render_markdown(b"Some <em>emphasis</em> here\n")
        assert b"<em>emphasis</em>" in html
