"""Startup banner — what is being previewed, and where.

Prints a short status block with timing, the preview URL and the watch
status.  Detects ``NO_COLOR`` / ``TERM`` for safe fallback.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from prowl.config import ProwlConfig
    from prowl.document.snapshot import DocumentSnapshot


# ---------------------------------------------------------------------------
# ANSI helpers: respect NO_COLOR (https://no-color.org)
# ---------------------------------------------------------------------------

def _supports_color() -> bool:
    """Return True if the terminal supports ANSI colors."""
    if os.environ.get("NO_COLOR"):
        return False
    if os.environ.get("TERM") == "dumb":
        return False
    return hasattr(sys.stderr, "isatty") and sys.stderr.isatty()


_COLOR = _supports_color()

_RESET = "\033[0m" if _COLOR else ""
_BOLD = "\033[1m" if _COLOR else ""
_DIM = "\033[2m" if _COLOR else ""
_CYAN = "\033[36m" if _COLOR else ""
_GREEN = "\033[32m" if _COLOR else ""
_YELLOW = "\033[33m" if _COLOR else ""
_ORANGE = "\033[38;5;214m" if _COLOR else ""


def _clickable_url(url: str) -> str:
    """Wrap *url* in an OSC 8 hyperlink escape if the terminal supports it."""
    if not _COLOR:
        return url
    return f"\033]8;;{url}\033\\{_BOLD}{_CYAN}{url}{_RESET}\033]8;;\033\\"


def print_banner(
    config: ProwlConfig,
    snapshot: DocumentSnapshot,
    *,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the prowl startup banner to stderr.

    Args:
        config: Resolved ProwlConfig.
        snapshot: The initial rendering of the document.
        load_ms: Time spent on the initial render and watch setup.
        warnings: Optional list of warning messages to display.

    """
    from prowl import __version__

    header = f"  {_ORANGE}{_BOLD}prowl{_RESET} {_DIM}v{__version__}{_RESET}"

    lines: list[str] = [
        "",
        header,
        f"  {_DIM}{'─' * 43}{_RESET}",
    ]

    timing = f" {_DIM}in {load_ms:.0f}ms{_RESET}" if load_ms > 0 else ""
    lines.append(f"  {_DIM}├─{_RESET} {config.target.name} rendered{timing}")
    lines.append(f"  {_DIM}├─{_RESET} title: {snapshot.title}")
    lines.append(
        f"  {_DIM}└─{_RESET} {_GREEN}live{_RESET} "
        f"— WebSocket on {_DIM}/update{_RESET}"
    )

    lines.append("")
    lines.append(f"  {_clickable_url(config.url)}")
    lines.append("")
    lines.append(f"  {_DIM}Watching \"{config.target}\" for changes...{_RESET}")

    if warnings:
        lines.append("")
        lines.extend(f"  {_YELLOW}!{_RESET} {w}" for w in warnings)

    lines.append("")

    print("\n".join(lines), file=sys.stderr)
