"""Prowl CLI — ``prowl [-b] [-p PORT] <file>``.

Entry point for the ``prowl`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys
from typing import NoReturn

from prowl.config import DEFAULT_PORT


class _UsageParser(argparse.ArgumentParser):
    """ArgumentParser whose usage errors exit 0 after printing usage."""

    def error(self, message: str) -> NoReturn:
        self.print_usage(sys.stderr)
        self.exit(0, f"{self.prog}: {message}\n")


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the prowl CLI."""
    parser = _UsageParser(
        prog="prowl",
        description="Live preview of a Markdown document in the browser.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument("files", nargs="*", metavar="file", help="Markdown document to preview")
    parser.add_argument(
        "-b", "--browser",
        action="store_true",
        default=None,
        help="Open a browser window with the rendered document",
    )
    parser.add_argument(
        "-p", "--port",
        type=int,
        default=None,
        help=f"Port to start the web server on (default: {DEFAULT_PORT})",
    )
    parser.add_argument("--host", default=None, help="Bind address (default: 127.0.0.1)")
    return parser


def _get_version() -> str:
    """Get the package version."""
    from prowl import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    # Exactly one document.
    if len(args.files) != 1:
        parser.print_usage(sys.stderr)
        sys.exit(0)

    from prowl._errors import ProwlError
    from prowl.app import serve

    try:
        serve(args.files[0], host=args.host, port=args.port, open_browser=args.browser)
    except ProwlError as exc:
        print(f"  Error: {exc}", file=sys.stderr)
        sys.exit(1)
    except KeyboardInterrupt:
        pass


if __name__ == "__main__":
    main()
