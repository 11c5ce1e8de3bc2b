"""Prowl configuration.

ProwlConfig is the central configuration object, frozen after creation.
"""

from dataclasses import dataclass, field
from pathlib import Path

DEFAULT_PORT = 8081
DEFAULT_TITLE = "prowl"


@dataclass(frozen=True, slots=True)
class ProwlConfig:
    """Configuration for a prowl preview server.

    Attributes:
        target: The document being previewed.  Always resolved to an absolute,
            canonical path on construction.
        host: Bind address for the HTTP/WebSocket listener.
        port: Bind port for the HTTP/WebSocket listener.
        open_browser: Open the preview in a browser once the listener is bound.
        debounce_ms: watchfiles coalescing window for bursts of writes.
        send_timeout: Seconds a single viewer may take to accept a message
            before it is dropped.
        fallback_title: Title used when the document does not open with a
            top-level heading.
        given_path: The target as given (absolute, symlinks not followed).

    """

    target: Path = field(default_factory=lambda: Path("README.md"))
    host: str = "127.0.0.1"
    port: int = DEFAULT_PORT
    open_browser: bool = False
    debounce_ms: int = 50
    send_timeout: float = 5.0
    fallback_title: str = DEFAULT_TITLE
    given_path: Path = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        # watchfiles reports absolute paths; compare against the resolved
        # target so relative arguments and symlinks still match.
        target = Path(self.target).expanduser()
        object.__setattr__(self, "given_path", target.absolute())
        object.__setattr__(self, "target", target.resolve())

    @property
    def watch_dirs(self) -> tuple[Path, ...]:
        """Directories to watch: the target's own and, for a symlink, the link's."""
        dirs = [self.target.parent]
        if self.given_path.parent != self.target.parent:
            dirs.append(self.given_path.parent)
        return tuple(dirs)

    @property
    def url(self) -> str:
        """Browser URL for the preview page."""
        host = "localhost" if self.host in ("0.0.0.0", "127.0.0.1", "") else self.host
        return f"http://{host}:{self.port}"
