"""Prowl error hierarchy.

All prowl-specific errors inherit from ProwlError for easy catching.
The startup-fatal ones (config, document, watch, server) propagate to the
CLI, which reports them and exits non-zero.
"""


class ProwlError(Exception):
    """Base error for all prowl operations."""


class ConfigError(ProwlError):
    """Invalid or unreadable configuration."""


class DocumentError(ProwlError):
    """The target document could not be read."""


class WatchError(ProwlError):
    """The filesystem watch could not be established."""


class ServerError(ProwlError):
    """The network listener could not be opened."""
