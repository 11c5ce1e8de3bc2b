"""Shared type definitions for prowl."""

from typing import Literal, TypeAlias

# WebSocket session identifier
ClientID: TypeAlias = str

# JSON text pushed to a viewer
Message: TypeAlias = str

# Filesystem change kinds that trigger a re-render
ChangeKind: TypeAlias = Literal["created", "modified"]
