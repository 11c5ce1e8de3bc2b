"""Shared test fixtures for prowl."""

from __future__ import annotations

import asyncio
import json
from pathlib import Path
from typing import Any

import pytest

from prowl.config import ProwlConfig
from prowl.document.snapshot import DocumentState
from prowl.reactive.registry import Session, SessionRegistry


@pytest.fixture
def document(tmp_path: Path) -> Path:
    """A Markdown document that opens with a top-level heading."""
    path = tmp_path / "notes.md"
    path.write_text("# Title\n\nBody")
    return path


@pytest.fixture
def config(document: Path) -> ProwlConfig:
    """A ProwlConfig targeting the ``document`` fixture."""
    return ProwlConfig(target=document)


@pytest.fixture
def registry() -> SessionRegistry:
    """An empty registry over a fresh document state."""
    return SessionRegistry(DocumentState(), send_timeout=1.0)


class RecordingSession(Session):
    """Session that records every message it is sent.

    Args:
        client_id: Optional fixed identifier.
        delay: Seconds to sleep before accepting each message.

    """

    def __init__(self, client_id: str | None = None, *, delay: float = 0.0) -> None:
        super().__init__(client_id)
        self.delay = delay
        self.messages: list[str] = []
        self.attempts = 0
        self.closed = False

    async def send(self, message: str) -> None:
        self.attempts += 1
        if self.delay:
            await asyncio.sleep(self.delay)
        self.messages.append(message)

    async def close(self) -> None:
        self.closed = True

    @property
    def payloads(self) -> list[dict[str, Any]]:
        return [json.loads(m) for m in self.messages]


class FailingSession(RecordingSession):
    """Accepts ``fail_after`` messages, then fails like a reset connection."""

    def __init__(self, client_id: str | None = None, *, fail_after: int = 0) -> None:
        super().__init__(client_id)
        self.fail_after = fail_after

    async def send(self, message: str) -> None:
        self.attempts += 1
        if len(self.messages) >= self.fail_after:
            raise ConnectionResetError("connection reset by peer")
        self.messages.append(message)


class HangingSession(RecordingSession):
    """Accepts ``hang_after`` messages, then never completes a send."""

    def __init__(self, client_id: str | None = None, *, hang_after: int = 1) -> None:
        super().__init__(client_id)
        self.hang_after = hang_after

    async def send(self, message: str) -> None:
        self.attempts += 1
        if len(self.messages) >= self.hang_after:
            await asyncio.Event().wait()
        self.messages.append(message)
