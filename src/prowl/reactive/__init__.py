"""Reactive layer — change propagation from file write to open browsers.

Connects watcher events to snapshot rendering, and snapshots to the
connected viewer sessions.
"""

from prowl.reactive.pipeline import BroadcastPipeline, PipelineState
from prowl.reactive.registry import BroadcastResult, Session, SessionRegistry

__all__ = [
    "BroadcastPipeline",
    "BroadcastResult",
    "PipelineState",
    "Session",
    "SessionRegistry",
]
