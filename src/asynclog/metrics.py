"""Metrics helper for AsyncLogEngine.

Dependency-free snapshot of internal counters, suitable for dumping as JSON
at exit or logging. Reads without locking the worker; values written by the
worker thread may lag by a task or two while it is running.
"""
from __future__ import annotations

from typing import Any, Dict

from .engine import AsyncLogEngine


def engine_metrics(engine: AsyncLogEngine) -> Dict[str, Any]:
    worker = engine.worker
    return {
        "submitted": engine.submitted,
        "rejected": engine.rejected,
        "queue_depth": len(engine.queue),
        "stop_requested": engine.queue.stop_requested,
        "state": worker.state.value,
        "processed": worker.processed,
        "written": worker.written,
        "dropped": worker.dropped,
        "format_errors": worker.format_errors,
        "sink_errors": worker.sink_errors,
        "config": {
            "sink": engine.config.sink,
            "path": engine.config.path,
            "color": engine.config.color,
            "thread_name": engine.config.thread_name,
            "join_timeout": engine.config.join_timeout,
        },
    }

__all__ = ["engine_metrics"]
