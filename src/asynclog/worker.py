"""Single consumer: pop, format, write, until stopped and drained."""
from __future__ import annotations

import threading
from enum import Enum
from typing import TYPE_CHECKING, Optional

from .formatter import format_task
from .logutil import get_logger, warn_once
from .taskqueue import STOP, TaskQueue

if TYPE_CHECKING:  # pragma: no cover - typing only
    from .sinks import LineSink
    from .task import LogTask


class AsyncLogError(RuntimeError):
    """Base class for asynclog errors."""


class EngineStartError(AsyncLogError):
    """The background worker thread could not be started."""


class WorkerState(Enum):
    WAITING = "waiting"
    PROCESSING = "processing"
    DRAINING = "draining"
    STOPPED = "stopped"


class Worker:
    def __init__(self, queue: TaskQueue, sink: "LineSink", name: str = "asynclog-worker") -> None:
        self._queue = queue
        self._sink = sink
        self._name = name
        self._thread: Optional[threading.Thread] = None
        self._stopped = threading.Event()
        self.state = WorkerState.WAITING
        # Counters are written by the worker thread only
        self.processed = 0
        self.written = 0
        self.dropped = 0
        self.format_errors = 0
        self.sink_errors = 0

    def start(self) -> None:
        if self._thread is not None:
            return
        thread = threading.Thread(target=self._run, name=self._name, daemon=True)
        try:
            thread.start()
        except RuntimeError as exc:
            raise EngineStartError(f"could not start worker thread {self._name!r}: {exc}") from exc
        self._thread = thread

    @property
    def started(self) -> bool:
        return self._thread is not None

    @property
    def alive(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker to reach STOPPED; True if it did."""
        if self._thread is None:
            return self._stopped.is_set()
        self._thread.join(timeout)
        return self._stopped.is_set()

    def _run(self) -> None:
        try:
            while True:
                self.state = WorkerState.DRAINING if self._queue.stop_requested else WorkerState.WAITING
                task = self._queue.pop_blocking()
                if task is STOP:
                    break
                self.state = WorkerState.PROCESSING
                self._process(task)  # type: ignore[arg-type]
        finally:
            try:
                self._sink.flush()
            except Exception as exc:  # noqa: BLE001
                get_logger().warning("sink flush failed at worker exit: %s", exc)
            self.state = WorkerState.STOPPED
            self._stopped.set()

    def _process(self, task: "LogTask") -> None:
        self.processed += 1
        try:
            line = format_task(task)
        except Exception as exc:  # noqa: BLE001 - a bad task must not kill the worker
            self.format_errors += 1
            get_logger().warning("formatting %s task failed: %s", task.level.name, exc)
            return
        if line is None:
            self.dropped += 1
            get_logger().debug("dropped %s task: template is not a loggable value", task.level.name)
            return
        try:
            self._sink.write_line(line)
        except Exception as exc:  # noqa: BLE001
            self.sink_errors += 1
            warn_once(self, "sink", "sink write failed (%d so far): %s", self.sink_errors, exc)
            return
        self.written += 1


__all__ = ["AsyncLogError", "EngineStartError", "Worker", "WorkerState"]
