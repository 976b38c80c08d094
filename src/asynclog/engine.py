"""Engine facade: level-tagged submission in front of queue + worker.

Applications normally create one engine in their composition root and hand
it to call sites::

    with AsyncLogEngine.create() as log:
        log.info("{} plus {} is {}", 1, 2, 3)

For code that prefers a process-wide logger, ``get_engine()`` lazily builds
a default engine (shut down via atexit) and the module-level ``debug``,
``info``, ``warn`` and ``error`` functions forward to it.
"""
from __future__ import annotations

import atexit
import threading
from typing import Any, Optional, Union

from .config import EngineConfig
from .levels import Level
from .logutil import get_logger, warn_once
from .sinks import LineSink, build_sink
from .task import LogTask
from .taskqueue import TaskQueue
from .worker import AsyncLogError, EngineStartError, Worker, WorkerState


class AsyncLogEngine:
    def __init__(self, sink: Optional[LineSink] = None, config: Optional[EngineConfig] = None) -> None:
        self.config = config or EngineConfig()
        self.sink: LineSink = sink if sink is not None else build_sink(self.config)
        self.queue = TaskQueue()
        self.worker = Worker(self.queue, self.sink, name=self.config.thread_name)
        self._lock = threading.Lock()
        self._closed = False
        self.submitted = 0
        self.rejected = 0

    @classmethod
    def create(cls, sink: Optional[LineSink] = None, config: Optional[EngineConfig] = None) -> "AsyncLogEngine":
        """Build an engine and start its worker thread (EngineStartError on failure)."""
        engine = cls(sink=sink, config=config)
        engine.start()
        return engine

    def start(self) -> None:
        self.worker.start()

    # -- submission ---------------------------------------------------------

    def submit(self, level: Union[Level, str], *values: Any) -> None:
        """Queue one log call. Never raises for the values themselves."""
        task = LogTask.build(level, values)
        accepted = self.queue.push(task)
        with self._lock:
            if accepted:
                self.submitted += 1
                return
            self.rejected += 1
            rejected = self.rejected
        warn_once(self, "rejected", "%s call after stop() dropped (%d rejected so far)", task.level.name, rejected)

    def debug(self, *values: Any) -> None:
        self.submit(Level.DEBUG, *values)

    def info(self, *values: Any) -> None:
        self.submit(Level.INFO, *values)

    def warn(self, *values: Any) -> None:
        self.submit(Level.WARN, *values)

    warning = warn

    def error(self, *values: Any) -> None:
        self.submit(Level.ERROR, *values)

    # -- lifecycle ----------------------------------------------------------

    def stop(self) -> None:
        self.queue.request_stop()

    def join(self, timeout: Optional[float] = None) -> bool:
        """Wait for the worker to reach STOPPED; True if it did.

        An engine that was never started gets its worker started here, so
        tasks queued before start() still drain once stop() was requested.
        """
        if not self.worker.started:
            self.start()
        return self.worker.join(timeout)

    @property
    def state(self) -> WorkerState:
        return self.worker.state

    @property
    def closed(self) -> bool:
        return self._closed

    def shutdown(self, timeout: Optional[float] = None) -> bool:
        """Stop, wait for the worker to drain, then release the sink.

        Returns False if the worker did not stop within ``timeout``; the sink
        is left open in that case since the worker may still write to it.
        """
        if timeout is None:
            timeout = self.config.join_timeout
        self.stop()
        if not self.join(timeout):
            get_logger().warning(
                "worker did not stop within %ss; %d task(s) still queued", timeout, len(self.queue)
            )
            return False
        with self._lock:
            if self._closed:
                return True
            self._closed = True
        try:
            self.sink.close()
        except Exception as exc:  # noqa: BLE001
            get_logger().warning("closing sink failed: %s", exc)
        return True

    def __enter__(self) -> "AsyncLogEngine":
        self.start()
        return self

    def __exit__(self, *exc_info: Any) -> None:
        self.shutdown()


# ---------------------------------------------------------------------------
# Process-wide default engine
# ---------------------------------------------------------------------------

_DEFAULT: Optional[AsyncLogEngine] = None
_DEFAULT_LOCK = threading.Lock()
_ATEXIT_REGISTERED = False


def get_engine(config: Optional[EngineConfig] = None) -> AsyncLogEngine:
    """Return the default engine, creating and starting it on first use.

    ``config`` only applies when this call creates the engine.
    """
    global _DEFAULT, _ATEXIT_REGISTERED
    with _DEFAULT_LOCK:
        if _DEFAULT is None:
            _DEFAULT = AsyncLogEngine.create(config=config)
            if not _ATEXIT_REGISTERED:
                atexit.register(shutdown_engine)
                _ATEXIT_REGISTERED = True
        return _DEFAULT


def shutdown_engine(timeout: Optional[float] = None) -> None:
    """Drain and tear down the default engine, if one exists."""
    global _DEFAULT
    with _DEFAULT_LOCK:
        engine, _DEFAULT = _DEFAULT, None
    if engine is not None:
        engine.shutdown(timeout)


def debug(*values: Any) -> None:
    get_engine().debug(*values)


def info(*values: Any) -> None:
    get_engine().info(*values)


def warn(*values: Any) -> None:
    get_engine().warn(*values)


def error(*values: Any) -> None:
    get_engine().error(*values)


__all__ = [
    "AsyncLogEngine",
    "AsyncLogError",
    "EngineStartError",
    "debug",
    "error",
    "get_engine",
    "info",
    "shutdown_engine",
    "warn",
]
