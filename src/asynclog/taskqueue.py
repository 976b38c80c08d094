"""Thread-safe FIFO of pending log tasks.

Many producers, exactly one consumer. One condition variable guards the
deque and the stop flag; producers hold it only long enough to append.
"""
from __future__ import annotations

import queue
import threading
import time
from collections import deque
from typing import Deque, Optional, Union

from .task import LogTask


class _StopSignal:
    __slots__ = ()

    def __repr__(self) -> str:  # pragma: no cover - trivial
        return "STOP"


# Returned by pop_blocking once stop was requested and the queue is empty.
STOP = _StopSignal()


class TaskQueue:
    def __init__(self) -> None:
        self._items: Deque[LogTask] = deque()
        self._cond = threading.Condition(threading.Lock())
        self._stopped = False

    def push(self, task: LogTask) -> bool:
        """Append ``task`` and wake the consumer.

        Returns False (and keeps nothing) once stop has been requested.
        """
        with self._cond:
            if self._stopped:
                return False
            self._items.append(task)
            self._cond.notify()
        return True

    def pop_blocking(self, timeout: Optional[float] = None) -> Union[LogTask, _StopSignal]:
        """Remove and return the head, waiting while empty.

        Returns STOP when stop was requested and nothing is left. Raises
        ``queue.Empty`` if ``timeout`` elapses with nothing to return.
        """
        deadline = None if timeout is None else time.monotonic() + timeout
        with self._cond:
            # Loop guards against spurious wakeups
            while not self._items:
                if self._stopped:
                    return STOP
                if deadline is None:
                    self._cond.wait()
                    continue
                remaining = deadline - time.monotonic()
                if remaining <= 0:
                    raise queue.Empty
                self._cond.wait(remaining)
            return self._items.popleft()

    def request_stop(self) -> None:
        with self._cond:
            self._stopped = True
            self._cond.notify_all()

    @property
    def stop_requested(self) -> bool:
        with self._cond:
            return self._stopped

    def __len__(self) -> int:
        with self._cond:
            return len(self._items)


__all__ = ["STOP", "TaskQueue"]
