"""Diagnostics about asynclog itself.

Log lines submitted by applications never pass through here; this logger
reports what happens to them when something goes wrong: calls rejected
after stop(), tasks dropped because their template is not loggable, sink
failures inside the worker thread. Records carry the thread name, since
most of them come from the worker rather than the caller.

The "asynclog" logger gets a stderr handler only when the application has
not configured one, and stays at WARNING so routine drops are quiet.
"""
from __future__ import annotations

import logging
import threading
import weakref
from typing import Any, MutableMapping, Optional, Set

LOGGER_NAME = "asynclog"

_LOGGER: Optional[logging.Logger] = None
# owner object -> topics already warned about; entries vanish with the owner
_WARNED: MutableMapping[Any, Set[str]] = weakref.WeakKeyDictionary()
_WARNED_LOCK = threading.Lock()


def get_logger() -> logging.Logger:
    global _LOGGER
    if _LOGGER is None:
        logger = logging.getLogger(LOGGER_NAME)
        if not logger.handlers:
            handler = logging.StreamHandler()
            handler.setFormatter(logging.Formatter("[%(name)s:%(threadName)s] %(levelname)s: %(message)s"))
            logger.addHandler(handler)
        logger.setLevel(logging.WARNING)
        _LOGGER = logger
    return _LOGGER


def warn_once(owner: Any, topic: str, msg: str, *args: Any) -> bool:
    """Warn about ``topic`` the first time for ``owner``; later repeats go to DEBUG.

    Returns True when the warning was emitted at WARNING level.
    """
    with _WARNED_LOCK:
        seen = _WARNED.setdefault(owner, set())
        first = topic not in seen
        seen.add(topic)
    get_logger().log(logging.WARNING if first else logging.DEBUG, msg, *args)
    return first


__all__ = ["LOGGER_NAME", "get_logger", "warn_once"]
