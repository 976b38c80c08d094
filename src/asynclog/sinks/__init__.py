"""Line sink abstractions.

A sink receives finished lines from the worker thread only, so
implementations need no locking of their own for writes. ``close`` is
called once, after the worker has stopped.
"""
from __future__ import annotations

import sys
import threading
from typing import IO, TYPE_CHECKING, List, Optional, Protocol

from rich.color import ColorSystem
from rich.console import COLOR_SYSTEMS, Console
from rich.style import Style

from ..levels import LEVEL_TAGS, Level
from ..logutil import get_logger

if TYPE_CHECKING:  # pragma: no cover - typing only
    from ..config import EngineConfig


class LineSink(Protocol):  # pragma: no cover - simple protocol
    def write_line(self, text: str) -> None: ...  # noqa: E701 - protocol stub
    def flush(self) -> None: ...  # noqa: E701
    def close(self) -> None: ...  # noqa: E701


# Style per level tag, used only when colour is enabled
LEVEL_STYLES = {
    Level.DEBUG: Style.parse("dim"),
    Level.INFO: Style.parse("green"),
    Level.WARN: Style.parse("yellow"),
    Level.ERROR: Style.parse("bold red"),
}


def _style_for(line: str) -> Optional[Style]:
    for level, tag in LEVEL_TAGS.items():
        if line.startswith(tag):
            return LEVEL_STYLES[level]
    return None


class StreamSink:
    """Write lines to a text stream (stdout by default).

    With ``color=True`` a rich Console decides whether the stream can show
    ANSI colours (terminal detection, NO_COLOR / FORCE_COLOR). Only the
    style's escape codes come from rich; the line itself is written as is,
    tabs and control characters included.
    """

    def __init__(self, stream: Optional[IO[str]] = None, color: bool = False) -> None:
        self._stream = stream if stream is not None else sys.stdout
        self._color_system: Optional[ColorSystem] = None
        if color:
            console = Console(file=self._stream, highlight=False, markup=False, emoji=False)
            if console.color_system is not None:
                self._color_system = COLOR_SYSTEMS[console.color_system]

    @property
    def colored(self) -> bool:
        return self._color_system is not None

    def write_line(self, text: str) -> None:
        style = _style_for(text) if self._color_system is not None else None
        if style is not None:
            text = style.render(text, color_system=self._color_system)
        self._stream.write(text + "\n")

    def flush(self) -> None:
        self._stream.flush()

    def close(self) -> None:
        # Standard streams belong to the process; only flush them
        self.flush()


class FileSink:
    def __init__(self, path: str) -> None:
        self.path = path
        self._fh = open(path, "a", encoding="utf-8")

    def write_line(self, text: str) -> None:
        self._fh.write(text + "\n")

    def flush(self) -> None:
        self._fh.flush()

    def close(self) -> None:
        if not self._fh.closed:
            self._fh.close()


class MemorySink:
    """Keep lines in memory; readers on other threads get a copy."""

    def __init__(self) -> None:
        self._lines: List[str] = []
        self._lock = threading.Lock()
        self.closed = False

    def write_line(self, text: str) -> None:
        with self._lock:
            self._lines.append(text)

    @property
    def lines(self) -> List[str]:
        with self._lock:
            return list(self._lines)

    def flush(self) -> None:  # pragma: no cover - nothing buffered
        pass

    def close(self) -> None:
        self.closed = True


class CountingSink:
    """Discard lines, counting them (throughput runs)."""

    def __init__(self) -> None:
        self.count = 0
        self.chars = 0

    def write_line(self, text: str) -> None:
        self.count += 1
        self.chars += len(text) + 1

    def flush(self) -> None:  # pragma: no cover - nothing buffered
        pass

    def close(self) -> None:  # pragma: no cover - nothing to release
        pass


class MultiSink:
    def __init__(self, sinks: List[LineSink]):
        self._sinks = sinks

    def write_line(self, text: str) -> None:
        for s in self._sinks:
            try:
                s.write_line(text)
            except Exception as exc:  # noqa: BLE001
                # Best-effort; one failing sink must not starve the others.
                get_logger().warning("sink %r failed: %s", s, exc)

    def flush(self) -> None:
        for s in self._sinks:
            try:
                s.flush()
            except Exception as exc:  # noqa: BLE001
                get_logger().warning("sink %r flush failed: %s", s, exc)

    def close(self) -> None:
        for s in self._sinks:
            try:
                s.close()
            except Exception as exc:  # noqa: BLE001
                get_logger().warning("sink %r close failed: %s", s, exc)


def build_sink(config: "EngineConfig") -> LineSink:
    """Create the sink described by ``config``."""
    if config.sink == "file":
        if not config.path:
            raise ValueError("file sink requires a path")
        return FileSink(config.path)
    if config.sink == "stderr":
        return StreamSink(sys.stderr, color=config.color)
    if config.sink == "stdout":
        return StreamSink(sys.stdout, color=config.color)
    raise ValueError(f"unknown sink {config.sink!r}; expected stdout, stderr or file")


__all__ = [
    "CountingSink",
    "FileSink",
    "LineSink",
    "MemorySink",
    "MultiSink",
    "StreamSink",
    "build_sink",
]
