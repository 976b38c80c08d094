"""Package metadata and public surface for asynclog.

The version comes from importlib.metadata so an editable install or wheel
reports what pyproject.toml declares. A hardcoded fallback keeps direct
source usage (no install) importable.
"""

from __future__ import annotations

from importlib import metadata as _metadata

from .cells import Cell, Kind
from .config import EngineConfig
from .engine import (
	AsyncLogEngine,
	AsyncLogError,
	EngineStartError,
	debug,
	error,
	get_engine,
	info,
	shutdown_engine,
	warn,
)
from .levels import Level
from .task import LogTask

__all__ = [
	"__version__",
	"AsyncLogEngine",
	"AsyncLogError",
	"Cell",
	"EngineConfig",
	"EngineStartError",
	"Kind",
	"Level",
	"LogTask",
	"debug",
	"error",
	"get_engine",
	"info",
	"shutdown_engine",
	"warn",
]

_FALLBACK_VERSION = "0.1.0"  # MUST match pyproject.toml [project].version

try:  # pragma: no cover - success path covered indirectly via CLI test
	__version__ = _metadata.version("asynclog")  # type: ignore[assignment]
except Exception:  # pragma: no cover - fallback exercised if metadata missing
	__version__ = _FALLBACK_VERSION
