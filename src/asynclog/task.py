from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable, Tuple, Union

from .cells import Cell
from .levels import Level


@dataclass(frozen=True)
class LogTask:
    """One logging call: its level and its values in argument order.

    The first cell is the template whenever more than one cell is present.
    """

    level: Level
    cells: Tuple[Cell, ...] = ()

    @classmethod
    def build(cls, level: Union[Level, str], values: Iterable[Any]) -> "LogTask":
        return cls(Level.parse(level), tuple(Cell.of(v) for v in values))

    def __len__(self) -> int:
        return len(self.cells)


__all__ = ["LogTask"]
