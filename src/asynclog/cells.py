"""Value cells: one loggable argument, classified once at the call site.

A cell is a closed tagged union over the kinds we know how to render
(integer, float, text). Anything else is still wrapped, tagged
``UNSUPPORTED``, so the worker can decide what to do with it instead of the
caller's thread raising.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Any, Tuple


class Kind(Enum):
    INT = "int"
    FLOAT = "float"
    TEXT = "text"
    UNSUPPORTED = "unsupported"


# Stays under CPython's int/str digit limit, whose smallest allowed value is 640
_CHUNK_DIGITS = 600
_CHUNK = 10 ** _CHUNK_DIGITS


def _int_text(value: int) -> str:
    try:
        return str(value)
    except ValueError:
        pass
    # Past sys.get_int_max_str_digits(): convert in fixed-width decimal chunks
    sign = "-" if value < 0 else ""
    value = abs(value)
    chunks = []
    while value:
        value, rem = divmod(value, _CHUNK)
        chunks.append(rem)
    head, rest = chunks[-1], reversed(chunks[:-1])
    return sign + str(head) + "".join(str(c).zfill(_CHUNK_DIGITS) for c in rest)


@dataclass(frozen=True)
class Cell:
    kind: Kind
    payload: Any

    @classmethod
    def of(cls, value: Any) -> "Cell":
        # bool is an int subclass but is not a loggable integer
        if isinstance(value, str):
            return cls(Kind.TEXT, value)
        if isinstance(value, bool):
            return cls(Kind.UNSUPPORTED, value)
        if isinstance(value, int):
            return cls(Kind.INT, value)
        if isinstance(value, float):
            return cls(Kind.FLOAT, value)
        return cls(Kind.UNSUPPORTED, value)

    @property
    def supported(self) -> bool:
        return self.kind is not Kind.UNSUPPORTED

    def render(self) -> Tuple[str, bool]:
        """Return ``(text, ok)``; ``ok`` is False only for unsupported payloads."""
        if self.kind is Kind.TEXT:
            return self.payload, True
        if self.kind is Kind.INT:
            return _int_text(int(self.payload)), True
        if self.kind is Kind.FLOAT:
            return str(float(self.payload)), True
        return "", False


__all__ = ["Cell", "Kind"]
