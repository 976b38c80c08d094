from enum import IntEnum
from typing import Union


class Level(IntEnum):
    DEBUG = 0
    INFO = 1
    WARN = 2
    ERROR = 3

    @property
    def tag(self) -> str:
        return LEVEL_TAGS[self]

    @classmethod
    def parse(cls, value: Union["Level", str]) -> "Level":
        """Resolve a Level from an instance or a case-insensitive name."""
        if isinstance(value, Level):
            return value
        key = str(value).strip().upper()
        try:
            return _ALIASES[key]
        except KeyError:
            raise ValueError(
                f"unknown level {value!r}; expected one of {', '.join(m.name for m in cls)}"
            ) from None


# Fixed-width tags written in front of every line
LEVEL_TAGS = {
    Level.DEBUG: "[DEBUG]:",
    Level.INFO: "[INFOS]:",
    Level.WARN: "[WARNS]:",
    Level.ERROR: "[ERROR]:",
}

_ALIASES = {
    "DEBUG": Level.DEBUG,
    "DEBUGS": Level.DEBUG,
    "INFO": Level.INFO,
    "INFOS": Level.INFO,
    "WARN": Level.WARN,
    "WARNS": Level.WARN,
    "WARNING": Level.WARN,
    "ERROR": Level.ERROR,
    "ERRORS": Level.ERROR,
    "ERR": Level.ERROR,
}

__all__ = ["Level", "LEVEL_TAGS"]
