"""Turn a LogTask into its output line.

The first cell is the template; every later cell fills the next ``{}``
placeholder, scanning forward only. Text we insert (or append when the
placeholders run out) is never rescanned, so a value that itself contains
``{}`` cannot trigger another substitution.
"""
from __future__ import annotations

from typing import Iterable, Optional

from .task import LogTask

PLACEHOLDER = "{}"


def substitute(template: str, args: Iterable[str]) -> str:
    result = template
    pos = 0
    for text in args:
        idx = result.find(PLACEHOLDER, pos)
        if idx == -1:
            result = f"{result} {text}"
            pos = len(result)
        else:
            result = result[:idx] + text + result[idx + len(PLACEHOLDER):]
            pos = idx + len(text)
    return result


def _rendered_args(task: LogTask) -> Iterable[str]:
    for cell in task.cells[1:]:
        text, ok = cell.render()
        if ok:  # unsupported arguments are skipped, not fatal
            yield text


def format_task(task: LogTask) -> Optional[str]:
    """Return the finished line, or None when the template cannot be rendered."""
    tag = task.level.tag
    if not task.cells:
        return tag
    template, ok = task.cells[0].render()
    if not ok:
        return None
    return tag + substitute(template, _rendered_args(task))


__all__ = ["PLACEHOLDER", "format_task", "substitute"]
