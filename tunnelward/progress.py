"""Operator-facing progress notifications.

A sink is any callable taking a status string. Sinks are presentation
only: whatever one raises is logged and dropped so that a broken terminal
never changes how many attempts run or when polling stops.

Example:
    from tunnelward import ConsoleProgress, RemoteExecutor

    executor = RemoteExecutor(transport, progress=ConsoleProgress())
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TypeAlias

from loguru import logger
from rich.console import Console
from rich.text import Text

ProgressSink: TypeAlias = Callable[[str], None]


def notify(sink: ProgressSink | None, message: str) -> None:
    """Deliver ``message`` to ``sink``; sink failures never propagate."""
    if sink is None:
        return
    try:
        sink(message)
    except Exception as e:
        logger.bind(component="progress").warning(
            f"Progress sink failed ({type(e).__name__}: {e}); continuing"
        )


def collect(into: list[str]) -> ProgressSink:
    """Sink that appends every message to ``into``."""
    return into.append


class ConsoleProgress:
    """Prints one status line per notification through a rich Console."""

    __slots__ = ("_console", "_prefix")

    def __init__(self, console: Console | None = None, prefix: str = "tunnelward") -> None:
        self._console = console or Console(stderr=True, highlight=False)
        self._prefix = prefix

    def __call__(self, message: str) -> None:
        line = Text()
        line.append(f"[{self._prefix}] ", style="bright_black")
        line.append(message)
        self._console.print(line)
