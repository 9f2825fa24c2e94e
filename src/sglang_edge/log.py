"""Tagged, colored log output for the installer."""

from typing import Optional

from rich.console import Console
from rich.text import Text

LEVELS = {"debug": 10, "info": 20, "warn": 30, "warning": 30, "error": 40}

BANNER_RULE = "=" * 80


class Logger:
    """Write INFO/WARN/ERROR lines to a rich console.

    Errors and successes are always shown; ``level`` only filters debug,
    info and warning lines.
    """

    def __init__(self, level: str = "info", console: Optional[Console] = None):
        if level not in LEVELS:
            raise ValueError(f"Unknown log level: {level}")
        self.level = level
        self.console = console or Console(highlight=False)

    def _enabled(self, level: str) -> bool:
        return LEVELS[level] >= LEVELS[self.level]

    def _emit(self, tag: str, style: str, message: str):
        self.console.print(Text.assemble((f"[{tag}]", style), " ", message), soft_wrap=True)

    def debug(self, message: str):
        if self._enabled("debug"):
            self._emit("DEBUG", "blue", message)

    def info(self, message: str):
        if self._enabled("info"):
            self._emit("INFO", "green", message)

    def success(self, message: str):
        self._emit("INFO", "green", f"{message} ✓")

    def warn(self, message: str):
        if self._enabled("warning"):
            self._emit("WARN", "yellow", message)

    def error(self, message: str):
        self._emit("ERROR", "red", message)

    def plain(self, message: str = ""):
        self.console.print(Text(message), soft_wrap=True)

    def section(self, title: str):
        self.plain(BANNER_RULE)
        self.console.print(Text(f"  {title}", style="bold"), soft_wrap=True)
        self.plain(BANNER_RULE)
        self.plain()
