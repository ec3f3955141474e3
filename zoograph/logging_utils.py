"""Logging utilities for zoograph facilities.

Provides color-coded terminal output per severity and an injectable
``EventLog`` that services receive explicitly instead of reaching for a
process-wide logger.
"""

import os
from datetime import datetime
from enum import Enum, IntFlag
from pathlib import Path
from typing import IO, Optional


class Color(Enum):
    """ANSI color codes for terminal output."""

    GRAY = "\033[90m"      # Debug chatter
    GREEN = "\033[92m"     # Info / committed changes
    YELLOW = "\033[93m"    # Refused operations
    RED = "\033[91m"       # Errors (store failures, bad input)
    CYAN = "\033[96m"      # Metadata / summaries

    # Formatting
    BOLD = "\033[1m"
    RESET = "\033[0m"


class Level(IntFlag):
    """Severity levels. Flags so several can be toggled in one call."""

    DEBUG = 1
    INFO = 2
    WARN = 4
    ERROR = 8

    @classmethod
    def parse(cls, name: str) -> "Level":
        """Map a level name (``"info"``, ``"WARNING"``...) to a Level."""
        key = name.strip().upper()
        if key == "WARNING":
            key = "WARN"
        try:
            return cls[key]
        except KeyError:
            raise ValueError(f"Unknown log level: {name!r}") from None


ALL_LEVELS = Level.DEBUG | Level.INFO | Level.WARN | Level.ERROR

_LEVEL_COLORS = {
    Level.DEBUG: Color.GRAY,
    Level.INFO: Color.GREEN,
    Level.WARN: Color.YELLOW,
    Level.ERROR: Color.RED,
}


def colored(text: str, color: Color, bold: bool = False) -> str:
    """Wrap text in ANSI color codes if colors are enabled.

    Args:
        text: Text to colorize
        color: Color to apply
        bold: Whether to make text bold

    Returns:
        Colorized text if ZOO_NO_COLOR is not set, otherwise plain text
    """
    if os.getenv("ZOO_NO_COLOR"):
        return text

    prefix = color.value
    if bold:
        prefix = Color.BOLD.value + prefix

    return f"{prefix}{text}{Color.RESET.value}"


def levels_from(minimum: Level) -> Level:
    """Return ``minimum`` and every more severe level as one flag set."""
    enabled = Level(0)
    for level in (Level.DEBUG, Level.INFO, Level.WARN, Level.ERROR):
        if level >= minimum:
            enabled |= level
    return enabled


class EventLog:
    """Severity-filtered event log passed to each service.

    Console lines are colored by severity; an optional log file receives
    the same lines, timestamped and without color codes. Levels can be
    switched on and off individually at runtime.

    Lifecycle: build once at startup (``EventLog.from_config()`` or directly),
    hand the instance to the facility and its services, ``close()`` at
    shutdown to flush the file sink.
    """

    def __init__(
        self,
        levels: Level = ALL_LEVELS,
        log_file: Optional[Path | str] = None,
        console: bool = True,
    ):
        self.levels = levels
        self.console = console
        self.log_file = Path(log_file) if log_file else None
        self._handle: Optional[IO[str]] = None
        if self.log_file is not None:
            self.log_file.parent.mkdir(parents=True, exist_ok=True)
            self._handle = self.log_file.open("a", encoding="utf-8")

    @classmethod
    def from_config(cls) -> "EventLog":
        from .config import Config

        return cls(
            levels=levels_from(Level.parse(Config.LOG_LEVEL)),
            log_file=Config.LOG_FILE,
        )

    @classmethod
    def silent(cls) -> "EventLog":
        """An EventLog with every level disabled (tests, embedding)."""
        return cls(levels=Level(0), console=False)

    def is_enabled(self, level: Level) -> bool:
        return bool(self.levels & level)

    def enable(self, levels: Level) -> None:
        self.levels |= levels
        self.info(f"Enabled log levels: {_names(levels)}")

    def disable(self, levels: Level) -> None:
        self.levels &= ~levels
        self.warn(f"Disabled log levels: {_names(levels)}")

    def log(self, level: Level, message: str) -> None:
        if not self.is_enabled(level):
            return
        label = level.name or str(int(level))
        if self.console:
            print(colored(f"[{label}] {message}", _LEVEL_COLORS.get(level, Color.CYAN)))
        if self._handle is not None:
            stamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
            self._handle.write(f"{stamp} [{label}] {message}\n")

    def debug(self, message: str) -> None:
        self.log(Level.DEBUG, message)

    def info(self, message: str) -> None:
        self.log(Level.INFO, message)

    def warn(self, message: str) -> None:
        self.log(Level.WARN, message)

    def error(self, message: str) -> None:
        self.log(Level.ERROR, message)

    def close(self) -> None:
        if self._handle is not None:
            self._handle.flush()
            self._handle.close()
            self._handle = None


def _names(levels: Level) -> str:
    return " ".join(
        level.name
        for level in (Level.DEBUG, Level.INFO, Level.WARN, Level.ERROR)
        if levels & level
    )
