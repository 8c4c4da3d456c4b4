"""Logging setup: console and log-file handlers, plus the SUCCESS level."""

from __future__ import annotations

import logging
import sys
from pathlib import Path

from dotlayer.errors import ConfigError

SUCCESS = 25
logging.addLevelName(SUCCESS, "SUCCESS")

_ROOT = "dotlayer"

# Level -> (marker, ANSI colour).
_STYLES = {
    logging.DEBUG: ("·", "\033[2m"),
    logging.INFO: ("ℹ️ ", "\033[36m"),
    SUCCESS: ("🔗", "\033[32m"),
    logging.WARNING: ("⚠️ ", "\033[33m"),
    logging.ERROR: ("✗", "\033[31m"),
}
_RESET = "\033[0m"


class ConsoleFormatter(logging.Formatter):
    """``[HH:MM:SS] <marker> message``, coloured when *color* is set."""

    def __init__(self, color: bool = False) -> None:
        super().__init__(datefmt="%H:%M:%S")
        self.color = color

    def format(self, record: logging.LogRecord) -> str:
        marker, ansi = _STYLES.get(record.levelno, _STYLES[logging.ERROR])
        stamp = self.formatTime(record, self.datefmt)
        line = f"[{stamp}] {marker} {record.getMessage()}"
        if self.color:
            line = f"{ansi}{line}{_RESET}"
        return line


class _ConsoleFilter(logging.Filter):
    """Drop records logged with ``extra={"console": False}``."""

    def filter(self, record: logging.LogRecord) -> bool:
        return getattr(record, "console", True)


def setup_logging(verbose: bool = False, log_file: Path | None = None) -> logging.Logger:
    """Configure the ``dotlayer`` logger.

    Console output goes to stderr at INFO (DEBUG when *verbose*).  When
    *log_file* is given every record, DEBUG and console-suppressed ones
    included, is appended to it.  Calling again replaces the previous
    handlers.  Raises ConfigError if *log_file* cannot be opened.
    """
    logger = logging.getLogger(_ROOT)
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    logger.setLevel(logging.DEBUG)

    console = logging.StreamHandler(sys.stderr)
    console.setLevel(logging.DEBUG if verbose else logging.INFO)
    console.setFormatter(ConsoleFormatter(color=sys.stderr.isatty()))
    console.addFilter(_ConsoleFilter())
    logger.addHandler(console)

    if log_file is not None:
        try:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            fh = logging.FileHandler(log_file, mode="a", encoding="utf-8")
        except OSError as e:
            raise ConfigError(f"Cannot open log file {log_file}: {e}") from e
        fh.setLevel(logging.DEBUG)
        fh.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(message)s")
        )
        logger.addHandler(fh)

    return logger


def get_logger(name: str) -> logging.Logger:
    """Return a child of the ``dotlayer`` logger."""
    return logging.getLogger(f"{_ROOT}.{name}")
