"""Console logging for deployment progress."""

from __future__ import annotations

import logging
import sys
from typing import TextIO

RESET = "\033[0m"

TONE_COLORS = {
    "banner": "\033[1m",
    "step": "\033[33m",
    "success": "\033[32m",
    "info": "\033[34m",
    "command": "\033[36m",
    "warning": "\033[33m",
    "error": "\033[31m",
}

# ``extra`` payloads for progress records.
BANNER = {"tone": "banner"}
STEP = {"tone": "step"}
SUCCESS = {"tone": "success"}
INFO = {"tone": "info"}
COMMAND = {"tone": "command"}


class ColorFormatter(logging.Formatter):
    """Wrap each record in the ANSI colour of its tone (or level)."""

    def __init__(self, fmt: str | None = None, *, use_color: bool = True) -> None:
        super().__init__(fmt)
        self.use_color = use_color

    def format(self, record: logging.LogRecord) -> str:
        message = super().format(record)
        if not self.use_color:
            return message
        tone = getattr(record, "tone", None)
        if tone is None:
            if record.levelno >= logging.ERROR:
                tone = "error"
            elif record.levelno >= logging.WARNING:
                tone = "warning"
        color = TONE_COLORS.get(tone or "")
        if color is None:
            return message
        return f"{color}{message}{RESET}"


class _BelowLevel(logging.Filter):
    def __init__(self, level: int) -> None:
        super().__init__()
        self.level = level

    def filter(self, record: logging.LogRecord) -> bool:
        return record.levelno < self.level


def configure_logging(
    level: str,
    *,
    color: bool = True,
    stream: TextIO | None = None,
    error_stream: TextIO | None = None,
) -> None:
    """Configure root logging for a deployment run.

    Progress goes to stdout undecorated; warnings and errors go to stderr with
    their level name so failures stand out in CI logs.
    """

    out_handler = logging.StreamHandler(stream or sys.stdout)
    out_handler.addFilter(_BelowLevel(logging.WARNING))
    out_handler.setFormatter(ColorFormatter("%(message)s", use_color=color))

    err_handler = logging.StreamHandler(error_stream or sys.stderr)
    err_handler.setLevel(logging.WARNING)
    err_handler.setFormatter(ColorFormatter("[%(levelname)s] %(message)s", use_color=color))

    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        handlers=[out_handler, err_handler],
        force=True,
    )


__all__ = [
    "BANNER",
    "COMMAND",
    "ColorFormatter",
    "INFO",
    "STEP",
    "SUCCESS",
    "configure_logging",
]
