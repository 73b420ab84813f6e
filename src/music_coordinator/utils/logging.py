"""Colored logging formatter and console logging setup."""

from __future__ import annotations

import logging
import os
import sys

DEFAULT_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
DEFAULT_DATEFMT = "%Y-%m-%d %H:%M:%S"


class ColoredFormatter(logging.Formatter):
    """Logging formatter that applies ANSI color codes to the levelname field.

    Colors are disabled when the ``NO_COLOR`` environment variable is set or
    when the output stream is not a TTY (e.g. redirected to a file). Records
    logged with ``extra={"guild_id": ...}`` get a ``[guild N]`` prefix on the
    message.
    """

    COLORS: dict[int, str] = {
        logging.DEBUG: "\033[36m",     # cyan
        logging.INFO: "\033[32m",      # green
        logging.WARNING: "\033[33m",   # yellow
        logging.ERROR: "\033[31m",     # red
        logging.CRITICAL: "\033[1;31m",  # bold red
    }
    RESET = "\033[0m"

    def __init__(self, *args, stream=None, **kwargs) -> None:
        super().__init__(*args, **kwargs)
        self._stream = stream

    def _use_color(self) -> bool:
        if os.environ.get("NO_COLOR") is not None:
            return False
        stream = self._stream or sys.stdout
        return hasattr(stream, "isatty") and stream.isatty()

    def format(self, record: logging.LogRecord) -> str:
        guild_id = getattr(record, "guild_id", None)
        use_color = self._use_color()
        if guild_id is not None or use_color:
            record = logging.makeLogRecord(record.__dict__)
        if guild_id is not None:
            record.msg = f"[guild {guild_id}] {record.getMessage()}"
            record.args = None
        if use_color:
            color = self.COLORS.get(record.levelno, "")
            record.levelname = f"{color}{record.levelname}{self.RESET}"
        return super().format(record)


def setup_logging(log_level: str = "INFO") -> logging.Handler:
    """Install a colored stderr handler on the root logger."""
    resolved_level = getattr(logging, log_level.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(
        ColoredFormatter(DEFAULT_FORMAT, datefmt=DEFAULT_DATEFMT, stream=sys.stderr)
    )

    root = logging.getLogger()
    for existing in list(root.handlers):
        if isinstance(existing.formatter, ColoredFormatter):
            root.removeHandler(existing)
    root.addHandler(handler)
    root.setLevel(resolved_level)

    # discord.py's gateway chatter drowns out playback logs below WARNING.
    logging.getLogger("discord").setLevel(max(resolved_level, logging.WARNING))
    return handler
