"""Logging for the relay: colored stderr console plus an optional rotating file.

Every handler carries a `ContextFilter`, so each line is prefixed with the
``[op:req:fax]`` tag of the webhook request or refresh tick that emitted it.
"""

from __future__ import annotations

import atexit
import logging
import queue
import sys
from logging.handlers import QueueHandler, QueueListener, RotatingFileHandler
from pathlib import Path

from faxrelay.log_context import ContextFilter

LOG_FILE_NAME = "faxrelay.log"
ROTATE_BYTES = 5 * 1024 * 1024
ROTATE_KEEP = 3

_CONSOLE_FORMAT = "%(asctime)s %(levelname)s %(ctx)s%(message)s"
_CONSOLE_DATE = "%H:%M:%S"
_FILE_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(ctx)s%(message)s"

# Twilio's client logs every HTTP request body at INFO.
_QUIET_LOGGERS = ("twilio", "twilio.http_client", "aiohttp.access")

_LEVEL_COLORS = {
    "DEBUG": "\x1b[36m",
    "INFO": "\x1b[32m",
    "WARNING": "\x1b[33m",
    "ERROR": "\x1b[31m",
    "CRITICAL": "\x1b[1;31m",
}
_DIM = "\x1b[2m"
_RESET = "\x1b[0m"

logger = logging.getLogger(__name__)

_file_listener: QueueListener | None = None


class _ColorFormatter(logging.Formatter):
    """Console formatter: padded level name, colored level and dimmed context tag."""

    def __init__(self, use_color: bool) -> None:
        super().__init__(_CONSOLE_FORMAT, datefmt=_CONSOLE_DATE)
        self._use_color = use_color

    def formatMessage(self, record: logging.LogRecord) -> str:  # noqa: N802
        levelname = record.levelname
        ctx = getattr(record, "ctx", "")
        padded = f"{levelname:<8}"
        if self._use_color:
            record.levelname = f"{_LEVEL_COLORS.get(levelname, '')}{padded}{_RESET}"
            record.ctx = f"{_DIM}{ctx}{_RESET}" if ctx else ""
        else:
            record.levelname = padded
            record.ctx = ctx
        try:
            return super().formatMessage(record)
        finally:
            record.levelname = levelname
            record.ctx = ctx


def _close_file_log() -> None:
    global _file_listener  # noqa: PLW0603
    if _file_listener is None:
        return
    _file_listener.stop()
    for handler in _file_listener.handlers:
        handler.close()
    _file_listener = None


atexit.register(_close_file_log)


def _open_file_log(log_dir: Path) -> QueueHandler:
    """Start a background writer for ``faxrelay.log`` and return its queue front."""
    global _file_listener  # noqa: PLW0603
    log_dir.mkdir(parents=True, exist_ok=True)
    rotating = RotatingFileHandler(
        log_dir / LOG_FILE_NAME,
        maxBytes=ROTATE_BYTES,
        backupCount=ROTATE_KEEP,
        encoding="utf-8",
    )
    rotating.setFormatter(logging.Formatter(_FILE_FORMAT))

    records: queue.Queue[logging.LogRecord] = queue.Queue()
    _file_listener = QueueListener(records, rotating)
    _file_listener.start()
    return QueueHandler(records)


def setup_logging(
    level: int = logging.INFO,
    verbose: bool = False,
    log_dir: Path | None = None,
) -> None:
    """Install the console handler and, with *log_dir*, the rotating file log.

    Safe to call again: the previous handlers and file writer are replaced.
    """
    if verbose:
        level = logging.DEBUG

    _close_file_log()

    console = logging.StreamHandler(sys.stderr)
    console.setFormatter(_ColorFormatter(use_color=sys.stderr.isatty()))
    handlers: list[logging.Handler] = [console]
    if log_dir is not None:
        handlers.append(_open_file_log(log_dir))

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level)
    context = ContextFilter()
    for handler in handlers:
        handler.addFilter(context)
        root.addHandler(handler)

    for name in _QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logger.info("Logging initialized (level=%s)", logging.getLevelName(level))
