"""
Logging for the crawler.

Everything goes through the ``od-crawler`` logger.  The console handler
uses ``colorlog`` for level colours and additionally highlights the
``[CATEGORY]`` tag a message starts with; ``--debug`` adds the worker
thread name so interleaved Jobs can be told apart.  An optional file
handler always records DEBUG detail without colour codes.
"""

import logging
from pathlib import Path

import colorlog

log = logging.getLogger("od-crawler")

_CONSOLE_FMT = "%(log_color)s%(asctime)s [%(levelname)s]%(reset)s %(message)s"
_CONSOLE_DEBUG_FMT = (
    "%(log_color)s%(asctime)s [%(levelname)s]%(reset)s "
    "%(threadName)-10s %(message)s"
)
_FILE_FMT = "%(asctime)s %(levelname)-8s %(threadName)s %(message)s"

_LEVEL_COLOURS = {
    "DEBUG":    "cyan",
    "INFO":     "green",
    "WARNING":  "yellow",
    "ERROR":    "red",
    "CRITICAL": "bold_red",
}

_ANSI_RESET = "\033[0m"
_CATEGORY_STYLES: dict[str, str] = {
    "[TASK]":   "\033[1;32m",   # task start / summary
    "[DIR]":    "\033[34m",     # listing expanded
    "[FILE]":   "\033[90m",     # file probed
    "[SKIP]":   "\033[90m",     # task with unsupported scheme
    "[FAIL]":   "\033[1;31m",   # job failed
    "[429]":    "\033[33m",     # rate-limit backoff
    "[REMOTE]": "\033[36m",     # task source traffic
}


def _apply_category_styles(msg: str) -> str:
    """Colour every known ``[CATEGORY]`` tag found in *msg*."""
    for tag, style in _CATEGORY_STYLES.items():
        if tag in msg:
            msg = msg.replace(tag, f"{style}{tag}{_ANSI_RESET}")
    return msg


class _CategoryFormatter(colorlog.ColoredFormatter):
    """``colorlog.ColoredFormatter`` that also highlights ``[CATEGORY]``
    tags inside the message."""

    def format(self, record: logging.LogRecord) -> str:
        return _apply_category_styles(super().format(record))


def setup_logging(debug: bool = False, log_file: str | None = None) -> None:
    """Attach the console (and optional file) handler to :data:`log`.

    Safe to call more than once; previous handlers are replaced.

    Parameters
    ----------
    debug : bool
        Show DEBUG records on the console (default is INFO).
    log_file : str | None
        Also write every record, DEBUG included, to this path.
    """
    console_level = logging.DEBUG if debug else logging.INFO
    log.setLevel(logging.DEBUG if log_file else console_level)
    for old in list(log.handlers):
        log.removeHandler(old)
        old.close()
    log.propagate = False

    console = colorlog.StreamHandler()
    console.setLevel(console_level)
    console.setFormatter(_CategoryFormatter(
        _CONSOLE_DEBUG_FMT if debug else _CONSOLE_FMT,
        datefmt="%H:%M:%S",
        log_colors=_LEVEL_COLOURS,
    ))
    log.addHandler(console)

    if not log_file:
        return
    path = Path(log_file)
    path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(path, encoding="utf-8")
    file_handler.setLevel(logging.DEBUG)
    file_handler.setFormatter(logging.Formatter(_FILE_FMT))
    log.addHandler(file_handler)
    log.debug("Logging to file: %s", path.resolve())
