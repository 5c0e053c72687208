"""Logging setup used by ``Engine.run``.

Every ron module logs through a child of the ``ron`` logger
(``ron.server``, ``ron.templating``, ``ron.engine``). ``configure_logging``
attaches two handlers to that parent: one to stdout and one to a file
named after the current date, ``<log_dir>/log<YYYY-MM-DD>.log``.
"""

import logging
import sys
from datetime import date
from pathlib import Path

_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"

# Marks handlers installed here so a second call replaces them
_MARKER = "_ron_handler"


def log_file_path(log_dir: str | Path, today: date | None = None) -> Path:
    """Dated log file path inside *log_dir*."""
    today = today or date.today()
    return Path(log_dir) / f"log{today.isoformat()}.log"


def configure_logging(level: str | int = "debug", log_dir: str | Path | None = "logs") -> logging.Logger:
    """Install stdout and dated-file handlers on the ``ron`` logger.

    Pass ``log_dir=None`` to log to stdout only. Calling this again
    swaps the previous handlers out.
    """
    logger = logging.getLogger("ron")
    if isinstance(level, str):
        level = logging.getLevelNamesMapping()[level.upper()]
    logger.setLevel(level)

    for handler in list(logger.handlers):
        if getattr(handler, _MARKER, False):
            logger.removeHandler(handler)
            handler.close()

    formatter = logging.Formatter(_FORMAT)
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    if log_dir is not None:
        path = log_file_path(log_dir)
        path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(path, encoding="utf-8"))

    for handler in handlers:
        handler.setFormatter(formatter)
        setattr(handler, _MARKER, True)
        logger.addHandler(handler)
    return logger
