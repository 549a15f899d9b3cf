"""Logging setup shared by the refindex CLI, the HTTP service and the library.

Library modules log under ``refindex.<area>`` (``loaders``, ``index``,
``resolver``, ``cli``, ``service``) and never configure handlers
themselves. Skipped documents are reported at WARNING; corpus, index and
resolution counts at DEBUG, so ``--verbose`` shows how a corpus was read.
"""

from __future__ import annotations

import logging
from pathlib import Path

ROOT_LOGGER = "refindex"
CONSOLE_FORMAT = "[refindex] %(levelname)s %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(area: str | None = None) -> logging.Logger:
    """Logger for one area of refindex, e.g. ``get_logger("loaders")``."""
    return logging.getLogger(f"{ROOT_LOGGER}.{area}" if area else ROOT_LOGGER)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Route refindex records to stderr and, optionally, to ``log_file``.

    Safe to call once per CLI run or service start; earlier handlers are
    closed and replaced so records are never written twice.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(level)
    root.propagate = False

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter(CONSOLE_FORMAT))
    root.addHandler(console)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setFormatter(logging.Formatter(FILE_FORMAT))
        root.addHandler(sink)

    for handler in root.handlers:
        handler.setLevel(level)
    return root


__all__ = ["configure_logging", "get_logger"]
