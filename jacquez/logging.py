"""Logging setup shared by the action, the CLI and the webhook service."""

from __future__ import annotations

import logging
from pathlib import Path

_ROOT = "jacquez"

CONSOLE_FORMAT = "[jacquez] %(levelname)s %(message)s"
# Verbose runs also name the subsystem logger.
VERBOSE_FORMAT = "[jacquez] %(levelname)s %(name)s: %(message)s"
FILE_FORMAT = "%(asctime)s %(levelname)s %(name)s: %(message)s"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return ``jacquez`` or one of its subsystem loggers, e.g. ``jacquez.github``."""
    return logging.getLogger(f"{_ROOT}.{name}" if name else _ROOT)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """(Re)configure the ``jacquez`` logger.

    Safe to call more than once: the CLI configures logging from ``--verbose``
    and the action reconfigures it after reading ``detailed-logging``.
    """
    level = logging.DEBUG if verbose else logging.INFO
    root = logging.getLogger(_ROOT)
    root.setLevel(level)
    root.propagate = False

    for handler in list(root.handlers):
        root.removeHandler(handler)
        handler.close()

    console = logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(logging.Formatter(VERBOSE_FORMAT if verbose else CONSOLE_FORMAT))
    root.addHandler(console)

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setLevel(level)
        sink.setFormatter(logging.Formatter(FILE_FORMAT))
        root.addHandler(sink)

    return root


__all__ = ["configure_logging", "get_logger"]
