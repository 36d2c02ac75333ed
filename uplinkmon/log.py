"""Logging configuration for the monitor."""

from __future__ import annotations

import logging

# Console threshold while the chart owns the terminal.
CHART_CONSOLE_LEVEL = "ERROR"


def _level(name: str) -> int:
    return getattr(logging, name.upper(), logging.WARNING)


def make_handler(level: str = "WARNING", filename: str | None = None,
                 console_floor: str | None = None) -> logging.Handler:
    """File handler when ``filename`` is given, else stderr.

    ``console_floor`` raises the stderr threshold so warnings do not land on
    top of the chart; it has no effect on a file.
    """
    if filename:
        handler: logging.Handler = logging.FileHandler(filename)
        handler.setLevel(_level(level))
    else:
        handler = logging.StreamHandler()
        floor = _level(console_floor) if console_floor else logging.NOTSET
        handler.setLevel(max(_level(level), floor))
    return handler


def setup_logging(level: str = "WARNING", filename: str | None = None,
                  console_floor: str | None = None) -> logging.Logger:
    """Configure the root handler once and return the package logger."""
    logging.basicConfig(
        level=_level(level),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        handlers=[make_handler(level, filename, console_floor)],
    )
    logger = logging.getLogger("uplinkmon")
    logger.setLevel(_level(level))

    # plotext and psutil stay quiet unless something is actually wrong
    logging.getLogger("plotext").setLevel(logging.WARNING)
    logging.getLogger("psutil").setLevel(logging.WARNING)

    return logger
