"""Centralized logging configuration for ``amazon_wrapped``.

- ``configure_logging(...)`` attaches one ``StreamHandler`` to the package
  root logger (``"amazon_wrapped"``). Entrypoints (the CLI) call it once.
- ``get_logger(name)`` returns a named logger and guarantees a ``NullHandler``
  on the package root while nothing has been configured, so library use stays
  silent.
- ``resolve_logger(logger, name)`` backs the optional ``logger=`` parameter
  the computation functions accept: callers may inject their own logger,
  otherwise the module logger is used.

Library modules never attach handlers themselves.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

from .config import ENV_LOG_LEVEL

_PKG_LOGGER_NAME = "amazon_wrapped"
_DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"
_configured = False


def _parse_level(level: int | str | None) -> int:
    if isinstance(level, int):
        return level
    if isinstance(level, str):
        name = level.strip().upper()
        if name.isdigit():
            return int(name)
        numeric = logging.getLevelName(name)
        if isinstance(numeric, int):
            return numeric
        return logging.INFO
    env_val = os.getenv(ENV_LOG_LEVEL)
    if env_val:
        return _parse_level(env_val)
    return logging.WARNING


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Configure the package root logger once per process.

    ``level`` falls back to ``AMAZON_WRAPPED_LOG_LEVEL`` and then to
    ``WARNING``; the CLI is quiet unless asked otherwise.
    """

    global _configured
    if _configured:
        return

    logger = logging.getLogger(_PKG_LOGGER_NAME)
    for h in list(logger.handlers):
        if isinstance(h, logging.NullHandler):
            logger.removeHandler(h)

    resolved = _parse_level(level)
    handler = logging.StreamHandler(stream)
    handler.setLevel(resolved)
    handler.setFormatter(logging.Formatter(fmt or _DEFAULT_FORMAT))

    logger.setLevel(resolved)
    logger.addHandler(handler)
    logger.propagate = False

    _configured = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(_PKG_LOGGER_NAME)
    if not _configured and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


def resolve_logger(logger: logging.Logger | None, name: str) -> logging.Logger:
    return logger if logger is not None else get_logger(name)


__all__ = ["configure_logging", "get_logger", "resolve_logger"]
