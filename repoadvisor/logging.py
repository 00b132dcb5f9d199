"""Logger hierarchy for the analysis engine."""

from __future__ import annotations

import logging
from pathlib import Path

_LOGGER_NAME = "repoadvisor"
_HANDLER_MARK = "_repoadvisor_handler"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a component logger, e.g. ``repoadvisor.chain``."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *,
    verbose: bool = False,
    log_file: Path | None = None,
    level: int | None = None,
) -> logging.Logger:
    """Attach console and optional file output to the engine logger.

    Only handlers installed by a previous call are replaced; handlers the host
    process added itself are left alone.
    """
    if level is None:
        level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    for handler in list(logger.handlers):
        if getattr(handler, _HANDLER_MARK, False):
            logger.removeHandler(handler)
            handler.close()

    console = logging.StreamHandler()
    console.setFormatter(logging.Formatter("[repoadvisor] %(levelname)s %(name)s: %(message)s"))
    handlers: list[logging.Handler] = [console]

    if log_file is not None:
        sink = logging.FileHandler(log_file, encoding="utf-8")
        sink.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
        handlers.append(sink)

    for handler in handlers:
        handler.setLevel(level)
        setattr(handler, _HANDLER_MARK, True)
        logger.addHandler(handler)
    return logger


__all__ = ["configure_logging", "get_logger"]
