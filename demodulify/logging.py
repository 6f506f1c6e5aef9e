"""Logging utilities for demodulify."""

from __future__ import annotations

import logging
import os
from pathlib import Path

from .errors import ConfigurationError

_LOGGER_NAME = "demodulify"
_ENV_VAR = "LOGLEVEL"

LOG_LEVELS = {
    # warnings and errors always surface, even when silent
    "silent": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the demodulify hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def configure_logging(
    *, verbose: bool = False, log_file: Path | None = None
) -> logging.Logger:
    """Configure the demodulify logger with console output and optional file sink."""
    level = logging.DEBUG if verbose else logging.INFO
    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(level)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(level)
    stream_handler.setFormatter(logging.Formatter("[demodulify] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(level)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


def resolve_log_level(configured: str | None, *, logger: logging.Logger | None = None) -> str:
    """Return the effective level name, honouring the LOGLEVEL environment override.

    Raises ConfigurationError when LOGLEVEL holds an unknown value.
    """
    raw = os.environ.get(_ENV_VAR)
    if raw:
        candidate = raw.strip().lower()
        if candidate not in LOG_LEVELS:
            expected = ", ".join(LOG_LEVELS)
            raise ConfigurationError(
                f"Invalid {_ENV_VAR} value '{raw}'. Expected one of: {expected}."
            )
        (logger or get_logger()).warning(
            "Log level overridden via environment variable %s=%s", _ENV_VAR, raw
        )
        return candidate
    return configured or "info"


class PipelineLogger(logging.LoggerAdapter):
    """Logger adapter carrying its own threshold.

    Lets several plugin instances in one process log at different levels
    without touching the shared logger configuration.
    """

    def __init__(self, logger: logging.Logger, level: int) -> None:
        super().__init__(logger, {})
        self.threshold = level

    def isEnabledFor(self, level: int) -> bool:  # noqa: N802 - logging API
        return level >= self.threshold and self.logger.isEnabledFor(level)


def bind_logger(name: str, level: str) -> PipelineLogger:
    """Return a PipelineLogger for ``name`` filtered at the named level."""
    try:
        threshold = LOG_LEVELS[level]
    except KeyError as exc:
        raise ConfigurationError(f"Unknown log level '{level}'") from exc
    return PipelineLogger(get_logger(name), threshold)


__all__ = [
    "LOG_LEVELS",
    "PipelineLogger",
    "bind_logger",
    "configure_logging",
    "get_logger",
    "resolve_log_level",
]
