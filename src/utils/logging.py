"""Logger factory shared by the data, calculation and dashboard layers."""

from __future__ import annotations

import logging

ROOT_LOGGER_NAME = 'src'
LOG_FORMAT = '%(asctime)s %(levelname)s [%(name)s] %(message)s'

_CONFIGURED = False


def configure_logging(level: int = logging.INFO) -> logging.Logger:
    """Attach a single stream handler to the package root logger."""
    global _CONFIGURED
    root = logging.getLogger(ROOT_LOGGER_NAME)
    if not _CONFIGURED:
        handler = logging.StreamHandler()
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        root.addHandler(handler)
        root.setLevel(level)
        _CONFIGURED = True
    return root


def get_logger(name: str) -> logging.Logger:
    """Return a module logger, configuring the package root on first use."""
    configure_logging()
    return logging.getLogger(name)
