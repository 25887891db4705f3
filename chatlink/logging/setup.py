"""Process-wide logging configuration."""

from __future__ import annotations

import contextlib
import logging

from .context import install_log_context


def configure_logging(level: str | None = None) -> None:
    """Initialize root logging configuration once per process."""
    from chatlink.config.logging import (  # noqa: PLC0415
        CHATLINK_LOG_DATEFMT,
        CHATLINK_LOG_FORMAT,
        CHATLINK_LOG_LEVEL,
    )

    resolved = (level or CHATLINK_LOG_LEVEL).upper()
    install_log_context()
    root_logger = logging.getLogger()
    if not root_logger.handlers:
        logging.basicConfig(level=resolved, format=CHATLINK_LOG_FORMAT, datefmt=CHATLINK_LOG_DATEFMT)
    else:
        root_logger.setLevel(resolved)
        for handler in root_logger.handlers:
            with contextlib.suppress(Exception):
                handler.setLevel(resolved)
                handler.setFormatter(logging.Formatter(CHATLINK_LOG_FORMAT, datefmt=CHATLINK_LOG_DATEFMT))

    logging.getLogger("chatlink").setLevel(resolved)
    # websockets logs every frame at DEBUG
    logging.getLogger("websockets").setLevel("INFO" if resolved == "DEBUG" else resolved)


__all__ = ["configure_logging"]
