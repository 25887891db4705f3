"""Application logging configuration values."""

import os


CHATLINK_LOG_LEVEL = (os.getenv("CHATLINK_LOG_LEVEL", "INFO") or "INFO").upper()
CHATLINK_LOG_FORMAT = os.getenv(
    "CHATLINK_LOG_FORMAT",
    "%(levelname)s %(asctime)s [%(name)s:%(lineno)d] chat=%(chat_id)s msg=%(message_id)s %(message)s",
)
CHATLINK_LOG_DATEFMT = os.getenv("CHATLINK_LOG_DATEFMT", "%H:%M:%S")


__all__ = [
    "CHATLINK_LOG_LEVEL",
    "CHATLINK_LOG_FORMAT",
    "CHATLINK_LOG_DATEFMT",
]
