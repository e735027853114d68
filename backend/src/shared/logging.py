"""Process-wide logging setup."""

import logging
import sys

from shared.config import Settings

_NOISY_LOGGERS = ("aiosqlite", "asyncio", "httpx", "httpcore")


def configure_logging(config: Settings) -> None:
    root_logger = logging.getLogger()
    root_logger.setLevel(config.LOG_LEVEL)

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(config.LOG_FORMAT))
    root_logger.addHandler(handler)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    logging.debug("Logging configured: level=%s", config.LOG_LEVEL)
