"""
Logging setup for the dashboard.

Streamlit re-executes the app script on every interaction, so setup is
idempotent: the handler is installed once on the package logger.
"""
import logging
import sys

PACKAGE_LOGGER = "cap_dashboard"


class DetailedFormatter(logging.Formatter):
    """Detailed human-readable formatter"""

    def __init__(self):
        super().__init__(
            fmt='%(asctime)s | %(levelname)-8s | %(name)-24s | %(funcName)-18s | %(message)s',
            datefmt='%Y-%m-%d %H:%M:%S'
        )


def setup_logging(level: str = "INFO") -> logging.Logger:
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(getattr(logging, level.upper(), logging.INFO))

    if not any(getattr(h, "_cap_dashboard", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(DetailedFormatter())
        handler._cap_dashboard = True
        logger.addHandler(handler)
        logger.propagate = False

    return logger
