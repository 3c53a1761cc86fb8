import logging
import os
import sys

LOG_FORMAT = "[%(asctime)s] %(levelname)s {%(filename)s:%(lineno)d} - %(message)s"

# stdout carries the MCP stdio stream, so everything goes to stderr.
logger = logging.getLogger("accessibility_tester")

if not logger.handlers:
    _handler = logging.StreamHandler(sys.stderr)
    _handler.setFormatter(logging.Formatter(LOG_FORMAT))
    logger.addHandler(_handler)
    logger.propagate = False


def configure_logger(level: str) -> None:
    """Set the log level of the package logger, e.g. "DEBUG" or "WARNING"."""
    resolved = logging.getLevelName(level.upper())
    if not isinstance(resolved, int):
        logger.warning("Unknown log level %s, keeping %s", level, logging.getLevelName(logger.level))
        return
    logger.setLevel(resolved)


logger.setLevel(logging.INFO)
configure_logger(os.environ.get("LOG_LEVEL", "INFO"))
