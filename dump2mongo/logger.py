import logging
import sys

# quiet still shows errors; verbose echoes every skipped or failed unit
LOG_LEVELS = {
    "quiet": logging.ERROR,
    "info": logging.INFO,
    "verbose": logging.DEBUG,
}

PACKAGE_LOGGER = "dump2mongo"


def configure_logging(level: str = "info") -> logging.Logger:
    """Attach a stdout handler to the package logger and set its level."""
    logger = logging.getLogger(PACKAGE_LOGGER)
    logger.setLevel(LOG_LEVELS.get(level, logging.INFO))
    if logger.handlers:
        return logger

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(logging.Formatter("%(message)s"))
    logger.addHandler(handler)
    logger.propagate = False
    return logger
