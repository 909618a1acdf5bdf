import logging
import sys

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"

logger = logging.getLogger("chatrelay")


def setup_logging(level: str = "INFO") -> None:
    """Attach a stream handler to the package logger. Safe to call more than once."""
    logger.setLevel(level.upper())
    if not any(getattr(h, "_chatrelay", False) for h in logger.handlers):
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT))
        handler._chatrelay = True
        logger.addHandler(handler)
