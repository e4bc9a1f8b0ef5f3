"""JSON log output for the reporter process."""

import logging
import sys
from typing import IO, Optional

from pythonjsonlogger.json import JsonFormatter

LOG_FORMAT = '%(asctime)s %(name)s %(levelname)s %(message)s'


def setup_logger(
    name: str = "collectd_reporter",
    level: str = "INFO",
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Send ``name``'s records to ``stream`` (stdout by default) as JSON lines.

    Calling it again for the same name replaces the handler, so a level
    change from the command line does not duplicate output. Fields passed
    through ``extra=`` (target, samples_sent, metric) become JSON keys.

    Args:
        name: Logger name
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        stream: Output stream

    Returns:
        logging.Logger: Configured logger instance
    """
    logger = logging.getLogger(name)
    logger.setLevel(level.upper())

    handler = logging.StreamHandler(stream or sys.stdout)
    handler.setFormatter(JsonFormatter(LOG_FORMAT, timestamp=True))
    logger.handlers = [handler]

    # Child loggers (reporter, collectors) reach this handler; the root does not
    logger.propagate = False

    return logger
