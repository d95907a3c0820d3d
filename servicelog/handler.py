"""
Route stdlib logging into a servicelog Logger.
"""

import logging
from typing import Optional

from servicelog.levels import from_logging_level
from servicelog.logger import Logger


class ECSHandler(logging.Handler):
    """
    Handler that re-emits stdlib log records through a Logger.

    The record level is mapped onto the five servicelog levels
    (CRITICAL becomes FATAL). Exception tracebacks are appended to the
    message text.
    """

    def __init__(self, logger: Logger, level: int = logging.NOTSET):
        super().__init__(level)
        self.logger = logger
        self.setFormatter(logging.Formatter('%(message)s'))

    def emit(self, record: logging.LogRecord) -> None:
        try:
            message = self.format(record)
            self.logger.log(from_logging_level(record.levelno), '%s', message)
        except Exception:
            self.handleError(record)


def redirect_logging(
    logger: Logger,
    name: Optional[str] = None,
    level: int = logging.NOTSET
) -> logging.Logger:
    """
    Send a stdlib logger's output (the root logger by default) to a Logger.

    Args:
        logger: Destination Logger
        name: Name of the stdlib logger to redirect (default: root)
        level: Level to set on the stdlib logger; NOTSET leaves it unchanged

    Returns:
        The redirected stdlib logger

    Example:
        redirect_logging(new_logger(sys.stdout, 'my-service', 'INFO'))
        logging.getLogger('urllib3').warning('Retrying')
    """
    target = logging.getLogger(name)

    # Replace rather than add to avoid duplicate output
    for handler in list(target.handlers):
        target.removeHandler(handler)
    target.addHandler(ECSHandler(logger))

    if level != logging.NOTSET:
        target.setLevel(level)

    return target
