"""Console logging configured from the Logging settings section."""

import logging
import sys

from app.core.config import LoggingSettings

LOG_FORMAT = "%(asctime)s %(levelname)s %(name)s %(message)s"
LOG_DATE_FORMAT = "%Y-%m-%dT%H:%M:%SZ"

# Category key in Logging.LogLevel that applies to the root logger.
DEFAULT_CATEGORY = "default"


class _ConsoleHandler(logging.StreamHandler):
    """Marker subclass so repeated configuration replaces only our own handler."""


def configure_logging(logging_settings: LoggingSettings) -> None:
    """
    Install a single console handler on the root logger and apply the LogLevel map.

    "default" sets the root level; every other key is a logger name. Safe to call
    more than once.
    """
    root = logging.getLogger()
    for handler in list(root.handlers):
        if isinstance(handler, _ConsoleHandler):
            root.removeHandler(handler)

    handler = _ConsoleHandler(sys.stderr)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=LOG_DATE_FORMAT))
    root.addHandler(handler)

    levels = logging_settings.log_level
    root.setLevel(levels.get(DEFAULT_CATEGORY, logging.INFO))
    for category, level in levels.items():
        if category == DEFAULT_CATEGORY:
            continue
        logging.getLogger(category).setLevel(level)
