"""
Logging setup for the planner.

Modules log through logging.getLogger(__name__) under the "planner"
namespace; setup_logger() attaches a single stdout handler to that
namespace at the configured level (PLANNER_LOG_LEVEL).
"""

import logging
import sys
from typing import Optional

FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"


class ConsoleHandler(logging.StreamHandler):
    """stdout handler installed by setup_logger()."""

    def __init__(self):
        super().__init__(sys.stdout)
        self.setFormatter(logging.Formatter(FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))


def setup_logger(name: str = "planner", level: Optional[str] = None) -> logging.Logger:
    """Attach a stdout handler to the planner logger. Safe to call twice."""
    if level is None:
        from planner.config import settings
        level = settings.log_level

    logger = logging.getLogger(name)
    logger.setLevel(level.upper())
    if not any(isinstance(h, ConsoleHandler) for h in logger.handlers):
        logger.addHandler(ConsoleHandler())
    return logger
