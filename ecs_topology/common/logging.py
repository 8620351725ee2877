#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

"""
The ecs-topology logger. Records up to INFO go to stdout, WARNING and above to stderr.
"""

from __future__ import annotations

import logging as logthings
import sys

LOGGER_NAME = "ecs-topology"
VALID_LEVELS = ["FATAL", "CRITICAL", "ERROR", "WARNING", "WARN", "INFO", "DEBUG"]

DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
TOPOLOGY_FORMAT = logthings.Formatter(
    "%(asctime)s [%(levelname)8s] %(message)s", DATE_FORMAT
)
TOPOLOGY_DEBUG_FORMAT = logthings.Formatter(
    "%(asctime)s [%(levelname)8s] (%(module)s.%(funcName)s:%(lineno)d) %(message)s",
    DATE_FORMAT,
)


class TopologyFormatter(logthings.Formatter):
    """Adds the emitting function to DEBUG records, to follow the assembly steps"""

    def format(self, record) -> str:
        if record.levelno <= logthings.DEBUG:
            return TOPOLOGY_DEBUG_FORMAT.format(record)
        return TOPOLOGY_FORMAT.format(record)


class LevelRangeFilter(logthings.Filter):
    def __init__(self, below: int = None, from_level: int = None):
        super().__init__()
        self.below = below
        self.from_level = from_level

    def filter(self, record) -> bool:
        if self.below is not None and record.levelno >= self.below:
            return False
        if self.from_level is not None and record.levelno < self.from_level:
            return False
        return True


def stream_handler(stream, level: int, levels_filter: LevelRangeFilter):
    handler = logthings.StreamHandler(stream)
    handler.setFormatter(TopologyFormatter())
    handler.setLevel(level)
    handler.addFilter(levels_filter)
    return handler


def setup_logging() -> logthings.Logger:
    """
    Configures the ecs-topology logger. It does not propagate, so importing ecs_topology leaves
    the root logger of the calling program alone.
    """
    app_logger = logthings.getLogger(LOGGER_NAME)
    for handler in list(app_logger.handlers):
        app_logger.removeHandler(handler)
    app_logger.addHandler(
        stream_handler(
            sys.stdout, logthings.INFO, LevelRangeFilter(below=logthings.WARNING)
        )
    )
    app_logger.addHandler(
        stream_handler(
            sys.stderr,
            logthings.WARNING,
            LevelRangeFilter(from_level=logthings.WARNING),
        )
    )
    app_logger.setLevel(logthings.INFO)
    app_logger.propagate = False
    return app_logger


def set_log_level(level: str) -> None:
    """
    Changes the level of the application logger and of its stdout handler

    :param str level: one of VALID_LEVELS, case insensitive
    :raises: ValueError if the level is not valid
    """
    if level.upper() not in VALID_LEVELS:
        raise ValueError(
            f"Log level value {level} is invalid. Must be one of {VALID_LEVELS}"
        )
    numeric_level = logthings.getLevelName(level.upper())
    LOG.setLevel(numeric_level)
    LOG.handlers[0].setLevel(min(numeric_level, logthings.INFO))


LOG = setup_logging()
