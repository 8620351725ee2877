#  SPDX-License-Identifier: MPL-2.0
#  Copyright 2020-2022 John Mille <john@compose-x.io>

import logging

from pytest import fixture, raises

from ecs_topology.common.logging import LOG, LevelRangeFilter, set_log_level


@fixture
def restore_level():
    yield
    set_log_level("INFO")


def make_record(level: int) -> logging.LogRecord:
    return logging.LogRecord("ecs-topology", level, __file__, 1, "message", None, None)


def test_level_range_filter():
    stdout_filter = LevelRangeFilter(below=logging.WARNING)
    stderr_filter = LevelRangeFilter(from_level=logging.WARNING)
    assert stdout_filter.filter(make_record(logging.INFO))
    assert not stdout_filter.filter(make_record(logging.ERROR))
    assert stderr_filter.filter(make_record(logging.WARNING))
    assert not stderr_filter.filter(make_record(logging.DEBUG))


def test_set_log_level(restore_level):
    set_log_level("debug")
    assert LOG.level == logging.DEBUG
    assert LOG.handlers[0].level == logging.DEBUG
    set_log_level("ERROR")
    assert LOG.level == logging.ERROR


def test_invalid_log_level():
    with raises(ValueError):
        set_log_level("verbose")
