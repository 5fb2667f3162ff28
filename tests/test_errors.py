import logging

import pytest

from karmabot.errors import (
    ConfigError,
    InternalError,
    KarmaError,
    NetworkError,
    ParsingError,
    classify_error,
    log_error,
)
from karmabot.logging_config import error_aggregator


@pytest.mark.parametrize(
    "error,expected",
    [
        (NetworkError("x"), "network"),
        (OSError("x"), "network"),
        (TimeoutError(), "network"),
        (ConfigError("x"), "config"),
        (ParsingError("x"), "parsing"),
        (KarmaError("x", what="k"), "karma"),
        (InternalError("x"), "internal"),
        (ValueError("x"), "unknown"),
    ],
)
def test_classify_error(error, expected):
    assert classify_error(error) == expected


def test_internal_error_copies_data():
    data = {"a": 1}
    err = InternalError("boom", data=data)
    data["a"] = 2
    assert err.data == {"a": 1}
    assert str(err) == "boom"


def test_karma_error_keeps_key():
    err = KarmaError("rejected", what="tea")
    assert err.what == "tea"
    assert err.data == {"what": "tea"}
    assert isinstance(err, InternalError)


def test_log_error_records_classified_type(caplog):
    error_aggregator.reset()
    with caplog.at_level(logging.ERROR):
        log_error("Connection actor crashed", ConfigError("no nickname"), {"crashes": 1})
    assert "[CONFIG] Connection actor crashed: no nickname" in caplog.text
    assert "crashes=1" in caplog.text
    assert "config" in error_aggregator.get_error_summary()
    error_aggregator.reset()
