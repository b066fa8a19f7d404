"""Tests for log formatting."""

import json
import logging
import sys

from portal.logging_config import JSONFormatter


def make_record(msg="Team 7 approved", exc_info=None):
    return logging.LogRecord(
        name="portal.services.team_approval",
        level=logging.INFO,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )


def test_json_formatter_emits_one_object():
    line = JSONFormatter().format(make_record())

    payload = json.loads(line)
    assert payload["level"] == "INFO"
    assert payload["logger"] == "portal.services.team_approval"
    assert payload["msg"] == "Team 7 approved"
    assert "exception" not in payload


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("smtp unreachable")
    except RuntimeError:
        record = make_record(exc_info=sys.exc_info())

    payload = json.loads(JSONFormatter().format(record))
    assert "smtp unreachable" in payload["exception"]
