"""Tests for log formatting and setup."""

import json
import logging
import sys

import pytest

from boatrental.core.logging import DevFormatter, JSONFormatter, setup_logging


def _record(msg="Failed login", level=logging.WARNING, extra=None, exc_info=None):
    record = logging.LogRecord(
        name="boatrental.api.auth",
        level=level,
        pathname=__file__,
        lineno=1,
        msg=msg,
        args=(),
        exc_info=exc_info,
    )
    for key, value in (extra or {}).items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_context_fields_are_top_level_keys(self):
        record = _record(
            extra={"username": "harbourmaster", "client_ip": "203.0.113.9", "path": "/api/login"}
        )

        entry = json.loads(JSONFormatter().format(record))

        assert entry["message"] == "Failed login"
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "boatrental.api.auth"
        assert entry["username"] == "harbourmaster"
        assert entry["client_ip"] == "203.0.113.9"
        assert entry["path"] == "/api/login"

    def test_absent_context_fields_are_omitted(self):
        entry = json.loads(JSONFormatter().format(_record(extra={"user_id": 7})))

        assert entry["user_id"] == 7
        for field in ("username", "client_ip", "method", "path"):
            assert field not in entry

    def test_unrelated_extra_is_not_emitted(self):
        entry = json.loads(JSONFormatter().format(_record(extra={"password": "hunter2"})))
        assert "password" not in entry

    def test_message_with_quotes_stays_one_line(self):
        output = JSONFormatter().format(_record(msg='bad "value"\nnext'))

        assert "\n" not in output
        assert json.loads(output)["message"] == 'bad "value"\nnext'

    def test_exception_included(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record(level=logging.ERROR, exc_info=sys.exc_info())

        entry = json.loads(JSONFormatter().format(record))

        assert "ValueError: boom" in entry["exception"]


class TestDevFormatter:
    def test_context_appended_as_pairs(self):
        record = _record(msg="Logged out", extra={"user_id": 3, "path": "/logout"})

        line = DevFormatter().format(record)

        assert "[boatrental.api.auth] Logged out" in line
        assert line.endswith("user_id=3 path=/logout")

    def test_no_context_leaves_message_alone(self):
        line = DevFormatter().format(_record(msg="Starting"))
        assert line.endswith("Starting")


class TestSetupLogging:
    @pytest.fixture(autouse=True)
    def restore_root(self):
        handlers, level = logging.root.handlers[:], logging.root.level
        sqlalchemy_logger = logging.getLogger("sqlalchemy.engine")
        sqlalchemy_level = sqlalchemy_logger.level
        yield
        logging.root.handlers = handlers
        logging.root.setLevel(level)
        sqlalchemy_logger.setLevel(sqlalchemy_level)

    @pytest.mark.parametrize(
        ("format_type", "formatter_class"),
        [("structured", JSONFormatter), ("dev", DevFormatter)],
    )
    def test_installs_single_stdout_handler(self, format_type, formatter_class):
        setup_logging(level="info", format_type=format_type)

        [handler] = logging.root.handlers
        assert isinstance(handler.formatter, formatter_class)
        assert logging.root.level == logging.INFO

    def test_sqlalchemy_quiet_unless_debug(self):
        setup_logging(level="INFO")
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING

        setup_logging(level="DEBUG")
        assert logging.getLogger("sqlalchemy.engine").level == logging.DEBUG
