"""Tests for logging configuration."""

import json
import logging
import sys

from hospital_docs.core.logging import JSONFormatter, TextFormatter, configure_logging


def _record(msg="hello", **extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="hospital_docs.test",
        level=logging.INFO,
        pathname=__file__,
        lineno=10,
        msg=msg,
        args=(),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:

    def test_emits_json_with_core_fields(self):
        data = json.loads(JSONFormatter().format(_record()))
        assert data["level"] == "INFO"
        assert data["logger"] == "hospital_docs.test"
        assert data["message"] == "hello"
        assert data["location"]["line"] == 10

    def test_includes_extra_fields(self):
        data = json.loads(JSONFormatter().format(_record(request_id="req-1")))
        assert data["request_id"] == "req-1"

    def test_includes_exception(self):
        try:
            raise ValueError("bad")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()
        data = json.loads(JSONFormatter().format(record))
        assert "ValueError: bad" in data["exception"]


class TestConfigureLogging:

    def teardown_method(self):
        logging.getLogger().handlers.clear()

    def test_json_format_installs_json_formatter(self):
        configure_logging(level="DEBUG", format_type="json")
        root = logging.getLogger()
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_text_format_is_default(self):
        configure_logging()
        root = logging.getLogger()
        assert root.level == logging.INFO
        assert isinstance(root.handlers[0].formatter, TextFormatter)

    def test_quiets_noisy_libraries(self):
        configure_logging()
        assert logging.getLogger("sqlalchemy.engine").level == logging.WARNING
