"""Unit tests for structured logging setup."""
import sys
sys.path.insert(0, 'backend')

import json
import logging
import pytest
from logger import JSONFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers = handlers
    root.setLevel(level)


def _record(msg="hello %s", args=("world",), exc_info=None, **extra):
    record = logging.LogRecord("services.chat_pipeline", logging.INFO, __file__, 10, msg, args, exc_info)
    for key, value in extra.items():
        setattr(record, key, value)
    return record


def test_json_formatter_basic_fields():
    data = json.loads(JSONFormatter().format(_record()))

    assert data["level"] == "INFO"
    assert data["logger"] == "services.chat_pipeline"
    assert data["message"] == "hello world"
    assert data["timestamp"].endswith("Z")


def test_json_formatter_includes_extra_fields():
    """Fields passed via extra= end up as top-level keys."""
    data = json.loads(JSONFormatter().format(_record(agent="technical", sources=["HR.pdf"], similarity=0.52)))

    assert data["agent"] == "technical"
    assert data["sources"] == ["HR.pdf"]
    assert data["similarity"] == 0.52
    assert "args" not in data
    assert "msg" not in data


def test_json_formatter_includes_exception():
    try:
        raise RuntimeError("boom")
    except RuntimeError:
        record = _record(exc_info=sys.exc_info())

    data = json.loads(JSONFormatter().format(record))

    assert "RuntimeError: boom" in data["exception"]


def test_json_formatter_serializes_unknown_types():
    data = json.loads(JSONFormatter().format(_record(error_details={"when": object()})))

    assert "object" in data["error_details"]


def test_setup_logging_json(restore_root_logger):
    setup_logging("debug", "json")

    assert restore_root_logger.level == logging.DEBUG
    assert len(restore_root_logger.handlers) == 1
    assert isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)
    assert logging.getLogger("httpx").level == logging.WARNING


def test_setup_logging_text(restore_root_logger):
    setup_logging("WARNING", "text")

    assert restore_root_logger.level == logging.WARNING
    assert not isinstance(restore_root_logger.handlers[0].formatter, JSONFormatter)
