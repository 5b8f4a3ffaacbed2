"""Tests for pvcurve.core.logging and pvcurve.config."""

from __future__ import annotations

import json
import logging
import sys

import pytest

from pvcurve.config import Settings
from pvcurve.core.logging import JSONFormatter, setup_logging


@pytest.fixture
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield root
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(**extra) -> logging.LogRecord:
    record = logging.LogRecord(
        name="pvcurve.solar.single_diode",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="did not converge for %d element(s)",
        args=(2,),
        exc_info=None,
    )
    for key, value in extra.items():
        setattr(record, key, value)
    return record


class TestJSONFormatter:
    def test_core_fields(self):
        entry = json.loads(JSONFormatter().format(_record()))
        assert entry["level"] == "WARNING"
        assert entry["logger"] == "pvcurve.solar.single_diode"
        assert entry["message"] == "did not converge for 2 element(s)"
        assert "timestamp" in entry
        assert "exception" not in entry

    def test_extra_fields(self):
        entry = json.loads(
            JSONFormatter().format(_record(n_nonconverged=2, n_elements=10, unrelated="x"))
        )
        assert entry["n_nonconverged"] == 2
        assert entry["n_elements"] == 10
        assert "unrelated" not in entry

    def test_exception(self):
        try:
            raise ValueError("boom")
        except ValueError:
            record = _record()
            record.exc_info = sys.exc_info()
        entry = json.loads(JSONFormatter().format(record))
        assert "ValueError: boom" in entry["exception"]


class TestSetupLogging:
    def test_json_handler(self, restore_root_logger):
        setup_logging(json_format=True, level="debug")
        root = restore_root_logger
        assert root.level == logging.DEBUG
        assert len(root.handlers) == 1
        assert isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_plain_handler(self, restore_root_logger):
        setup_logging(json_format=False, level="WARNING")
        root = restore_root_logger
        assert root.level == logging.WARNING
        assert not isinstance(root.handlers[0].formatter, JSONFormatter)

    def test_defaults_from_settings(self, restore_root_logger, monkeypatch):
        monkeypatch.setattr(
            "pvcurve.core.logging.settings", Settings(log_level="ERROR", log_json=True)
        )
        setup_logging()
        root = restore_root_logger
        assert root.level == logging.ERROR
        assert isinstance(root.handlers[0].formatter, JSONFormatter)


class TestSettings:
    def test_defaults(self, monkeypatch):
        monkeypatch.delenv("PVCURVE_LOG_LEVEL", raising=False)
        monkeypatch.delenv("PVCURVE_LOG_JSON", raising=False)
        s = Settings()
        assert s.log_level == "INFO"
        assert s.log_json is False

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("PVCURVE_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("PVCURVE_LOG_JSON", "true")
        s = Settings()
        assert s.log_level == "DEBUG"
        assert s.log_json is True
