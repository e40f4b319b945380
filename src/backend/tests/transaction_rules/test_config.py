import logging

import pytest

from common.transaction_rules.config import get_rules_tool_config


def test_defaults(monkeypatch):
    monkeypatch.delenv("RULES_LOG_LEVEL", raising=False)
    monkeypatch.delenv("RULES_OUTPUT_FORMAT", raising=False)
    cfg = get_rules_tool_config()
    assert cfg.log_level == "WARNING"
    assert cfg.output_format == "text"
    assert cfg.log_level_number == logging.WARNING


def test_values_are_normalized(monkeypatch):
    monkeypatch.setenv("RULES_LOG_LEVEL", " debug ")
    monkeypatch.setenv("RULES_OUTPUT_FORMAT", "JSON")
    cfg = get_rules_tool_config()
    assert cfg.log_level == "DEBUG"
    assert cfg.output_format == "json"


def test_invalid_log_level(monkeypatch):
    monkeypatch.setenv("RULES_LOG_LEVEL", "chatty")
    with pytest.raises(ValueError, match="RULES_LOG_LEVEL"):
        get_rules_tool_config()


def test_invalid_output_format(monkeypatch):
    monkeypatch.delenv("RULES_LOG_LEVEL", raising=False)
    monkeypatch.setenv("RULES_OUTPUT_FORMAT", "xml")
    with pytest.raises(ValueError, match="RULES_OUTPUT_FORMAT"):
        get_rules_tool_config()
