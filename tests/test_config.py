import pytest

import config
from audit import InMemoryAuditSink, LoggingAuditSink
from config import Config, ConfigurationError
from ledger import create_ledger


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for key in ("PLACE_FAILURE_POLICY", "AUDIT_SINK", "MAX_PANCAKES_PER_ORDER",
                "LOG_LEVEL", "DEBUG_MODE"):
        monkeypatch.delenv(key, raising=False)


def test_defaults():
    cfg = Config()
    assert cfg.ledger.place_failure_policy == "restore"
    assert cfg.ledger.restore_on_failed_place is True
    assert cfg.ledger.audit_sink == "memory"
    assert cfg.ledger.max_pancakes_per_order == 50
    assert cfg.logging.log_level == "INFO"
    assert cfg.logging.debug_mode is False


def test_environment_overrides(monkeypatch):
    monkeypatch.setenv("PLACE_FAILURE_POLICY", "DROP")
    monkeypatch.setenv("AUDIT_SINK", "log")
    monkeypatch.setenv("MAX_PANCAKES_PER_ORDER", "3")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    monkeypatch.setenv("DEBUG_MODE", "yes")

    cfg = Config()
    assert cfg.ledger.restore_on_failed_place is False
    assert cfg.ledger.audit_sink == "log"
    assert cfg.ledger.max_pancakes_per_order == 3
    assert cfg.logging.log_level == "DEBUG"
    assert cfg.logging.debug_mode is True


@pytest.mark.parametrize("key, value", [
    ("PLACE_FAILURE_POLICY", "retry"),
    ("AUDIT_SINK", "kafka"),
    ("MAX_PANCAKES_PER_ORDER", "lots"),
    ("MAX_PANCAKES_PER_ORDER", "0"),
    ("LOG_LEVEL", "LOUD"),
])
def test_invalid_values(monkeypatch, key, value):
    monkeypatch.setenv(key, value)
    with pytest.raises(ConfigurationError):
        Config()


def test_safe_summary():
    summary = Config().get_safe_summary()
    assert summary["ledger"]["place_failure_policy"] == "restore"
    assert summary["logging"]["log_level"] == "INFO"


def test_reload_config(monkeypatch):
    monkeypatch.setattr(config, "_config", None)
    first = config.get_config()
    assert config.get_config() is first

    monkeypatch.setenv("AUDIT_SINK", "log")
    reloaded = config.reload_config()
    assert reloaded is not first
    assert config.get_config().ledger.audit_sink == "log"


def test_create_ledger_from_config(monkeypatch):
    ledger = create_ledger(Config())
    assert isinstance(ledger.audit_sink, InMemoryAuditSink)
    assert ledger.restore_on_failed_place is True

    monkeypatch.setenv("AUDIT_SINK", "log")
    monkeypatch.setenv("PLACE_FAILURE_POLICY", "drop")
    monkeypatch.setenv("MAX_PANCAKES_PER_ORDER", "2")
    ledger = create_ledger(Config())
    assert isinstance(ledger.audit_sink, LoggingAuditSink)
    assert ledger.restore_on_failed_place is False
    assert ledger.max_pancakes_per_order == 2
