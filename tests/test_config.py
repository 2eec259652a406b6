"""Tests for configuration loading and validation."""

from dataclasses import replace

import pytest

from src.config import (
    AppConfig,
    BackendConfig,
    DialogueConfig,
    ServerConfig,
    SessionConfig,
    _safe_float,
    _safe_int,
    _validate_config,
)


def _with(**sections) -> AppConfig:
    return replace(AppConfig(), **sections)


class TestConfigValidation:
    def test_default_config_passes_validation(self):
        config = AppConfig()
        _validate_config(config)  # should not raise

    def test_negative_slot_retries(self):
        config = _with(dialogue=replace(DialogueConfig(), max_slot_retries=-1))
        with pytest.raises(ValueError, match="MAX_SLOT_RETRIES"):
            _validate_config(config)

    def test_zero_slot_retries_allowed(self):
        config = _with(dialogue=replace(DialogueConfig(), max_slot_retries=0))
        _validate_config(config)

    def test_negative_return_window(self):
        config = _with(dialogue=replace(DialogueConfig(), return_window_days=-3))
        with pytest.raises(ValueError, match="RETURN_WINDOW_DAYS"):
            _validate_config(config)

    def test_refund_sla_must_be_positive(self):
        config = _with(dialogue=replace(DialogueConfig(), refund_sla_days=0))
        with pytest.raises(ValueError, match="REFUND_SLA_DAYS"):
            _validate_config(config)

    def test_complaint_sla_must_be_positive(self):
        config = _with(dialogue=replace(DialogueConfig(), complaint_sla_hours=0))
        with pytest.raises(ValueError, match="COMPLAINT_SLA_HOURS"):
            _validate_config(config)

    def test_zero_backend_timeout(self):
        config = _with(backend=replace(BackendConfig(), timeout_sec=0))
        with pytest.raises(ValueError, match="BACKEND_TIMEOUT_SEC"):
            _validate_config(config)

    def test_unknown_backend_mode(self):
        config = _with(backend=replace(BackendConfig(), mode="sqlite"))
        with pytest.raises(ValueError, match="BACKEND_MODE"):
            _validate_config(config)

    def test_memory_backend_mode_allowed(self):
        config = _with(backend=replace(BackendConfig(), mode="memory"))
        _validate_config(config)

    def test_negative_session_ttl(self):
        config = _with(sessions=replace(SessionConfig(), idle_ttl_sec=-1))
        with pytest.raises(ValueError, match="SESSION_IDLE_TTL_SEC"):
            _validate_config(config)

    @pytest.mark.parametrize("port", [0, 70000])
    def test_port_out_of_range(self, port):
        config = _with(server=replace(ServerConfig(), port=port))
        with pytest.raises(ValueError, match="PORT"):
            _validate_config(config)


class TestConfigDefaults:
    def test_dialogue_defaults(self):
        config = DialogueConfig()
        assert config.refundable_statuses == ("shipped", "delivered")
        assert config.complaint_priority == "Normal"

    def test_configs_are_frozen(self):
        config = AppConfig()
        with pytest.raises(AttributeError):
            config.log_level = "DEBUG"  # type: ignore[misc]


class TestSafeParsers:
    def test_safe_int_reads_env(self, monkeypatch):
        monkeypatch.setenv("TEST_INT_VALUE", "42")
        assert _safe_int("TEST_INT_VALUE", "1") == 42

    def test_safe_int_uses_default(self, monkeypatch):
        monkeypatch.delenv("TEST_INT_VALUE", raising=False)
        assert _safe_int("TEST_INT_VALUE", "7") == 7

    def test_safe_int_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("TEST_INT_VALUE", "abc")
        with pytest.raises(ValueError, match="TEST_INT_VALUE"):
            _safe_int("TEST_INT_VALUE", "1")

    def test_safe_float_reads_env(self, monkeypatch):
        monkeypatch.setenv("TEST_FLOAT_VALUE", "2.5")
        assert _safe_float("TEST_FLOAT_VALUE", "1.0") == 2.5

    def test_safe_float_rejects_garbage(self, monkeypatch):
        monkeypatch.setenv("TEST_FLOAT_VALUE", "fast")
        with pytest.raises(ValueError, match="TEST_FLOAT_VALUE"):
            _safe_float("TEST_FLOAT_VALUE", "1.0")
