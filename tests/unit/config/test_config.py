"""
Unit tests for switchboard/config/
"""
import json

import pytest
from pydantic import ValidationError

from switchboard.config.loader import (
    camel_to_snake,
    convert_keys,
    convert_to_camel,
    load_config,
    save_config,
    snake_to_camel,
)
from switchboard.config.schema import Config, DispatcherConfig, LoggingConfig


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    """Keep SWITCHBOARD_ variables from the host out of these tests."""
    for name in (
        "SWITCHBOARD_DISPATCHER__POLL_INTERVAL_S",
        "SWITCHBOARD_DISPATCHER__FAILURE_POLICY",
        "SWITCHBOARD_DISPATCHER__THREAD_NAME",
        "SWITCHBOARD_DISPATCHER__DAEMON",
        "SWITCHBOARD_LOGGING__LEVEL",
    ):
        monkeypatch.delenv(name, raising=False)


class TestSchema:
    """Tests for the configuration models."""

    def test_defaults(self):
        """Test the out-of-the-box dispatcher settings."""
        config = Config()

        assert config.dispatcher.poll_interval_s == 0.005
        assert config.dispatcher.failure_policy == "isolate"
        assert config.dispatcher.thread_name == "switchboard-dispatcher"
        assert config.dispatcher.daemon is True
        assert config.logging.level == "INFO"

    def test_poll_interval_must_be_positive(self):
        """Test that a zero or negative interval is rejected."""
        with pytest.raises(ValidationError):
            DispatcherConfig(poll_interval_s=0)
        with pytest.raises(ValidationError):
            DispatcherConfig(poll_interval_s=-1)

    def test_unknown_failure_policy_rejected(self):
        """Test that only isolate and fatal are accepted."""
        with pytest.raises(ValidationError):
            DispatcherConfig(failure_policy="retry")

    def test_env_override(self, monkeypatch):
        """Test that SWITCHBOARD_ environment variables override defaults."""
        monkeypatch.setenv("SWITCHBOARD_DISPATCHER__FAILURE_POLICY", "fatal")
        monkeypatch.setenv("SWITCHBOARD_LOGGING__LEVEL", "DEBUG")

        config = Config()

        assert config.dispatcher.failure_policy == "fatal"
        assert config.logging.level == "DEBUG"

    def test_explicit_values(self):
        """Test building a config from nested values."""
        config = Config(dispatcher=DispatcherConfig(thread_name="bus"), logging=LoggingConfig(level="ERROR"))

        assert config.dispatcher.thread_name == "bus"
        assert config.logging.level == "ERROR"


class TestLoader:
    """Tests for loading and saving config.json."""

    def test_missing_file_gives_defaults(self, tmp_path):
        """Test that an absent file falls back to defaults."""
        config = load_config(tmp_path / "missing.json")

        assert config == Config()

    def test_save_writes_camel_case(self, tmp_path):
        """Test that saved keys use camelCase and parents are created."""
        path = tmp_path / "nested" / "config.json"

        save_config(Config(), path)

        data = json.loads(path.read_text())
        assert data["dispatcher"]["pollIntervalS"] == 0.005
        assert data["dispatcher"]["failurePolicy"] == "isolate"
        assert data["logging"]["level"] == "INFO"

    def test_save_then_load(self, tmp_path):
        """Test that a saved config loads back with the same values."""
        path = tmp_path / "config.json"
        original = Config(dispatcher=DispatcherConfig(poll_interval_s=0.02, failure_policy="fatal", daemon=False))

        save_config(original, path)
        loaded = load_config(path)

        assert loaded.dispatcher == original.dispatcher
        assert loaded.logging == original.logging

    def test_partial_file(self, tmp_path):
        """Test that keys missing from the file keep their defaults."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"dispatcher": {"threadName": "custom"}}))

        config = load_config(path)

        assert config.dispatcher.thread_name == "custom"
        assert config.dispatcher.poll_interval_s == 0.005

    def test_env_overrides_saved_file(self, tmp_path, monkeypatch):
        """Test that an environment variable beats a value written by save_config."""
        path = tmp_path / "config.json"
        save_config(Config(), path)
        monkeypatch.setenv("SWITCHBOARD_DISPATCHER__FAILURE_POLICY", "fatal")

        config = load_config(path)

        assert config.dispatcher.failure_policy == "fatal"

    def test_env_override_keeps_other_file_values(self, tmp_path, monkeypatch):
        """Test that the environment only replaces the fields it names."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"dispatcher": {"threadName": "custom", "pollIntervalS": 0.02}}))
        monkeypatch.setenv("SWITCHBOARD_DISPATCHER__FAILURE_POLICY", "fatal")

        config = load_config(path)

        assert config.dispatcher.failure_policy == "fatal"
        assert config.dispatcher.thread_name == "custom"
        assert config.dispatcher.poll_interval_s == 0.02

    def test_malformed_json_gives_defaults(self, tmp_path, log_records):
        """Test that a broken file is reported and ignored."""
        path = tmp_path / "config.json"
        path.write_text("{not json")

        config = load_config(path)

        assert config == Config()
        assert any(r["level"].name == "WARNING" for r in log_records)

    def test_invalid_values_give_defaults(self, tmp_path):
        """Test that a file failing validation falls back to defaults."""
        path = tmp_path / "config.json"
        path.write_text(json.dumps({"dispatcher": {"pollIntervalS": -5}}))

        config = load_config(path)

        assert config.dispatcher.poll_interval_s == 0.005


class TestKeyConversion:
    """Tests for the camelCase/snake_case helpers."""

    def test_camel_to_snake(self):
        assert camel_to_snake("pollIntervalS") == "poll_interval_s"
        assert camel_to_snake("level") == "level"

    def test_snake_to_camel(self):
        assert snake_to_camel("failure_policy") == "failurePolicy"
        assert snake_to_camel("daemon") == "daemon"

    def test_nested_conversion(self):
        """Test that conversion recurses into dicts and lists."""
        camel = {"dispatcher": {"threadName": "x"}, "items": [{"someKey": 1}]}

        snake = convert_keys(camel)

        assert snake == {"dispatcher": {"thread_name": "x"}, "items": [{"some_key": 1}]}
        assert convert_to_camel(snake) == camel
