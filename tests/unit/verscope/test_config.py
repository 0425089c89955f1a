"""Tests for verscope configuration."""

from __future__ import annotations

import logging

import pytest
from pydantic import ValidationError

from verscope.config import VerscopeConfig, configure_logging, get_config, reset_config


class TestDefaults:
    def test_defaults(self):
        config = VerscopeConfig()
        assert config.log_level == "info"
        assert config.strict_containment is True
        assert config.projection_workers == 4
        assert config.emit_span_events is True
        assert config.artifact_prefix == "openapi"
        assert config.artifact_extension == "yaml"


class TestEnvironment:
    def test_env_override(self, monkeypatch):
        monkeypatch.setenv("VERSCOPE_PROJECTION_WORKERS", "8")
        monkeypatch.setenv("VERSCOPE_STRICT_CONTAINMENT", "false")
        config = VerscopeConfig()
        assert config.projection_workers == 8
        assert config.strict_containment is False

    def test_upper_case_level(self, monkeypatch):
        monkeypatch.setenv("VERSCOPE_LOG_LEVEL", "DEBUG")
        assert VerscopeConfig().log_level == "debug"

    def test_invalid_workers(self):
        with pytest.raises(ValidationError):
            VerscopeConfig(projection_workers=0)

    def test_invalid_extension(self):
        with pytest.raises(ValidationError):
            VerscopeConfig(artifact_extension="xml")


class TestSingleton:
    def test_same_instance(self):
        assert get_config() is get_config()

    def test_overrides_replace(self):
        first = get_config()
        second = get_config(projection_workers=2)
        assert second is not first
        assert get_config().projection_workers == 2

    def test_reset(self):
        first = get_config()
        reset_config()
        assert get_config() is not first


class TestLogging:
    def test_configure_logging(self):
        logger = configure_logging(VerscopeConfig(log_level="warning"))
        assert logger.name == "verscope"
        assert logger.level == logging.WARNING
        configure_logging(VerscopeConfig(log_level="info"))
