"""Tests for logging configuration."""
from __future__ import annotations

import logging
from unittest.mock import patch

from laptop_tap.logging_utils import TRACE_LEVEL, configure_logging, resolve_log_level


class TestResolveLogLevel:
    def test_verbosity_wins(self):
        assert resolve_log_level(2, "ERROR") == TRACE_LEVEL
        assert resolve_log_level(1, "ERROR") == logging.DEBUG

    def test_fallback_name(self):
        assert resolve_log_level(0, "warning") == logging.WARNING

    def test_unknown_name_defaults_to_info(self):
        assert resolve_log_level(0, "chatty") == logging.INFO


class TestConfigureLogging:
    def test_registers_trace_level_without_patching_logger(self):
        with patch("logging.basicConfig") as basic_config:
            configure_logging(TRACE_LEVEL)

        assert logging.getLevelName(TRACE_LEVEL) == "TRACE"
        assert not hasattr(logging.Logger, "trace")
        _, kwargs = basic_config.call_args
        assert kwargs["level"] == TRACE_LEVEL
        assert len(kwargs["handlers"]) == 1
