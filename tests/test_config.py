"""Tests for application settings."""

import pytest
from pydantic import ValidationError

from finance_tracker.config import AppSettings


class TestAppSettings:

    def test_log_level_normalized(self):
        assert AppSettings(log_level=" warning ").log_level == "WARNING"

    def test_unknown_log_level_rejected(self):
        with pytest.raises(ValidationError):
            AppSettings(log_level="loud")

    def test_debug_mode_forces_debug_logging(self):
        settings = AppSettings(debug_mode=True, log_level="WARNING")
        assert settings.effective_log_level == "DEBUG"

    def test_log_level_used_without_debug_mode(self):
        settings = AppSettings(debug_mode=False, log_level="ERROR")
        assert settings.effective_log_level == "ERROR"

    def test_debug_mode_from_environment(self, monkeypatch):
        monkeypatch.setenv("DEBUG_MODE", "true")
        assert AppSettings().effective_log_level == "DEBUG"
