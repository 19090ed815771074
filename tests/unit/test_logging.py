"""Unit tests for structured logging helpers."""

from unittest.mock import MagicMock, patch

import pytest
import structlog

from csrf_guard.config import CsrfConfig, LogSettings
from csrf_guard.logging import (
    MASKED,
    CsrfEventLogger,
    SensitiveDataMasker,
    app_context_processor,
    configure_logging,
)


@pytest.fixture
def reset_structlog():
    """Restore structlog defaults after a test configures it."""
    yield
    structlog.reset_defaults()


class TestSensitiveDataMasker:
    """Test token masking in log entries."""

    def test_masks_token_fields(self):
        event_dict = {
            "event": "csrf_token_rejected",
            "event_type": "security",
            "csrf_token": "abc",
            "signing_key": "secret-value",
            "reason": "mismatch",
        }

        result = SensitiveDataMasker()(None, "warning", event_dict)

        assert result["csrf_token"] == MASKED
        assert result["signing_key"] == MASKED
        assert result["event"] == "csrf_token_rejected"
        assert result["reason"] == "mismatch"

    def test_masks_configured_header_name(self):
        """설정된 헤더 이름으로 기록된 필드도 마스킹"""
        masker = SensitiveDataMasker(CsrfConfig(cookie_name="xsrf", header_name="X-XSRF"))

        result = masker(None, "info", {"event": "request", "x_xsrf": "raw", "path": "/items"})

        assert result["x_xsrf"] == MASKED
        assert result["path"] == "/items"

    def test_masks_wire_names_inside_logged_headers(self):
        masker = SensitiveDataMasker(CsrfConfig(header_name="X-XSRF"))
        headers = {"X-XSRF": "raw", "Accept": "application/json"}

        result = masker(None, "info", {"event": "request", "headers": headers})

        assert result["headers"] == {"X-XSRF": MASKED, "Accept": "application/json"}
        assert headers["X-XSRF"] == "raw"


class TestAppContextProcessor:
    """Test app context enrichment."""

    def test_adds_app_context(self):
        processor = app_context_processor(LogSettings(app_name="shop", env="production"))

        result = processor(None, "info", {"event": "x"})

        assert result["app"] == "shop"
        assert result["environment"] == "production"

    def test_keeps_existing_values(self):
        processor = app_context_processor(LogSettings(app_name="shop"))

        result = processor(None, "info", {"event": "x", "app": "admin"})

        assert result["app"] == "admin"


class TestConfigureLogging:
    """Test the host logging hook."""

    def test_installs_masker_for_config(self, reset_structlog):
        configure_logging(CsrfConfig(header_name="X-XSRF"), LogSettings(env="production"))

        processors = structlog.get_config()["processors"]
        maskers = [p for p in processors if isinstance(p, SensitiveDataMasker)]

        assert len(maskers) == 1
        assert "x_xsrf" in maskers[0].wire_names
        assert isinstance(processors[-1], structlog.processors.JSONRenderer)

    def test_development_uses_console_renderer(self, reset_structlog):
        configure_logging(settings=LogSettings(env="development"))

        processors = structlog.get_config()["processors"]

        assert isinstance(processors[-1], structlog.dev.ConsoleRenderer)


class TestCsrfEventLogger:
    """Test security event helpers."""

    def test_token_rejected_event(self):
        with patch("csrf_guard.logging.get_logger") as mock_get_logger:
            mock_logger = MagicMock()
            mock_get_logger.return_value = mock_logger

            CsrfEventLogger().log_token_rejected("POST", "https://a.example", "mismatch")

            mock_logger.warning.assert_called_once_with(
                "csrf_token_rejected",
                event_type="security",
                method="POST",
                origin="https://a.example",
                reason="mismatch",
            )

    def test_origin_rejected_event(self):
        with patch("csrf_guard.logging.get_logger") as mock_get_logger:
            mock_logger = MagicMock()
            mock_get_logger.return_value = mock_logger

            CsrfEventLogger().log_origin_rejected("DELETE", None)

            mock_logger.warning.assert_called_once_with(
                "csrf_origin_rejected",
                event_type="security",
                method="DELETE",
                origin=None,
            )

    def test_regenerated_event(self):
        with patch("csrf_guard.logging.get_logger") as mock_get_logger:
            mock_logger = MagicMock()
            mock_get_logger.return_value = mock_logger

            CsrfEventLogger().log_token_regenerated("POST", "signature")

            mock_logger.info.assert_called_once_with(
                "csrf_token_regenerated",
                event_type="security",
                method="POST",
                variant="signature",
            )
