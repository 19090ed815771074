"""Structured logging for CSRF security events.

``configure_logging()`` is the host hook: call it once at application startup
(next to ``add_middleware``) so that CSRF events are rendered with the app
context and that token material never reaches the log output, including
the configured cookie/header names when a host logs request headers.
"""

import logging
import sys
from collections.abc import Mapping
from typing import Any

import structlog
from structlog.types import EventDict, Processor

from csrf_guard.config import CsrfConfig, LogSettings, log_settings

MASKED = "***MASKED***"
SENSITIVE_FIELDS = frozenset({"token", "secret", "key", "signature", "cookie"})
UNMASKED_FIELDS = frozenset({"event", "event_type"})


def _field_name(name: str) -> str:
    """'X-CSRF-Token' -> 'x_csrf_token'"""
    return name.lower().replace("-", "_")


class SensitiveDataMasker:
    """structlog processor that hides CSRF token material.

    Masks top-level fields whose name contains a sensitive fragment or the
    configured cookie/header name, and masks matching entries inside mapping
    values such as a logged ``headers`` or ``cookies`` dict.

    Args:
        config: CSRF guard settings providing the cookie/header names
    """

    def __init__(self, config: CsrfConfig | None = None) -> None:
        config = config or CsrfConfig()
        self.wire_names = frozenset({_field_name(config.cookie_name), _field_name(config.header_name)})
        self.fragments = SENSITIVE_FIELDS | self.wire_names

    def _is_sensitive(self, key: str) -> bool:
        lowered = _field_name(key)
        return any(fragment in lowered for fragment in self.fragments)

    def _mask_mapping(self, value: Mapping[Any, Any]) -> dict[Any, Any]:
        return {
            key: MASKED if isinstance(key, str) and _field_name(key) in self.wire_names else item
            for key, item in value.items()
        }

    def __call__(self, logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        for key, value in list(event_dict.items()):
            if key in UNMASKED_FIELDS:
                continue
            if self._is_sensitive(key):
                event_dict[key] = MASKED
            elif isinstance(value, Mapping):
                event_dict[key] = self._mask_mapping(value)

        return event_dict


def app_context_processor(settings: LogSettings) -> Processor:
    """Build a processor adding the app name and environment to every entry."""

    def _add_app_context(logger: Any, method_name: str, event_dict: EventDict) -> EventDict:
        event_dict.setdefault("app", settings.app_name)
        event_dict.setdefault("environment", settings.env)
        return event_dict

    return _add_app_context


def configure_logging(config: CsrfConfig | None = None, settings: LogSettings | None = None) -> None:
    """Configure structlog for CSRF events.

    - Development: colored console output, DEBUG level (fetch issuance visible)
    - Otherwise: JSON output, INFO level

    Args:
        config: CSRF guard settings; the cookie/header names are masked in logs
        settings: Logging settings (defaults to ``CSRF_LOG_*`` environment)

    Example:
        >>> config = CsrfConfig()
        >>> configure_logging(config)
        >>> app.add_middleware(CsrfMiddleware, config=config)
    """
    settings = settings or log_settings
    development = settings.env == "development"

    logging.basicConfig(
        format="%(message)s",
        stream=sys.stdout,
        level=logging.DEBUG if development else logging.INFO,
    )

    shared_processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso"),
        app_context_processor(settings),
        SensitiveDataMasker(config),
        structlog.processors.format_exc_info,
    ]

    if development:
        processors = [*shared_processors, structlog.dev.ConsoleRenderer(colors=True)]
    else:
        processors = [*shared_processors, structlog.processors.JSONRenderer()]

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.stdlib.BoundLogger,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str | None = None) -> structlog.stdlib.BoundLogger:
    """Get a structured logger (usually ``get_logger(__name__)``)."""
    return structlog.get_logger(name)


class CsrfEventLogger:
    """Helper class for logging CSRF-related security events."""

    def __init__(self) -> None:
        self.logger = get_logger("csrf")

    def log_token_regenerated(self, method: str, variant: str) -> None:
        """Log issuance of a new real token because the cookie was absent or corrupt."""
        self.logger.info(
            "csrf_token_regenerated",
            event_type="security",
            method=method,
            variant=variant,
        )

    def log_token_issued(self, method: str) -> None:
        """Log a fetch-mode token issuance."""
        self.logger.debug(
            "csrf_token_issued",
            event_type="security",
            method=method,
        )

    def log_origin_rejected(self, method: str, origin: str | None) -> None:
        """Log a request rejected by the origin allow-list.

        Args:
            method: HTTP method
            origin: Origin header value (None if absent)
        """
        self.logger.warning(
            "csrf_origin_rejected",
            event_type="security",
            method=method,
            origin=origin,
        )

    def log_token_rejected(self, method: str, origin: str | None, reason: str) -> None:
        """Log a request rejected by token verification.

        The reason stays server-side; clients always receive the same response.

        Args:
            method: HTTP method
            origin: Origin header value (None if absent)
            reason: Failure reason (regenerated, missing, malformed, mismatch)
        """
        self.logger.warning(
            "csrf_token_rejected",
            event_type="security",
            method=method,
            origin=origin,
            reason=reason,
        )


csrf_event_logger = CsrfEventLogger()
