"""
Error Tracking Service

Integrates with Sentry for error tracking. Disabled unless SENTRY_DSN is set.
"""

from typing import Optional, Dict, Any
import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration
from sentry_sdk.integrations.sqlalchemy import SqlalchemyIntegration

from reelshelf.config import settings
from reelshelf.services.logging_service import logger


class ErrorTracker:
    """Centralized error tracking."""

    def __init__(self, dsn: Optional[str] = None):
        """
        Initialize error tracking.

        Args:
            dsn: Sentry DSN, defaults to settings.SENTRY_DSN
        """
        self.sentry_enabled = False

        sentry_dsn = dsn if dsn is not None else settings.SENTRY_DSN
        if sentry_dsn:
            self._initialize_sentry(sentry_dsn)

    def _initialize_sentry(self, dsn: str):
        """Initialize Sentry SDK."""
        environment = settings.ENVIRONMENT
        release = settings.APP_VERSION

        try:
            sentry_sdk.init(
                dsn=dsn,
                environment=environment,
                release=release,
                traces_sample_rate=0.1,  # 10% of transactions
                integrations=[
                    FastApiIntegration(),
                    SqlalchemyIntegration()
                ],
                before_send=self._filter_before_send,
                attach_stacktrace=True,
                send_default_pii=False
            )

            self.sentry_enabled = True
            logger.info("Sentry error tracking enabled", environment=environment, release=release)

        except Exception as e:
            # Invalid DSN; run without Sentry
            logger.error("Failed to initialize Sentry", error=str(e))

    def _filter_before_send(self, event: Dict[str, Any], hint: Dict[str, Any]) -> Optional[Dict[str, Any]]:
        """
        Filter events before sending to Sentry.

        Returns None to drop the event, or the modified event to send it.
        """
        # Don't send health check errors
        if 'request' in event:
            url = event['request'].get('url', '')
            if any(path in url for path in ['/health', '/metrics']):
                return None

        # Client errors are expected
        if 'exception' in event:
            for exception in event['exception'].get('values', []):
                if 'HTTPException' in exception.get('type', ''):
                    return None

        return event

    def capture_exception(
        self,
        exception: Exception,
        context: Optional[Dict[str, Any]] = None,
        level: str = "error",
        tags: Optional[Dict[str, str]] = None
    ):
        """
        Capture an exception.

        Args:
            exception: The exception to capture
            context: Additional context data
            level: Severity level (debug, info, warning, error, fatal)
            tags: Custom tags for filtering
        """
        if not self.sentry_enabled:
            return

        with sentry_sdk.new_scope() as scope:
            if context:
                for key, value in context.items():
                    scope.set_context(key, value)

            if tags:
                for key, value in tags.items():
                    scope.set_tag(key, value)

            scope.level = level
            sentry_sdk.capture_exception(exception)

    def set_user_context(self, user_id: str):
        """
        Set user context for error tracking.

        Args:
            user_id: User ID
        """
        if self.sentry_enabled:
            sentry_sdk.set_user({"id": user_id})


# Global instance
error_tracker = ErrorTracker()


def capture_exception(exception: Exception, **kwargs):
    """Capture an exception."""
    error_tracker.capture_exception(exception, **kwargs)
