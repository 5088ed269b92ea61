"""Structured logging and in-process metrics."""

import logging
import json
from datetime import datetime
from typing import Dict, Any, Optional
import traceback


class StructuredLogger:
    """
    Structured JSON logger for production environments.

    Outputs logs in JSON format for easy parsing by log aggregation systems.
    """

    def __init__(self, name: str, log_file: Optional[str] = None, level: int = logging.INFO):
        """
        Initialize structured logger.

        Args:
            name: Logger name
            log_file: Optional file path for file logging
            level: Minimum level to emit
        """
        self.logger = logging.getLogger(name)
        self.logger.setLevel(level)

        # Handlers are attached once per logger name
        if not self.logger.handlers:
            console_handler = logging.StreamHandler()
            console_handler.setFormatter(self._get_json_formatter())
            self.logger.addHandler(console_handler)

            if log_file:
                file_handler = logging.FileHandler(log_file)
                file_handler.setFormatter(self._get_json_formatter())
                self.logger.addHandler(file_handler)

    def _get_json_formatter(self):
        """Get JSON formatter for log records."""
        return logging.Formatter('%(message)s')

    def _format_log(
        self,
        level: str,
        message: str,
        extra: Optional[Dict[str, Any]] = None
    ) -> str:
        """
        Format log message as JSON.

        Args:
            level: Log level
            message: Log message
            extra: Additional context

        Returns:
            JSON-formatted log string
        """
        log_entry = {
            "timestamp": datetime.utcnow().isoformat() + "Z",
            "level": level,
            "message": message,
            "logger": self.logger.name
        }

        if extra:
            log_entry.update(extra)

        return json.dumps(log_entry, default=str)

    def info(self, message: str, **kwargs):
        """Log info message."""
        self.logger.info(self._format_log("INFO", message, kwargs))

    def warning(self, message: str, **kwargs):
        """Log warning message."""
        self.logger.warning(self._format_log("WARNING", message, kwargs))

    def error(self, message: str, **kwargs):
        """Log error message."""
        self.logger.error(self._format_log("ERROR", message, kwargs))

    def critical(self, message: str, **kwargs):
        """Log critical message."""
        self.logger.critical(self._format_log("CRITICAL", message, kwargs))

    def debug(self, message: str, **kwargs):
        """Log debug message."""
        self.logger.debug(self._format_log("DEBUG", message, kwargs))

    def exception(self, message: str, exc_info=True, **kwargs):
        """
        Log exception with traceback.

        Args:
            message: Error message
            exc_info: Include exception info
            **kwargs: Additional context
        """
        if exc_info:
            kwargs["traceback"] = traceback.format_exc()

        self.logger.error(self._format_log("ERROR", message, kwargs))


class ApplicationMetrics:
    """
    Track application metrics for monitoring.

    Stores metrics in memory for the /metrics endpoint.
    """

    def __init__(self):
        """Initialize metrics tracker."""
        self.start_time = datetime.utcnow()
        self.reset()

    def reset(self):
        """Zero all counters."""
        self.metrics = {
            "requests": {
                "total": 0,
                "success": 0,
                "error": 0,
                "by_endpoint": {}
            },
            "upstream": {
                "total_calls": 0,
                "failed_calls": 0,
                "by_service": {}
            },
            "cache": {
                "hits": 0,
                "misses": 0
            },
            "platform_syncs": {
                "steam": {"success": 0, "failed": 0},
                "xbox": {"success": 0, "failed": 0},
                "playstation": {"success": 0, "failed": 0}
            },
            "uptime_seconds": 0,
            "last_updated": datetime.utcnow().isoformat()
        }

    def increment_request(self, endpoint: str, success: bool = True):
        """
        Increment request counter.

        Args:
            endpoint: Endpoint path
            success: Whether request was successful
        """
        self.metrics["requests"]["total"] += 1

        if success:
            self.metrics["requests"]["success"] += 1
        else:
            self.metrics["requests"]["error"] += 1

        # Track by endpoint
        if endpoint not in self.metrics["requests"]["by_endpoint"]:
            self.metrics["requests"]["by_endpoint"][endpoint] = {"total": 0, "success": 0, "error": 0}

        self.metrics["requests"]["by_endpoint"][endpoint]["total"] += 1
        if success:
            self.metrics["requests"]["by_endpoint"][endpoint]["success"] += 1
        else:
            self.metrics["requests"]["by_endpoint"][endpoint]["error"] += 1

        self._update_timestamp()

    def increment_upstream(self, service: str, success: bool = True):
        """
        Count a call to a third-party API.

        Args:
            service: Upstream name (omdb, igdb, rawg, steam, ...)
            success: Whether the call succeeded
        """
        upstream = self.metrics["upstream"]
        upstream["total_calls"] += 1
        if not success:
            upstream["failed_calls"] += 1

        per_service = upstream["by_service"].setdefault(service, {"success": 0, "failed": 0})
        per_service["success" if success else "failed"] += 1

        self._update_timestamp()

    def increment_platform_sync(self, platform: str, success: bool = True):
        """
        Increment platform library sync counter.

        Args:
            platform: steam, xbox or playstation
            success: Whether the sync succeeded
        """
        if platform in self.metrics["platform_syncs"]:
            key = "success" if success else "failed"
            self.metrics["platform_syncs"][platform][key] += 1

        self._update_timestamp()

    def increment_cache(self, hit: bool = True):
        """
        Increment cache counter.

        Args:
            hit: Whether cache hit or miss
        """
        if hit:
            self.metrics["cache"]["hits"] += 1
        else:
            self.metrics["cache"]["misses"] += 1

        self._update_timestamp()

    def _update_timestamp(self):
        """Update last_updated timestamp and uptime."""
        self.metrics["last_updated"] = datetime.utcnow().isoformat()
        self.metrics["uptime_seconds"] = (datetime.utcnow() - self.start_time).total_seconds()

    def get_metrics(self) -> Dict[str, Any]:
        """
        Get current metrics.

        Returns:
            Metrics dictionary
        """
        self._update_timestamp()
        return self.metrics

    def get_cache_hit_rate(self) -> float:
        """
        Calculate cache hit rate.

        Returns:
            Cache hit rate percentage
        """
        total = self.metrics["cache"]["hits"] + self.metrics["cache"]["misses"]
        if total == 0:
            return 0.0

        return (self.metrics["cache"]["hits"] / total) * 100

    def get_error_rate(self) -> float:
        """
        Calculate request error rate.

        Returns:
            Error rate percentage
        """
        total = self.metrics["requests"]["total"]
        if total == 0:
            return 0.0

        return (self.metrics["requests"]["error"] / total) * 100


# Global instances
logger = StructuredLogger("reelshelf")
app_metrics = ApplicationMetrics()
