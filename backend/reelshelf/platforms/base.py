"""Shared HTTP plumbing for third-party API clients."""

import requests
from typing import Any, Optional

from reelshelf.config import settings
from reelshelf.services.errors import UpstreamServiceError
from reelshelf.services.logging_service import logger, app_metrics


class BaseAPIClient:
    """
    Thin wrapper around a requests.Session.

    Transport failures and non-2xx responses are raised as
    UpstreamServiceError and counted in the upstream metrics.
    """

    service_name = "upstream"

    def __init__(self, session: Optional[requests.Session] = None, timeout: Optional[float] = None):
        self.session = session or requests.Session()
        self.timeout = timeout or settings.HTTP_TIMEOUT_SECONDS

    def _request(self, method: str, url: str, **kwargs) -> requests.Response:
        kwargs.setdefault("timeout", self.timeout)

        try:
            response = self.session.request(method, url, **kwargs)
        except requests.RequestException as e:
            app_metrics.increment_upstream(self.service_name, success=False)
            logger.error(f"{self.service_name} request failed", url=url, error=str(e))
            raise UpstreamServiceError(f"{self.service_name} request failed: {e}") from e

        if not response.ok:
            app_metrics.increment_upstream(self.service_name, success=False)
            logger.warning(
                f"{self.service_name} returned an error",
                url=url,
                status_code=response.status_code,
                body=response.text[:200]
            )
            raise UpstreamServiceError(
                f"{self.service_name} API error: {response.status_code} {response.reason or ''}".strip()
            )

        app_metrics.increment_upstream(self.service_name, success=True)
        return response

    def _get_json(self, url: str, **kwargs) -> Any:
        response = self._request("GET", url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamServiceError(f"{self.service_name} returned invalid JSON") from e

    def _post_json(self, url: str, **kwargs) -> Any:
        response = self._request("POST", url, **kwargs)
        try:
            return response.json()
        except ValueError as e:
            raise UpstreamServiceError(f"{self.service_name} returned invalid JSON") from e
