"""Domain exceptions raised by the service layer."""

from fastapi import status


class ServiceError(Exception):
    """Base class for expected failures that map to an HTTP status."""

    status_code = status.HTTP_400_BAD_REQUEST

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationFailedError(ServiceError):
    status_code = status.HTTP_400_BAD_REQUEST


class AuthenticationError(ServiceError):
    status_code = status.HTTP_401_UNAUTHORIZED


class PermissionDeniedError(ServiceError):
    status_code = status.HTTP_403_FORBIDDEN


class NotFoundError(ServiceError):
    status_code = status.HTTP_404_NOT_FOUND


class ConfigurationError(ServiceError):
    """A server-side setting needed by the operation is missing."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR


class UpstreamServiceError(ServiceError):
    """A third-party API failed or returned an unusable response."""

    status_code = status.HTTP_502_BAD_GATEWAY


class ServiceUnavailableError(ServiceError):
    """A third-party integration is not configured."""

    status_code = status.HTTP_503_SERVICE_UNAVAILABLE


class TokenExchangeError(ServiceError):
    """A third-party token exchange failed after the user's input was accepted."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
