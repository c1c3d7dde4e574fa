"""
API error taxonomy.

Handlers raise these exceptions and the ``lambda_handler`` decorator turns
them into HTTP responses, so every error path shares one response format.
"""

from typing import Any, Dict, Optional

from .responses import HTTPStatus


class APIError(Exception):
    """Base class for errors that map directly to an HTTP status."""

    status = HTTPStatus.INTERNAL_SERVER_ERROR
    default_message = "Internal server error"

    def __init__(
        self,
        message: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.message = message or self.default_message
        self.details = details
        super().__init__(self.message)


class AuthenticationError(APIError):
    """Missing, malformed, expired, revoked or otherwise invalid credential."""

    status = HTTPStatus.UNAUTHORIZED
    default_message = "Invalid or expired authentication token"


class ValidationError(APIError):
    """Request body or parameters failed validation."""

    status = HTTPStatus.BAD_REQUEST
    default_message = "Validation failed"


class NotFoundError(APIError):
    """Record is absent or owned by another principal."""

    status = HTTPStatus.NOT_FOUND
    default_message = "Resource not found"

    def __init__(self, resource: str, identifier: Optional[str] = None):
        if identifier:
            message = f"{resource} '{identifier}' not found"
        else:
            message = f"{resource} not found"
        super().__init__(message)


class DependencyError(APIError):
    """A database or identity provider call failed."""

    default_message = "Internal server error"


class ConfigurationError(APIError):
    """The service is missing configuration it needs to serve the request."""

    default_message = "Authentication not configured"
