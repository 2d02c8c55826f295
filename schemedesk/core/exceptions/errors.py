"""
Built-in exception types.
"""
from __future__ import annotations

from schemedesk.core.exceptions.base import ProjectError


class ConfigurationError(ProjectError):
    """Invalid or missing configuration."""

    default_code = "CONFIGURATION_ERROR"
    default_http_status = 500


class ValidationError(ProjectError):
    """Illegal transition, failed precondition or malformed input."""

    default_code = "VALIDATION_ERROR"
    default_http_status = 400


class NotFoundError(ProjectError):
    default_code = "NOT_FOUND"
    default_http_status = 404


class UnauthorizedError(ProjectError):
    """Authentication required or failed."""

    default_code = "UNAUTHORIZED"
    default_http_status = 401


class ForbiddenError(ProjectError):
    """Caller is authenticated but may not act on the resource."""

    default_code = "FORBIDDEN"
    default_http_status = 403


class ConflictError(ProjectError):
    default_code = "CONFLICT"
    default_http_status = 409


class ExternalServiceError(ProjectError):
    """Payment gateway or another upstream failed."""

    default_code = "EXTERNAL_SERVICE_ERROR"
    default_http_status = 502
