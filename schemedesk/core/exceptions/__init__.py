"""
schemedesk exception system.

Usage:
    from schemedesk.core.exceptions import ForbiddenError, ValidationError

    raise ValidationError(
        "Cannot transition from PAID to COMPLETED",
        details={"from_status": "PAID", "to_status": "COMPLETED"},
    )
"""
from schemedesk.core.exceptions.base import ProjectError
from schemedesk.core.exceptions.errors import (
    ConfigurationError,
    ConflictError,
    ExternalServiceError,
    ForbiddenError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

__all__ = [
    "ProjectError",
    "ConfigurationError",
    "ValidationError",
    "NotFoundError",
    "UnauthorizedError",
    "ForbiddenError",
    "ConflictError",
    "ExternalServiceError",
]
