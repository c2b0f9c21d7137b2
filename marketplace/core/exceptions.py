"""
Repository Exceptions
=====================
Error taxonomy for the data-access layer.

Repository operations never raise these past their boundary; they are
carried inside ``Err`` result envelopes. ``ClientConfigurationError`` is the
only one raised directly, when a backend client cannot be built.
"""

from typing import Any, Dict, Optional


class RepositoryError(Exception):
    """Base exception for data-access errors"""

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
    ):
        self.code = code
        self.message = message
        self.details = details
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "details": self.details,
        }


class NotFoundError(RepositoryError):
    """A single-row fetch or update matched zero rows"""

    def __init__(self, message: str, table: str = None, details: Dict[str, Any] = None):
        super().__init__(
            code="RESOURCE_NOT_FOUND",
            message=message,
            details=details or {"table": table},
        )


class QueryError(RepositoryError):
    """The backend rejected or failed to execute a query"""

    def __init__(
        self,
        message: str,
        table: str = None,
        backend_code: str = None,
        hint: str = None,
        details: Dict[str, Any] = None,
    ):
        self.backend_code = backend_code
        self.hint = hint
        super().__init__(
            code="DATABASE_ERROR",
            message=message,
            details=details or {"table": table, "backend_code": backend_code},
        )


class UnexpectedError(RepositoryError):
    """Any other exception raised while building or running a request"""

    def __init__(self, message: str = "Unknown error", details: Dict[str, Any] = None):
        super().__init__(
            code="UNEXPECTED_ERROR",
            message=message or "Unknown error",
            details=details,
        )


class InvalidFilterError(RepositoryError):
    """Filter references a column or operator the repository does not know"""

    def __init__(self, message: str, column: str = None, details: Dict[str, Any] = None):
        super().__init__(
            code="INVALID_FILTER",
            message=message,
            details=details or {"column": column},
        )


class InvalidTransitionError(RepositoryError):
    """Status change not allowed by the transition table"""

    def __init__(self, current: str, target: str, details: Dict[str, Any] = None):
        super().__init__(
            code="INVALID_STATUS_TRANSITION",
            message=f"Cannot move order from '{current}' to '{target}'",
            details=details or {"from": current, "to": target},
        )


class ClientConfigurationError(RepositoryError):
    """Backend client configuration is missing or invalid"""

    def __init__(self, message: str = "Database client configuration is invalid", details: Dict[str, Any] = None):
        super().__init__(
            code="CONFIGURATION_ERROR",
            message=message,
            details=details,
        )


class InvalidPaginationError(RepositoryError):
    """Page number or page size out of range"""

    def __init__(self, message: str, details: Dict[str, Any] = None):
        super().__init__(
            code="INVALID_PAGINATION",
            message=message,
            details=details,
        )


class InvalidValueError(RepositoryError):
    """Value is not a member of the column's enumeration (status, role)"""

    def __init__(self, message: str, field: str = None, details: Dict[str, Any] = None):
        super().__init__(
            code="INVALID_VALUE",
            message=message,
            details=details or {"field": field},
        )
