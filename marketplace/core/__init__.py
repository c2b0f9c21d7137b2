"""
Core
====
Configuration, logging and the exception taxonomy.

``settings`` is not re-exported here; importing
``marketplace.core.config`` loads and validates the environment.
"""

from marketplace.core.exceptions import (
    RepositoryError,
    NotFoundError,
    QueryError,
    UnexpectedError,
    InvalidFilterError,
    InvalidPaginationError,
    InvalidTransitionError,
    InvalidValueError,
    ClientConfigurationError,
)
from marketplace.core.logging import get_logger, setup_logging, app_logger

__all__ = [
    "RepositoryError",
    "NotFoundError",
    "QueryError",
    "UnexpectedError",
    "InvalidFilterError",
    "InvalidPaginationError",
    "InvalidTransitionError",
    "InvalidValueError",
    "ClientConfigurationError",
    "get_logger",
    "setup_logging",
    "app_logger",
]
