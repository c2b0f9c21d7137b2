"""
Staging Environment Configuration
==================================
Production-like settings with more verbose logging.
"""

from .base import BaseConfig


class StagingConfig(BaseConfig):
    """
    Staging environment configuration.

    Characteristics:
    - Debug mode disabled
    - JSON logs at DEBUG level
    - Strict order transitions to surface illegal status writes early
    """

    environment: str = "staging"
    debug: bool = False
    log_level: str = "DEBUG"  # More verbose than prod for testing
    log_format: str = "json"
    enforce_order_transitions: bool = True

    class Config:
        env_file = (".env", ".env.staging")
        env_file_encoding = "utf-8"
        extra = "ignore"
