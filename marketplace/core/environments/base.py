"""
Base Configuration
==================
Shared configuration across all environments.
Credentials MUST come from environment variables or an .env file.
"""

from pydantic_settings import BaseSettings
from pydantic import Field, field_validator
from typing import Optional


class BaseConfig(BaseSettings):
    """
    Base configuration shared across all environments.

    Security Notes:
    - Supabase credentials have no defaults
    - Validation ensures required fields are present
    """

    # ============================================================================
    # APPLICATION SETTINGS
    # ============================================================================
    app_name: str = "Marketplace Data Access"
    app_version: str = "1.0.0"
    environment: str = Field(
        ...,  # Required field
        description="Environment name: development, staging, or production"
    )
    debug: bool = Field(
        default=False,
        description="Enable debug mode (should be False in production)"
    )

    # ============================================================================
    # LOGGING CONFIGURATION
    # ============================================================================
    log_level: str = Field(
        default="INFO",
        description="Logging level: DEBUG, INFO, WARNING, ERROR, CRITICAL"
    )
    log_format: str = Field(
        default="json",
        description="Log format: json or text"
    )
    log_file: Optional[str] = Field(
        default=None,
        description="Optional path to a log file"
    )

    # ============================================================================
    # SUPABASE CONFIGURATION
    # ============================================================================
    supabase_url: str = Field(
        ...,  # Required
        description="Supabase project URL"
    )
    supabase_key: str = Field(
        ...,  # Required
        description="Supabase anon/public key (row-level security applies)"
    )
    supabase_service_key: Optional[str] = Field(
        default=None,
        description="Supabase service role key (bypasses row-level security)"
    )

    # ============================================================================
    # REPOSITORY DEFAULTS
    # ============================================================================
    default_page_size: int = Field(
        default=20,
        description="Page size used by list helpers when none is given"
    )
    max_page_size: int = Field(
        default=100,
        description="Upper bound applied to requested page sizes"
    )
    enforce_order_transitions: bool = Field(
        default=False,
        description="Reject order status changes not in the transition table"
    )

    # ============================================================================
    # VALIDATORS
    # ============================================================================

    @field_validator('environment')
    @classmethod
    def validate_environment(cls, v: str) -> str:
        """Ensure environment is one of the allowed values."""
        allowed = ['development', 'staging', 'production']
        if v not in allowed:
            raise ValueError(
                f"Invalid environment '{v}'. Must be one of: {', '.join(allowed)}"
            )
        return v

    @field_validator('log_level')
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Ensure log level is valid."""
        allowed = ['DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL']
        v_upper = v.upper()
        if v_upper not in allowed:
            raise ValueError(
                f"Invalid log level '{v}'. Must be one of: {', '.join(allowed)}"
            )
        return v_upper

    @field_validator('log_format')
    @classmethod
    def validate_log_format(cls, v: str) -> str:
        """Ensure log format is json or text."""
        v_lower = v.lower()
        if v_lower not in ('json', 'text'):
            raise ValueError(f"Invalid log format '{v}'. Must be 'json' or 'text'")
        return v_lower

    @field_validator('supabase_url')
    @classmethod
    def validate_supabase_url(cls, v: str) -> str:
        """Ensure the Supabase URL is an http(s) URL."""
        if not v.startswith(('https://', 'http://')):
            raise ValueError("supabase_url must start with 'https://' or 'http://'")
        return v.rstrip('/')

    @field_validator('default_page_size', 'max_page_size')
    @classmethod
    def validate_page_size(cls, v: int) -> int:
        """Page sizes must be positive."""
        if v < 1:
            raise ValueError("page sizes must be at least 1")
        return v

    class Config:
        """Pydantic configuration."""
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        # Allow extra fields for forward compatibility
        extra = "ignore"
