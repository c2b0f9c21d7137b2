"""
Production Environment Configuration
=====================================
Configuration for production deployment.
"""

from .base import BaseConfig
from pydantic import Field, field_validator


class ProductionConfig(BaseConfig):
    """
    Production environment configuration.

    Characteristics:
    - Debug mode disabled
    - JSON logging at INFO level
    - Service key required for back-office repositories
    """

    environment: str = "production"
    debug: bool = False
    log_level: str = "INFO"
    log_format: str = "json"  # Always JSON in production for log aggregation

    supabase_service_key: str = Field(
        ...,  # Required in production
        description="Supabase service role key"
    )

    @field_validator('debug')
    @classmethod
    def validate_debug_disabled(cls, v: bool) -> bool:
        """Ensure debug is disabled in production."""
        if v is True:
            raise ValueError("Debug mode must be disabled in production")
        return v

    @field_validator('supabase_url')
    @classmethod
    def validate_https(cls, v: str) -> str:
        """Production traffic must use TLS."""
        if not v.startswith('https://'):
            raise ValueError("supabase_url must use https in production")
        return v

    class Config:
        env_file = (".env", ".env.production")
        env_file_encoding = "utf-8"
        extra = "ignore"
