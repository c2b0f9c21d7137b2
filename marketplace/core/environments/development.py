"""
Development Environment Configuration
======================================
Configuration overrides for local development against a local Supabase stack.
"""

from .base import BaseConfig


class DevelopmentConfig(BaseConfig):
    """
    Development environment configuration.

    Characteristics:
    - Debug mode enabled
    - Verbose, human-readable logging
    - Local Supabase endpoint by default
    """

    environment: str = "development"
    debug: bool = True
    log_level: str = "DEBUG"
    log_format: str = "text"

    # supabase start exposes the API gateway here
    supabase_url: str = "http://localhost:54321"

    class Config:
        env_file = (".env", ".env.development")
        env_file_encoding = "utf-8"
        extra = "ignore"
