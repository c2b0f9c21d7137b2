"""
Configuration Validator
========================
Validates configuration before any backend client is created.

- Fail fast on misconfiguration
- Clear error messages for operators
- Cross-field checks that pydantic field validators cannot express
"""

import logging
import os
from typing import Optional
from pydantic import ValidationError

from marketplace.core.environments.base import BaseConfig
from marketplace.core.environments.development import DevelopmentConfig
from marketplace.core.environments.staging import StagingConfig
from marketplace.core.environments.production import ProductionConfig

logger = logging.getLogger(__name__)


class ConfigurationError(Exception):
    """Raised when configuration is invalid."""
    pass


class ConfigValidator:
    """
    Validates application configuration.

    Ensures:
    - All required environment variables are present
    - Values are properly formatted
    - Cross-field validations pass
    """

    @staticmethod
    def validate_and_load(environment: Optional[str] = None, **overrides) -> BaseConfig:
        """
        Validate and load configuration for the specified environment.

        Args:
            environment: Environment name (development, staging, production)
                        If None, reads from ENVIRONMENT env var
            **overrides: Explicit field values, taking precedence over env

        Returns:
            Validated configuration object

        Raises:
            ConfigurationError: If configuration is invalid
        """
        if environment is None:
            environment = os.getenv("ENVIRONMENT", "development")

        logger.info(f"Loading configuration for environment: {environment}")

        config_class = ConfigValidator._get_config_class(environment)
        # The selected class wins over a stale ENVIRONMENT variable
        overrides.setdefault("environment", environment)

        try:
            config = config_class(**overrides)
        except ValidationError as e:
            error_msg = ConfigValidator._format_validation_errors(e)
            logger.error(f"Configuration validation failed:\n{error_msg}")
            raise ConfigurationError(error_msg) from e

        ConfigValidator._validate_supabase_config(config)
        ConfigValidator._validate_pagination_config(config)
        ConfigValidator._log_config_summary(config)

        return config

    @staticmethod
    def _get_config_class(environment: str) -> type[BaseConfig]:
        """Get the appropriate config class for the environment."""
        config_map = {
            "development": DevelopmentConfig,
            "staging": StagingConfig,
            "production": ProductionConfig,
        }

        if environment not in config_map:
            raise ConfigurationError(
                f"Invalid environment '{environment}'. "
                f"Must be one of: {', '.join(config_map.keys())}"
            )

        return config_map[environment]

    @staticmethod
    def _validate_supabase_config(config: BaseConfig) -> None:
        """
        Validate Supabase configuration.

        The service key bypasses row-level security, so it must never be
        the same value as the public key.
        """
        if not config.supabase_key:
            raise ConfigurationError("supabase_key is required")

        if config.supabase_service_key and config.supabase_service_key == config.supabase_key:
            raise ConfigurationError(
                "supabase_service_key must differ from supabase_key"
            )

        if config.environment == "production":
            if "localhost" in config.supabase_url or "127.0.0.1" in config.supabase_url:
                logger.warning(
                    "Production Supabase URL points at localhost. "
                    "This should point to the hosted project."
                )

    @staticmethod
    def _validate_pagination_config(config: BaseConfig) -> None:
        """Default page size must fit under the maximum."""
        if config.default_page_size > config.max_page_size:
            raise ConfigurationError(
                f"default_page_size ({config.default_page_size}) cannot exceed "
                f"max_page_size ({config.max_page_size})"
            )

    @staticmethod
    def _format_validation_errors(error: ValidationError) -> str:
        """
        Format Pydantic validation errors for human readability.

        Args:
            error: Pydantic ValidationError

        Returns:
            Formatted error message
        """
        lines = ["Configuration validation failed:", ""]

        for err in error.errors():
            field = " -> ".join(str(loc) for loc in err["loc"])
            lines.append(f"  - {field}")
            lines.append(f"    Error: {err['msg']}")
            lines.append(f"    Type: {err['type']}")
            lines.append("")

        lines.append("Please check your .env file and ensure all required variables are set.")

        return "\n".join(lines)

    @staticmethod
    def _log_config_summary(config: BaseConfig) -> None:
        """Log a summary of the loaded configuration (without secrets)."""
        logger.info("Configuration Summary:")
        logger.info(f"  Environment: {config.environment}")
        logger.info(f"  Debug Mode: {config.debug}")
        logger.info(f"  Log Level: {config.log_level}")
        logger.info(f"  Log Format: {config.log_format}")
        logger.info(f"  Supabase: {config.supabase_url}")
        logger.info(f"  Service key: {'set' if config.supabase_service_key else 'not set'}")
        logger.info(f"  Strict order transitions: {config.enforce_order_transitions}")


def load_config(environment: Optional[str] = None, **overrides) -> BaseConfig:
    """
    Convenience function to load and validate configuration.

    Raises:
        ConfigurationError: If configuration is invalid
    """
    return ConfigValidator.validate_and_load(environment, **overrides)
