"""
Application Configuration
==========================
Loads and validates settings once, on first import.

Usage:
    from marketplace.core.config import settings

    url = settings.supabase_url

The process exits if configuration is invalid.
"""

import os
import logging
from typing import TYPE_CHECKING

from marketplace.core.config_validator import load_config, ConfigurationError

if TYPE_CHECKING:
    from marketplace.core.environments.base import BaseConfig

logger = logging.getLogger(__name__)

ENVIRONMENT = os.getenv("ENVIRONMENT", "development")

logger.info(f"Initializing marketplace data access in {ENVIRONMENT} environment")

try:
    settings: "BaseConfig" = load_config(ENVIRONMENT)
except ConfigurationError as e:
    logger.critical("CONFIGURATION ERROR")
    logger.critical(str(e))
    raise SystemExit(1) from e

__all__ = ["settings"]
