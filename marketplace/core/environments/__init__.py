from .base import BaseConfig
from .development import DevelopmentConfig
from .staging import StagingConfig
from .production import ProductionConfig

__all__ = [
    "BaseConfig",
    "DevelopmentConfig",
    "StagingConfig",
    "ProductionConfig",
]
