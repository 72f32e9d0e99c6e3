"""Per-environment settings for the attendance engine."""
import os
from typing import Optional, Type

from .base import Config
from .development import DevelopmentConfig
from .production import ProductionConfig
from .testing import TestingConfig

config_map = {
    'development': DevelopmentConfig,
    'production': ProductionConfig,
    'testing': TestingConfig,
}

def get_config(config_name: Optional[str] = None) -> Type[Config]:
    """Resolve a config class by name, falling back to ``FLASK_ENV`` then development."""
    name = config_name or os.getenv('FLASK_ENV', 'development')
    return config_map.get(name, DevelopmentConfig)
