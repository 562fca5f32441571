# tulipkids/config/__init__.py
from __future__ import annotations

import os
from typing import Optional, Type

from .config import BaseConfig, DevelopmentConfig, ProductionConfig, TestingConfig

CONFIG_BY_NAME = {
    "base": BaseConfig,
    "development": DevelopmentConfig,
    "dev": DevelopmentConfig,
    "testing": TestingConfig,
    "test": TestingConfig,
    "production": ProductionConfig,
    "prod": ProductionConfig,
}


def get_config(name: Optional[str] = None) -> Type[BaseConfig]:
    """Config class for ``name``, else FLASK_CONFIG, else APP_ENV/ENV/FLASK_ENV; development by default."""
    if not name:
        for key in ("FLASK_CONFIG", "APP_ENV", "ENV", "FLASK_ENV"):
            name = (os.getenv(key) or "").strip()
            if name:
                break
    return CONFIG_BY_NAME.get((name or "").lower(), DevelopmentConfig)


__all__ = [
    "CONFIG_BY_NAME",
    "BaseConfig",
    "DevelopmentConfig",
    "ProductionConfig",
    "TestingConfig",
    "get_config",
]
