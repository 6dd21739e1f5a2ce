"""
Service Layer Module
"""

from .config_service import ConfigService
from .filter_service import FilterEffectService

__all__ = [
    'ConfigService',
    'FilterEffectService',
]
