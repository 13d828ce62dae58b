"""
Модуль конфигурации для Certificate Registry.
"""

from .settings import get_settings, Settings

__version__ = "1.0.0"

__all__ = ['get_settings', 'Settings']
