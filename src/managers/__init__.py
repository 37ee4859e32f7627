"""
Business logic managers for the Skywatch application.

This module contains the location resolver, the astronomy aggregator and
manager, the session that wires them together, and configuration.
"""

from .app_config import AppConfig, ConfigManager, ConfigurationError
# Managers importing PySide6 are imported directly where needed

__all__ = [
    "AppConfig",
    "ConfigManager",
    "ConfigurationError",
]
