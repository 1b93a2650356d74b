"""
Service layer for the Rinkan Monitor.
"""

from .config_manager import ConfigurationManager

__all__ = [
    "ConfigurationManager",
]
