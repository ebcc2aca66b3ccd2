"""
Service layer for the P2P rate alert system.
"""

from .config_manager import FileConfigurationManager

__all__ = [
    "FileConfigurationManager",
]
