"""
Configuration - Explorer settings
"""

from .settings import ExplorerSettings

__all__ = ["ExplorerSettings"]
