"""
Storage Layer.

This package handles configuration persistence. The archive itself needs no
database: a file's presence on disk is its own record.
"""

from .config_manager import ConfigManager

__all__ = ["ConfigManager"]
