"""
Configuration management for the IGA governance service.
"""

from .config_loader import ConfigLoader

__all__ = ["ConfigLoader"]
