"""
Configuration layer.

Loads settings from YAML with environment variable substitution.
"""

from .loader import ConfigLoader, Settings, load_settings

__all__ = ["ConfigLoader", "Settings", "load_settings"]
