"""Configuration module for stockdb."""

from .settings import Settings, settings

__all__ = ["Settings", "settings"]
