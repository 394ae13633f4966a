"""Configuration module"""
from .settings import settings, get_settings, Settings

__all__ = ["settings", "get_settings", "Settings"]
