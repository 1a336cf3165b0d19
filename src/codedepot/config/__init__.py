"""Configuration package for Code Depot."""

from .settings import (
    GitHubSettings,
    StorageSettings,
    LoggingSettings,
    AppSettings,
    get_settings
)

__all__ = [
    "GitHubSettings",
    "StorageSettings",
    "LoggingSettings",
    "AppSettings",
    "get_settings"
]
