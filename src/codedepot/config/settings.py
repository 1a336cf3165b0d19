"""Application configuration settings."""

from typing import Optional
from pydantic import Field
from pydantic_settings import BaseSettings


class GitHubSettings(BaseSettings):
    """GitHub contents API configuration."""

    api_base_url: str = Field(default="https://api.github.com")
    accept_header: str = Field(default="application/vnd.github.v3+json")
    namespace_root: str = Field(default="code")
    request_timeout_seconds: float = Field(default=30.0)
    user_agent: str = Field(default="codedepot")

    class Config:
        env_prefix = "CODEDEPOT_GITHUB_"


class StorageSettings(BaseSettings):
    """Local settings store configuration."""

    settings_path: str = Field(default="~/.codedepot/settings.json")

    class Config:
        env_prefix = "CODEDEPOT_STORAGE_"


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    level: str = Field(default="WARNING")
    format: str = Field(default="console")
    file_path: Optional[str] = Field(default=None)

    class Config:
        env_prefix = "CODEDEPOT_LOG_"


class AppSettings(BaseSettings):
    """Main application settings."""

    name: str = Field(default="Code Depot")
    version: str = Field(default="1.0.0")
    environment: str = Field(default="development")

    # Sub-settings
    github: GitHubSettings = GitHubSettings()
    storage: StorageSettings = StorageSettings()
    logging: LoggingSettings = LoggingSettings()

    class Config:
        env_prefix = "CODEDEPOT_"
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False
        extra = "allow"  # Allow extra fields in environment


# Global settings instance
settings = AppSettings()


def get_settings() -> AppSettings:
    """Get application settings."""
    return settings
