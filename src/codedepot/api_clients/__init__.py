"""API clients package for remote file stores."""

from .base import (
    BaseContentsClient,
    DirectoryEntry,
    ContentsAPIError,
    NotFoundError,
    ConflictError,
    AuthenticationError,
    ForbiddenError,
    RateLimitError,
    APIConnectionError,
    RemoteAPIError
)

from .github import GitHubContentsClient

__all__ = [
    # Base classes and exceptions
    "BaseContentsClient",
    "DirectoryEntry",
    "ContentsAPIError",
    "NotFoundError",
    "ConflictError",
    "AuthenticationError",
    "ForbiddenError",
    "RateLimitError",
    "APIConnectionError",
    "RemoteAPIError",

    # Client implementations
    "GitHubContentsClient"
]
