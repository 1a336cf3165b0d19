"""Base contents client interface and common functionality."""

from abc import ABC, abstractmethod
from typing import List, Dict, Any, Optional
from dataclasses import dataclass

from ..utils.logging import get_logger


@dataclass
class DirectoryEntry:
    """One entry of a directory listing."""

    name: str
    type: str
    sha: Optional[str] = None
    download_url: Optional[str] = None

    @property
    def is_file(self) -> bool:
        return self.type == "file"

    @classmethod
    def from_api(cls, data: Dict[str, Any]) -> "DirectoryEntry":
        return cls(
            name=data.get("name", ""),
            type=data.get("type", ""),
            sha=data.get("sha"),
            download_url=data.get("download_url")
        )


class BaseContentsClient(ABC):
    """Abstract base class for remote file stores addressed by path."""

    def __init__(self, **kwargs):
        self.logger = get_logger(self.__class__.__name__)

    async def __aenter__(self):
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        return None

    @abstractmethod
    async def list_directory(self, path: str) -> List[DirectoryEntry]:
        """List the entries directly under ``path``.

        Raises:
            NotFoundError: If the directory does not exist
        """
        pass

    @abstractmethod
    async def fetch_raw(self, download_url: str) -> str:
        """Fetch the raw text behind a download URL."""
        pass

    @abstractmethod
    async def get_sha(self, path: str) -> Optional[str]:
        """Return the current content descriptor of ``path``, or None if absent."""
        pass

    @abstractmethod
    async def put_file(self, path: str, content: str, message: str, sha: Optional[str] = None) -> str:
        """Create or overwrite ``path`` and return the new content descriptor.

        Args:
            path: Remote file path
            content: Text content, encoded for transport by the client
            message: Commit message
            sha: Descriptor of the version being replaced; omitted on create

        Raises:
            ConflictError: If ``sha`` does not match the remote state
        """
        pass

    @abstractmethod
    async def delete_file(self, path: str, sha: str, message: str) -> None:
        """Delete ``path`` at the version identified by ``sha``."""
        pass


class ContentsAPIError(Exception):
    """Base class for contents API failures."""

    def __init__(self, message: str, status: Optional[int] = None):
        super().__init__(message)
        self.message = message
        self.status = status


class NotFoundError(ContentsAPIError):
    """Raised when the addressed path does not exist."""
    pass


class ConflictError(ContentsAPIError):
    """Raised when a content descriptor is missing or stale."""
    pass


class AuthenticationError(ContentsAPIError):
    """Raised when the access token is rejected."""
    pass


class ForbiddenError(ContentsAPIError):
    """Raised when the token lacks permission for the repository."""
    pass


class RateLimitError(ContentsAPIError):
    """Raised when API rate limit is exceeded."""

    def __init__(self, message: str, status: Optional[int] = None, retry_after: Optional[int] = None):
        super().__init__(message, status)
        self.retry_after = retry_after


class APIConnectionError(ContentsAPIError):
    """Raised when the request fails at the transport level."""
    pass


class RemoteAPIError(ContentsAPIError):
    """Raised for any other non-success response."""
    pass
