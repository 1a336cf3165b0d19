"""GitHub repository contents API client implementation."""

import asyncio
import base64
import json
from typing import List, Dict, Any, Optional
from urllib.parse import quote

import aiohttp

from .base import (
    BaseContentsClient,
    DirectoryEntry,
    NotFoundError,
    ConflictError,
    AuthenticationError,
    ForbiddenError,
    RateLimitError,
    APIConnectionError,
    RemoteAPIError,
)
from ..auth.credential_store import Credentials
from ..config.settings import get_settings


class GitHubContentsClient(BaseContentsClient):
    """Reads and writes files of one repository through the contents API."""

    def __init__(
        self,
        credentials: Credentials,
        base_url: Optional[str] = None,
        accept_header: Optional[str] = None,
        timeout_seconds: Optional[float] = None,
        user_agent: Optional[str] = None,
        **kwargs
    ):
        """Initialize the GitHub contents client.

        Args:
            credentials: Token and ``owner/repo`` identifier
            base_url: API base URL, defaults to the configured one
            accept_header: Media type pinning the API version
            timeout_seconds: Total timeout per request
            user_agent: User-Agent header value
            **kwargs: Additional configuration parameters
        """
        super().__init__(**kwargs)
        github_settings = get_settings().github

        self.credentials = credentials
        self.base_url = (base_url or github_settings.api_base_url).rstrip('/')
        self.accept_header = accept_header or github_settings.accept_header
        self.timeout_seconds = timeout_seconds or github_settings.request_timeout_seconds
        self.user_agent = user_agent or github_settings.user_agent
        self.session: Optional[aiohttp.ClientSession] = None
        self._owns_session = False

        self.logger.debug("GitHub contents client initialized", repository=credentials.repository)

    async def __aenter__(self):
        """Async context manager entry."""
        if not self.session:
            self.session = aiohttp.ClientSession(
                timeout=aiohttp.ClientTimeout(total=self.timeout_seconds)
            )
            self._owns_session = True
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb):
        """Async context manager exit."""
        if self.session and self._owns_session:
            await self.session.close()
            self.session = None
            self._owns_session = False

    @property
    def repository_url(self) -> str:
        return f"{self.base_url}/repos/{self.credentials.repository}"

    def contents_url(self, path: str) -> str:
        """Contents endpoint for a slash-separated repository path."""
        quoted = "/".join(quote(segment, safe="") for segment in path.split("/"))
        return f"{self.repository_url}/contents/{quoted}"

    def _headers(self, with_body: bool = False) -> Dict[str, str]:
        headers = {
            "Authorization": f"token {self.credentials.token}",
            "Accept": self.accept_header,
            "User-Agent": self.user_agent,
        }
        if with_body:
            headers["Content-Type"] = "application/json"
        return headers

    async def _request(
        self,
        method: str,
        url: str,
        payload: Optional[Dict[str, Any]] = None,
        raw: bool = False
    ) -> Any:
        """Make an authenticated API request and return the decoded body."""
        if not self.session:
            raise APIConnectionError("Client session is not open")

        headers = self._headers(with_body=payload is not None)
        body = json.dumps(payload) if payload is not None else None

        try:
            async with self.session.request(method, url, headers=headers, data=body) as response:
                if response.status >= 400:
                    await self._raise_for_status(response, method)
                if raw:
                    return await response.text()
                if response.status == 204:
                    return None
                text = await response.text()
                try:
                    return json.loads(text) if text else None
                except ValueError:
                    raise RemoteAPIError(f"Invalid JSON in response from {url}", response.status)

        except aiohttp.ClientError as e:
            raise APIConnectionError(f"Network error: {e}")
        except asyncio.TimeoutError:
            raise APIConnectionError(f"Request timed out after {self.timeout_seconds}s")

    async def _raise_for_status(self, response, method: str) -> None:
        """Translate a non-success response into a typed exception."""
        status = response.status
        message = await self._error_message(response)

        self.logger.debug("GitHub API request failed", method=method, status=status, message=message)

        if status == 401:
            raise AuthenticationError(message, status)
        if status == 404:
            raise NotFoundError(message, status)
        if status == 409:
            raise ConflictError(message, status)
        if status == 422 and "sha" in message.lower():
            raise ConflictError(message, status)
        if status == 429 or (status == 403 and response.headers.get("X-RateLimit-Remaining") == "0"):
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(message, status, int(retry_after) if retry_after and retry_after.isdigit() else None)
        if status == 403:
            raise ForbiddenError(message, status)
        raise RemoteAPIError(message, status)

    async def _error_message(self, response) -> str:
        text = await response.text()
        try:
            data = json.loads(text)
        except (TypeError, ValueError):
            return text or f"HTTP {response.status}"
        if isinstance(data, dict) and data.get("message"):
            return str(data["message"])
        return text or f"HTTP {response.status}"

    async def list_directory(self, path: str) -> List[DirectoryEntry]:
        data = await self._request("GET", self.contents_url(path))
        if not isinstance(data, list):
            raise RemoteAPIError(f"{path} is not a directory")
        return [DirectoryEntry.from_api(item) for item in data]

    async def fetch_raw(self, download_url: str) -> str:
        return await self._request("GET", download_url, raw=True)

    async def get_sha(self, path: str) -> Optional[str]:
        try:
            data = await self._request("GET", self.contents_url(path))
        except NotFoundError:
            return None
        if not isinstance(data, dict):
            raise RemoteAPIError(f"{path} is a directory, not a file")
        return data.get("sha")

    async def put_file(self, path: str, content: str, message: str, sha: Optional[str] = None) -> str:
        payload = {
            "message": message,
            "content": base64.b64encode(content.encode("utf-8")).decode("ascii"),
        }
        if sha:
            payload["sha"] = sha

        data = await self._request("PUT", self.contents_url(path), payload=payload)
        new_sha = ((data or {}).get("content") or {}).get("sha")
        if not new_sha:
            raise RemoteAPIError(f"Write of {path} returned no content descriptor")
        return new_sha

    async def delete_file(self, path: str, sha: str, message: str) -> None:
        await self._request("DELETE", self.contents_url(path), payload={"message": message, "sha": sha})
