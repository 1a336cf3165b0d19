"""Shared fixtures: an in-memory stand-in for the remote contents store."""

import hashlib
import os
import sys
from typing import Dict, List, Optional, Tuple

import pytest

# Add src to path for imports
sys.path.insert(0, os.path.join(os.path.dirname(__file__), '..', 'src'))

from codedepot.api_clients import (
    BaseContentsClient,
    DirectoryEntry,
    NotFoundError,
    ConflictError,
    APIConnectionError,
)
from codedepot.auth import Credentials
from codedepot.core import Namespace, SyncEngine


DOWNLOAD_PREFIX = "mem://"


class RemoteStore:
    """Files keyed by repository path, with GitHub-like descriptor checks."""

    def __init__(self):
        self.files: Dict[str, Tuple[str, str]] = {}
        self.requests: List[Tuple[str, str, Optional[str]]] = []
        self.failing_downloads = set()
        self.failing_listing: Optional[Exception] = None
        self.clients: List["InMemoryContentsClient"] = []
        self._version = 0

    def _next_sha(self, path: str, content: str) -> str:
        self._version += 1
        return hashlib.sha1(f"{path}:{self._version}:{content}".encode()).hexdigest()

    def seed(self, path: str, content: str) -> str:
        """Write ``path`` directly, as another client would."""
        sha = self._next_sha(path, content)
        self.files[path] = (content, sha)
        return sha

    def sha_of(self, path: str) -> Optional[str]:
        entry = self.files.get(path)
        return entry[1] if entry else None

    def content_of(self, path: str) -> Optional[str]:
        entry = self.files.get(path)
        return entry[0] if entry else None

    def paths_requested(self) -> List[str]:
        return [path for _, path, _ in self.requests]

    def factory(self, credentials: Credentials) -> "InMemoryContentsClient":
        client = InMemoryContentsClient(self, credentials)
        self.clients.append(client)
        return client


class InMemoryContentsClient(BaseContentsClient):
    """Contents client backed by a RemoteStore."""

    def __init__(self, store: RemoteStore, credentials: Credentials):
        super().__init__()
        self.store = store
        self.credentials = credentials

    async def list_directory(self, path: str) -> List[DirectoryEntry]:
        self.store.requests.append(("LIST", path, None))
        if self.store.failing_listing is not None:
            raise self.store.failing_listing

        prefix = path + "/"
        children = []
        for file_path in self.store.files:
            if file_path.startswith(prefix):
                child = file_path[len(prefix):].split("/")[0]
                if child not in children:
                    children.append(child)
        if not children:
            raise NotFoundError("Not Found", 404)

        entries = []
        for child in children:
            child_path = prefix + child
            if child_path in self.store.files:
                entries.append(DirectoryEntry(
                    name=child,
                    type="file",
                    sha=self.store.sha_of(child_path),
                    download_url=DOWNLOAD_PREFIX + child_path
                ))
            else:
                entries.append(DirectoryEntry(name=child, type="dir"))
        return entries

    async def fetch_raw(self, download_url: str) -> str:
        path = download_url[len(DOWNLOAD_PREFIX):]
        self.store.requests.append(("RAW", path, None))
        if path in self.store.failing_downloads:
            raise APIConnectionError("Network error: connection reset")
        content = self.store.content_of(path)
        if content is None:
            raise NotFoundError("Not Found", 404)
        return content

    async def get_sha(self, path: str) -> Optional[str]:
        self.store.requests.append(("GET", path, None))
        return self.store.sha_of(path)

    async def put_file(self, path: str, content: str, message: str, sha: Optional[str] = None) -> str:
        self.store.requests.append(("PUT", path, sha))
        current = self.store.sha_of(path)
        if current is not None and sha is None:
            raise ConflictError("Invalid request.\n\n\"sha\" wasn't supplied.", 422)
        if sha is not None and sha != current:
            raise ConflictError(f"{path} does not match {sha}", 409)
        return self.store.seed(path, content)

    async def delete_file(self, path: str, sha: str, message: str) -> None:
        self.store.requests.append(("DELETE", path, sha))
        current = self.store.sha_of(path)
        if current is None:
            raise NotFoundError("Not Found", 404)
        if sha != current:
            raise ConflictError(f"{path} does not match {sha}", 409)
        del self.store.files[path]


@pytest.fixture
def remote():
    return RemoteStore()


@pytest.fixture
def credentials():
    return Credentials(token="ghp_test_token", repository="octo/depot")


@pytest.fixture
def namespace():
    return Namespace("alice123")


@pytest.fixture
def engine(remote, credentials, namespace):
    return SyncEngine(namespace=namespace, credentials=credentials, client_factory=remote.factory)
