"""Sync engine keeping an in-memory file set consistent with a remote namespace."""

import asyncio
import time
from dataclasses import replace
from typing import Awaitable, Callable, List, Optional

from ..api_clients import (
    BaseContentsClient,
    DirectoryEntry,
    GitHubContentsClient,
    ContentsAPIError,
    NotFoundError,
    ConflictError,
    AuthenticationError,
    ForbiddenError,
    APIConnectionError,
)
from ..auth.credential_store import Credentials
from ..utils.logging import get_logger, log_async_execution_time
from .models import (
    FileSet,
    InvalidFileNameError,
    Namespace,
    RemoteFile,
    SyncErrorKind,
    SyncResult,
    validate_segment,
)


ClientFactory = Callable[[Credentials], BaseContentsClient]


class SyncEngine:
    """Create, read, update and delete files of one namespace.

    Every remote write presents the content descriptor (``sha``) of the
    version it replaces. Public operations never raise for remote or
    configuration failures; they return a ``SyncResult`` instead.
    """

    _ERROR_KINDS = (
        (NotFoundError, SyncErrorKind.NOT_FOUND),
        (ConflictError, SyncErrorKind.CONFLICT),
        (AuthenticationError, SyncErrorKind.UNAUTHORIZED),
        (ForbiddenError, SyncErrorKind.FORBIDDEN),
        (APIConnectionError, SyncErrorKind.NETWORK_FAILURE),
    )

    def __init__(
        self,
        namespace: Optional[Namespace] = None,
        credentials: Optional[Credentials] = None,
        client_factory: Optional[ClientFactory] = None
    ):
        """Initialize sync engine.

        Args:
            namespace: Folder the engine operates in
            credentials: Token and repository used for every request
            client_factory: Builds a contents client from credentials
        """
        self.namespace = namespace
        self.credentials = credentials
        self.client_factory = client_factory or GitHubContentsClient
        self.files = FileSet()
        self._active_name: Optional[str] = None
        self.logger = get_logger(self.__class__.__name__)

    @property
    def active_file(self) -> Optional[RemoteFile]:
        if self._active_name is None:
            return None
        return self.files.get(self._active_name)

    @property
    def is_configured(self) -> bool:
        return self.namespace is not None and self.credentials is not None and self.credentials.is_complete

    def bind(self, namespace: Optional[Namespace], credentials: Optional[Credentials]) -> None:
        """Point the engine at a namespace.

        Switching to another namespace or repository drops the local files.
        """
        if namespace != self.namespace or _repository(credentials) != _repository(self.credentials):
            self.clear()
        self.namespace = namespace
        self.credentials = credentials

    def clear(self) -> None:
        """Forget the local files and the active file."""
        self.files.clear()
        self._active_name = None

    def reset(self) -> None:
        """Forget files, active file and binding."""
        self.clear()
        self.namespace = None
        self.credentials = None

    @log_async_execution_time
    async def list_and_fetch(
        self,
        namespace: Optional[Namespace] = None,
        credentials: Optional[Credentials] = None
    ) -> SyncResult:
        """Replace the local file set with the namespace's remote contents."""
        if namespace is not None or credentials is not None:
            self.bind(namespace or self.namespace, credentials or self.credentials)

        not_configured = self._check_configured("list")
        if not_configured:
            return not_configured

        return await self._execute("list", self._list_and_fetch)

    async def _list_and_fetch(self) -> SyncResult:
        async with self.client_factory(self.credentials) as client:
            entries = await client.list_directory(self.namespace.path)
            file_entries = [entry for entry in entries if entry.is_file]

            self.logger.info(
                "Fetching namespace files",
                namespace=self.namespace.path,
                entries=len(entries),
                files=len(file_entries)
            )

            fetched = await asyncio.gather(
                *[self._fetch_file(client, entry) for entry in file_entries],
                return_exceptions=True
            )

        loaded: List[RemoteFile] = []
        skipped: List[str] = []
        for entry, outcome in zip(file_entries, fetched):
            if isinstance(outcome, BaseException):
                self.logger.warning("Dropping file that could not be fetched", file_name=entry.name, error=str(outcome))
                skipped.append(entry.name)
            else:
                loaded.append(outcome)

        self.files = FileSet(loaded)
        if self._active_name not in self.files:
            self._active_name = None

        return SyncResult.ok("list", files=self.files.to_list(), skipped=skipped)

    async def _fetch_file(self, client: BaseContentsClient, entry: DirectoryEntry) -> RemoteFile:
        validate_segment(entry.name)
        if not entry.download_url:
            raise ContentsAPIError(f"No download URL for {entry.name}")
        content = await client.fetch_raw(entry.download_url)
        return RemoteFile(name=entry.name, content=content, sha=entry.sha)

    def create(self, name: str, initial_content: str = "") -> RemoteFile:
        """Add a local-only file and make it active.

        An existing entry with the same name is overwritten locally; the
        remote store is not contacted.

        Raises:
            InvalidFileNameError: If ``name`` is not a single path segment
        """
        validate_segment(name)
        remote_file = self.files.put(RemoteFile(name=name, content=initial_content))
        self._active_name = name
        self.logger.debug("Local file created", file_name=name)
        return remote_file

    def open(self, name: str) -> Optional[RemoteFile]:
        """Make ``name`` the active file if it is in the local set."""
        remote_file = self.files.get(name)
        if remote_file is not None:
            self._active_name = name
        return remote_file

    def update_content(self, name: str, content: str) -> Optional[RemoteFile]:
        """Replace the local content of ``name``; the descriptor is kept."""
        remote_file = self.files.get(name)
        if remote_file is None:
            return None
        return self.files.put(replace(remote_file, content=content))

    @log_async_execution_time
    async def save(self, remote_file: RemoteFile, overwrite: bool = False) -> SyncResult:
        """Write ``remote_file`` to the namespace.

        A file without a descriptor is created; a file with one is updated.
        The remote descriptor is read first and must agree with the local
        one unless ``overwrite`` is set, in which case the remote descriptor
        is presented as is (last writer wins).
        """
        not_configured = self._check_configured("save")
        if not_configured:
            return not_configured

        return await self._execute("save", lambda: self._save(remote_file, overwrite), file_name=remote_file.name)

    async def _save(self, remote_file: RemoteFile, overwrite: bool) -> SyncResult:
        path = self.namespace.path_for(remote_file.name)

        # The local entry holds the last descriptor seen for this name
        known = self.files.get(remote_file.name)
        local_sha = known.sha if known is not None else remote_file.sha

        async with self.client_factory(self.credentials) as client:
            remote_sha = await client.get_sha(path)

            if not overwrite:
                conflict = self._descriptor_conflict(remote_file.name, local_sha, remote_sha)
                if conflict:
                    self.logger.warning(
                        "Save rejected by descriptor check",
                        file_name=remote_file.name,
                        local_sha=local_sha,
                        remote_sha=remote_sha
                    )
                    return SyncResult.failure("save", SyncErrorKind.CONFLICT, conflict, file=remote_file)

            new_sha = await client.put_file(path, remote_file.content, f"Save {remote_file.name}", sha=remote_sha)

        saved = self.files.put(replace(remote_file, sha=new_sha))
        self.logger.info("File saved", file_name=saved.name, created=remote_sha is None)
        return SyncResult.ok("save", file=saved)

    def _descriptor_conflict(self, name: str, local_sha: Optional[str], remote_sha: Optional[str]) -> Optional[str]:
        if local_sha is None and remote_sha is not None:
            return f"{name} already exists remotely; reload before saving"
        if local_sha is not None and remote_sha is None:
            return f"{name} was deleted remotely since it was last read"
        if local_sha != remote_sha:
            return f"{name} was changed remotely since it was last read"
        return None

    @log_async_execution_time
    async def delete(self, name: str) -> SyncResult:
        """Delete ``name`` remotely and locally; a missing remote file counts as deleted."""
        not_configured = self._check_configured("delete")
        if not_configured:
            return not_configured

        return await self._execute("delete", lambda: self._delete(name), file_name=name)

    async def _delete(self, name: str) -> SyncResult:
        path = self.namespace.path_for(name)

        async with self.client_factory(self.credentials) as client:
            remote_sha = await client.get_sha(path)
            if remote_sha is None:
                self.logger.info("File already absent remotely", file_name=name)
            else:
                try:
                    await client.delete_file(path, remote_sha, f"Delete {name}")
                except NotFoundError:
                    self.logger.info("File vanished before delete", file_name=name)

        removed = self.files.remove(name)
        if self._active_name == name:
            self._active_name = None

        self.logger.info("File deleted", file_name=name)
        return SyncResult.ok("delete", file=removed)

    def _check_configured(self, operation: str) -> Optional[SyncResult]:
        if self.credentials is None or not self.credentials.is_complete:
            return SyncResult.failure(operation, SyncErrorKind.NOT_CONFIGURED, "GitHub token and repository are not configured")
        if self.namespace is None:
            return SyncResult.failure(operation, SyncErrorKind.NOT_CONFIGURED, "No access key is set")
        return None

    async def _execute(self, operation: str, action: Callable[[], Awaitable[SyncResult]], **log_context) -> SyncResult:
        """Run ``action`` and turn any failure into a tagged result."""
        start_time = time.monotonic()

        try:
            result = await action()
        except InvalidFileNameError as e:
            result = SyncResult.failure(operation, SyncErrorKind.INVALID_NAME, str(e))
        except ContentsAPIError as e:
            result = SyncResult.failure(operation, self._error_kind(e), e.message)
        except Exception as e:
            self.logger.error("Unexpected error during sync operation", operation=operation, error=str(e), **log_context)
            result = SyncResult.failure(operation, SyncErrorKind.REMOTE_ERROR, f"Unexpected error: {e}")

        result.duration = time.monotonic() - start_time

        if not result.success:
            self.logger.warning(
                "Sync operation failed",
                operation=operation,
                error=result.error.value,
                message=result.error_message,
                **log_context
            )

        return result

    def _error_kind(self, error: ContentsAPIError) -> SyncErrorKind:
        for error_class, kind in self._ERROR_KINDS:
            if isinstance(error, error_class):
                return kind
        return SyncErrorKind.REMOTE_ERROR


def _repository(credentials: Optional[Credentials]) -> Optional[str]:
    return credentials.repository if credentials is not None else None
