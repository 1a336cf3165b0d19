"""Session orchestrator tying the credential store, notifier and sync engine together."""

from contextlib import contextmanager
from typing import Iterator, List, Optional, Set

from ..auth.credential_store import CredentialStore, Credentials
from ..config.settings import get_settings
from ..utils.logging import get_logger
from .models import InvalidFileNameError, Namespace, RemoteFile, SyncErrorKind, SyncResult
from .sync_engine import ClientFactory, SyncEngine


class Notifier:
    """Receives human-readable outcome messages.

    The default implementation writes them to the log; front ends override
    ``success`` and ``error`` to show them to the user.
    """

    def __init__(self):
        self.logger = get_logger(self.__class__.__name__)

    def success(self, message: str) -> None:
        self.logger.info(message)

    def error(self, message: str) -> None:
        self.logger.warning(message)


class CodeDepot:
    """Holds the user's session and dispatches file actions to the sync engine."""

    def __init__(
        self,
        store: Optional[CredentialStore] = None,
        notifier: Optional[Notifier] = None,
        client_factory: Optional[ClientFactory] = None,
        namespace_root: Optional[str] = None
    ):
        """Initialize the session.

        Args:
            store: Settings store holding token, repository and access key
            notifier: Receiver for outcome messages
            client_factory: Contents client factory passed to the sync engine
            namespace_root: Top-level folder holding every user's namespace
        """
        self.store = store or CredentialStore()
        self.notifier = notifier or Notifier()
        self.namespace_root = namespace_root or get_settings().github.namespace_root
        self.engine = SyncEngine(client_factory=client_factory)
        self.logger = get_logger(self.__class__.__name__)
        self._in_flight: Set[str] = set()

    @property
    def access_key(self) -> Optional[str]:
        return self.store.get_access_key()

    @property
    def is_authenticated(self) -> bool:
        return self.access_key is not None

    @property
    def files(self) -> List[RemoteFile]:
        return self.engine.files.to_list()

    @property
    def active_file(self) -> Optional[RemoteFile]:
        return self.engine.active_file

    def _bind(self) -> None:
        access_key = self.access_key
        namespace = Namespace(access_key, root=self.namespace_root) if access_key else None
        self.engine.bind(namespace, self.store.load_credentials())

    def login(self, access_key: str) -> None:
        """Store ``access_key`` and switch to its namespace.

        Raises:
            InvalidFileNameError: If the key cannot be used as a folder name
        """
        Namespace((access_key or "").strip(), root=self.namespace_root)
        self.store.set_access_key(access_key)
        self._bind()
        self.notifier.success("Login Successful!")

    def generate_key(self) -> str:
        access_key = self.store.generate_access_key()
        self._bind()
        self.notifier.success(f"Your access key: {access_key[:6]}...")
        return access_key

    def logout(self) -> None:
        self.store.clear_access_key()
        self.engine.reset()
        self.notifier.success("You have been logged out successfully.")

    def configure(self, token: str, repository: str) -> Credentials:
        """Persist GitHub settings; raises ConfigurationError when they are invalid."""
        credentials = self.store.save_credentials(token, repository)
        self._bind()
        self.notifier.success("Settings saved successfully!")
        return credentials

    async def refresh(self) -> SyncResult:
        """Reload the namespace; a namespace that does not exist yet is empty."""
        self._bind()
        result = await self.engine.list_and_fetch()

        if result.error == SyncErrorKind.NOT_FOUND:
            self.engine.clear()
            return SyncResult.ok("list", files=[], duration=result.duration)

        if not result.success:
            self._report_failure(result, "Failed to load files")
        elif result.skipped:
            self.notifier.error(f"Could not load: {', '.join(result.skipped)}")
        return result

    def new_file(self, name: str) -> Optional[RemoteFile]:
        name = (name or "").strip()
        if not name:
            return None
        try:
            return self.engine.create(name)
        except InvalidFileNameError as e:
            self.notifier.error(str(e))
            return None

    def select(self, name: str) -> Optional[RemoteFile]:
        return self.engine.open(name)

    def edit(self, content: str) -> Optional[RemoteFile]:
        """Replace the active file's content locally."""
        active = self.engine.active_file
        if active is None:
            return None
        return self.engine.update_content(active.name, content)

    async def save_active(self, overwrite: bool = False) -> Optional[SyncResult]:
        active = self.engine.active_file
        if active is None:
            return None
        return await self.save(active.name, overwrite=overwrite)

    async def save(self, name: str, overwrite: bool = False) -> SyncResult:
        self._bind()
        remote_file = self.engine.files.get(name)
        if remote_file is None:
            return SyncResult.failure("save", SyncErrorKind.NOT_FOUND, f"{name} is not open")

        with self._guard(name) as busy:
            if busy:
                return busy
            result = await self.engine.save(remote_file, overwrite=overwrite)

        if result.success:
            self.notifier.success(f"{name} saved successfully!")
        else:
            self._report_failure(result, "Failed to save")
        return result

    async def delete(self, name: str) -> SyncResult:
        self._bind()
        with self._guard(name) as busy:
            if busy:
                return busy
            result = await self.engine.delete(name)

        if result.success:
            self.notifier.success(f"{name} deleted successfully!")
        else:
            self._report_failure(result, "Failed to delete")
        return result

    @contextmanager
    def _guard(self, name: str) -> Iterator[Optional[SyncResult]]:
        """Reject a second action on ``name`` while one is in flight."""
        if name in self._in_flight:
            yield SyncResult.failure("guard", SyncErrorKind.BUSY, f"{name} is busy")
            return
        self._in_flight.add(name)
        try:
            yield None
        finally:
            self._in_flight.discard(name)

    def _report_failure(self, result: SyncResult, prefix: str) -> None:
        if result.error == SyncErrorKind.NOT_CONFIGURED:
            self.notifier.error("Please configure GitHub settings first")
        else:
            self.notifier.error(f"{prefix}: {result.error_message}")
