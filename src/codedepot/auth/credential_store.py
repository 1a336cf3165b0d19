"""Local key-value store for the access token, repository and access key."""

import json
import secrets
import string
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional, Union

import structlog

from ..config.settings import get_settings

logger = structlog.get_logger(__name__)

TOKEN_KEY = "github_pat"
REPOSITORY_KEY = "github_repo"
ACCESS_KEY = "access_key"

ACCESS_KEY_ALPHABET = string.ascii_lowercase + string.digits
ACCESS_KEY_LENGTH = 26


class ConfigurationError(Exception):
    """Raised when stored settings are invalid or cannot be written."""
    pass


@dataclass(frozen=True)
class Credentials:
    """Access token plus ``owner/repo`` identifier."""

    token: Optional[str] = None
    repository: Optional[str] = None

    @property
    def is_complete(self) -> bool:
        return bool(self.token) and bool(self.repository)

    def __repr__(self) -> str:
        token = "***" if self.token else None
        return f"Credentials(token={token!r}, repository={self.repository!r})"


def validate_repository(repository: str) -> str:
    """Check the ``owner/repo`` form and return the stripped value."""
    repository = (repository or "").strip()
    parts = repository.split("/")
    if len(parts) != 2 or not all(parts):
        raise ConfigurationError("Repository format should be: username/repository-name")
    return repository


class CredentialStore:
    """JSON file backed settings store."""

    def __init__(self, storage_path: Optional[Union[str, Path]] = None):
        path = storage_path or get_settings().storage.settings_path
        self.storage_path = Path(path).expanduser()

    def _read(self) -> Dict[str, Any]:
        if not self.storage_path.exists():
            return {}
        try:
            with open(self.storage_path, 'r', encoding='utf-8') as f:
                data = json.load(f)
        except (OSError, json.JSONDecodeError) as e:
            logger.warning("Failed to read settings store", path=str(self.storage_path), error=str(e))
            return {}
        return data if isinstance(data, dict) else {}

    def _write(self, data: Dict[str, Any]) -> None:
        try:
            self.storage_path.parent.mkdir(parents=True, exist_ok=True)
            with open(self.storage_path, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2)
        except OSError as e:
            raise ConfigurationError(f"Failed to write settings store: {e}")

    def get(self, key: str) -> Optional[str]:
        return self._read().get(key)

    def set(self, key: str, value: str) -> None:
        data = self._read()
        data[key] = value
        self._write(data)
        logger.debug("Setting stored", key=key)

    def remove(self, key: str) -> None:
        data = self._read()
        if data.pop(key, None) is not None:
            self._write(data)
            logger.debug("Setting removed", key=key)

    def load_credentials(self) -> Credentials:
        """Return the stored credentials, which may be incomplete."""
        data = self._read()
        return Credentials(token=data.get(TOKEN_KEY) or None, repository=data.get(REPOSITORY_KEY) or None)

    def save_credentials(self, token: str, repository: str) -> Credentials:
        """Validate and persist the token and repository."""
        if not token or not token.strip():
            raise ConfigurationError("Please fill in all fields")
        repository = validate_repository(repository)

        data = self._read()
        data[TOKEN_KEY] = token.strip()
        data[REPOSITORY_KEY] = repository
        self._write(data)

        logger.info("Credentials saved", repository=repository)
        return Credentials(token=token.strip(), repository=repository)

    def get_access_key(self) -> Optional[str]:
        return self.get(ACCESS_KEY) or None

    def set_access_key(self, access_key: str) -> None:
        if not access_key or not access_key.strip():
            raise ConfigurationError("Please enter your access key.")
        self.set(ACCESS_KEY, access_key.strip())

    def clear_access_key(self) -> None:
        self.remove(ACCESS_KEY)

    def generate_access_key(self) -> str:
        """Create, store and return a new random access key."""
        access_key = "".join(secrets.choice(ACCESS_KEY_ALPHABET) for _ in range(ACCESS_KEY_LENGTH))
        self.set_access_key(access_key)
        logger.info("Access key generated", prefix=access_key[:6])
        return access_key
