"""Data model for files kept in a remote namespace."""

from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, Iterator, List, Optional


LANGUAGE_BY_EXTENSION: Dict[str, str] = {
    "js": "javascript",
    "ts": "typescript",
    "jsx": "javascript",
    "tsx": "typescript",
    "py": "python",
    "java": "java",
    "cpp": "cpp",
    "c": "c",
    "html": "html",
    "css": "css",
    "json": "json",
    "md": "markdown",
    "txt": "text",
}

DEFAULT_LANGUAGE = "text"


def infer_language(file_name: str) -> str:
    """Map a file name to an editor language tag.

    The lookup uses the text after the last dot, case-insensitively.
    Names without an extension or with an unknown one map to ``"text"``.
    """
    if "." not in file_name:
        return DEFAULT_LANGUAGE
    extension = file_name.rsplit(".", 1)[1].lower()
    return LANGUAGE_BY_EXTENSION.get(extension, DEFAULT_LANGUAGE)


class InvalidFileNameError(ValueError):
    """Raised when a name cannot be used as a single path segment."""
    pass


def validate_segment(value: str, kind: str = "file name") -> str:
    """Check that ``value`` addresses exactly one path segment."""
    if not isinstance(value, str) or not value.strip():
        raise InvalidFileNameError(f"{kind} must be a non-empty string")
    if "/" in value or "\\" in value:
        raise InvalidFileNameError(f"{kind} must not contain path separators: {value!r}")
    if value in (".", ".."):
        raise InvalidFileNameError(f"{kind} must not be a relative path marker: {value!r}")
    return value


@dataclass
class RemoteFile:
    """A text file in the namespace.

    ``sha`` is the content descriptor handed out by the remote store. It is
    ``None`` until the file has been written remotely at least once.
    """

    name: str
    content: str = ""
    sha: Optional[str] = None

    @property
    def language(self) -> str:
        return infer_language(self.name)

    @property
    def is_synced(self) -> bool:
        return self.sha is not None


@dataclass(frozen=True)
class Namespace:
    """Per-user folder ``<root>/<access_key>`` inside the shared repository."""

    access_key: str
    root: str = "code"

    def __post_init__(self):
        validate_segment(self.access_key, "access key")
        validate_segment(self.root, "namespace root")

    @property
    def path(self) -> str:
        return f"{self.root}/{self.access_key}"

    def path_for(self, file_name: str) -> str:
        """Remote path of ``file_name`` inside this namespace."""
        validate_segment(file_name)
        return f"{self.path}/{file_name}"


class FileSet:
    """Ordered mapping of file name to RemoteFile.

    Replacing an existing name keeps its position in the iteration order.
    """

    def __init__(self, files: Optional[List[RemoteFile]] = None):
        self._files: Dict[str, RemoteFile] = {}
        for remote_file in files or []:
            self.put(remote_file)

    def put(self, remote_file: RemoteFile) -> RemoteFile:
        self._files[remote_file.name] = remote_file
        return remote_file

    def get(self, name: str) -> Optional[RemoteFile]:
        return self._files.get(name)

    def remove(self, name: str) -> Optional[RemoteFile]:
        return self._files.pop(name, None)

    def clear(self) -> None:
        self._files.clear()

    def names(self) -> List[str]:
        return list(self._files)

    def to_list(self) -> List[RemoteFile]:
        return list(self._files.values())

    def __contains__(self, name: object) -> bool:
        return name in self._files

    def __len__(self) -> int:
        return len(self._files)

    def __iter__(self) -> Iterator[RemoteFile]:
        return iter(list(self._files.values()))


class SyncErrorKind(str, Enum):
    """Failure categories reported by the sync engine."""
    NOT_CONFIGURED = "not_configured"
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NETWORK_FAILURE = "network_failure"
    REMOTE_ERROR = "remote_error"
    INVALID_NAME = "invalid_name"
    BUSY = "busy"


@dataclass
class SyncResult:
    """Outcome of a sync engine operation."""

    operation: str
    success: bool
    file: Optional[RemoteFile] = None
    files: Optional[List[RemoteFile]] = None
    skipped: List[str] = field(default_factory=list)
    error: Optional[SyncErrorKind] = None
    error_message: Optional[str] = None
    duration: Optional[float] = None

    @classmethod
    def ok(cls, operation: str, **kwargs) -> "SyncResult":
        return cls(operation=operation, success=True, **kwargs)

    @classmethod
    def failure(cls, operation: str, error: SyncErrorKind, message: str, **kwargs) -> "SyncResult":
        return cls(operation=operation, success=False, error=error, error_message=message, **kwargs)

    @property
    def needs_configuration(self) -> bool:
        """Whether the caller should ask the user to re-enter credentials."""
        return self.error in (SyncErrorKind.NOT_CONFIGURED, SyncErrorKind.UNAUTHORIZED)
