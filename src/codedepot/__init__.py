"""Code Depot: keep small text files in a namespaced folder of a GitHub repository."""

from .core import (
    CodeDepot,
    FileSet,
    Namespace,
    Notifier,
    RemoteFile,
    SyncEngine,
    SyncErrorKind,
    SyncResult,
    infer_language
)
from .auth import CredentialStore, Credentials

__version__ = "1.0.0"

__all__ = [
    "CodeDepot",
    "CredentialStore",
    "Credentials",
    "FileSet",
    "Namespace",
    "Notifier",
    "RemoteFile",
    "SyncEngine",
    "SyncErrorKind",
    "SyncResult",
    "infer_language"
]
