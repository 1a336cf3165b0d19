"""Core synchronization logic package."""

from .models import (
    FileSet,
    InvalidFileNameError,
    Namespace,
    RemoteFile,
    SyncErrorKind,
    SyncResult,
    infer_language
)
from .sync_engine import SyncEngine
from .connector import CodeDepot, Notifier

__all__ = [
    "FileSet",
    "InvalidFileNameError",
    "Namespace",
    "RemoteFile",
    "SyncErrorKind",
    "SyncResult",
    "infer_language",
    "SyncEngine",
    "CodeDepot",
    "Notifier"
]
