"""Credential handling for Code Depot."""

from .credential_store import CredentialStore, Credentials, ConfigurationError, validate_repository

__all__ = ["CredentialStore", "Credentials", "ConfigurationError", "validate_repository"]
