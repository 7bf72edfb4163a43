"""
Repository-layer exceptions for source storage and result persistence.
"""

from __future__ import annotations


class RepositoryError(Exception):
    """Base exception for repository failures."""


class FileStorageError(RepositoryError):
    """Raised when the storage backend cannot read a source file."""


class InvalidSourcePathError(FileStorageError):
    """Raised when a source path escapes its container root."""


class PersistenceError(RepositoryError):
    """Raised when signals or insights cannot be written."""
