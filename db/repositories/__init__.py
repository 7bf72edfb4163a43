"""
Repository layer exports.
"""

from db.repositories.errors import (
    FileStorageError,
    InvalidSourcePathError,
    PersistenceError,
    RepositoryError,
)
from db.repositories.insight_repository import InsightRepository
from db.repositories.job_repository import JobRepository
from db.repositories.signal_repository import SignalRepository
from db.repositories.storage import LocalFileStorage, SourceFileReader
from db.repositories.types import JobRecord, StoredInsight, StoredSignals

__all__ = [
    "JobRepository",
    "SignalRepository",
    "InsightRepository",
    "JobRecord",
    "StoredSignals",
    "StoredInsight",
    "SourceFileReader",
    "LocalFileStorage",
    "RepositoryError",
    "FileStorageError",
    "InvalidSourcePathError",
    "PersistenceError",
]
