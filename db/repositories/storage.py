"""
Byte-stream providers for uploaded source files.
"""

from __future__ import annotations

import logging
from pathlib import Path, PurePosixPath
from typing import IO, Protocol

from db.repositories.errors import FileStorageError, InvalidSourcePathError
from signals.errors import SourceNotFoundError

logger = logging.getLogger(__name__)


class SourceFileReader(Protocol):
    """
    Opens a stored source file for reading.

    Implementations raise ``SourceNotFoundError`` when the file is absent.
    """

    def open(self, container: str, path: str) -> IO[bytes]:
        ...


def normalize_source_path(path: str) -> str:
    """
    Return ``path`` as a relative POSIX path, rejecting traversal.
    """

    candidate = (path or "").strip().replace("\\", "/")
    if not candidate:
        raise InvalidSourcePathError("Source path cannot be empty.")
    relative = PurePosixPath(candidate)
    if relative.is_absolute() or ".." in relative.parts:
        raise InvalidSourcePathError(f"Source path '{path}' must be relative to its container.")
    return relative.as_posix()


class LocalFileStorage:
    """
    Local filesystem storage backend.

    Containers map to sub-directories of ``root_dir``. This is intentionally
    simple and can be replaced with object storage later.
    """

    def __init__(self, root_dir: str | Path = "data/uploads") -> None:
        self._root_dir = Path(root_dir)

    @property
    def root_dir(self) -> Path:
        return self._root_dir

    def resolve(self, container: str, path: str) -> Path:
        container_root = (self._root_dir / normalize_source_path(container)).resolve()
        target = (container_root / normalize_source_path(path)).resolve()
        if not target.is_relative_to(container_root):
            raise InvalidSourcePathError(f"Source path '{path}' escapes container '{container}'.")
        return target

    def open(self, container: str, path: str) -> IO[bytes]:
        target = self.resolve(container, path)
        if not target.is_file():
            raise SourceNotFoundError(container, path)
        try:
            return target.open("rb")
        except FileNotFoundError as exc:
            raise SourceNotFoundError(container, path) from exc
        except OSError as exc:
            logger.exception("Failed to open source file container=%s", container)
            raise FileStorageError(f"Failed to read source file '{path}'.") from exc
