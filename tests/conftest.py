"""
Shared pytest fixtures: per-test SQLite databases and an uploads directory.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker

import db.models  # noqa: F401
from db.base import Base
from db.repositories.storage import LocalFileStorage
from db.session import create_db_engine, create_session_factory

UPLOADS_CONTAINER = "uploads"


@pytest.fixture()
def engine(tmp_path: Path) -> Iterator[Engine]:
    engine = create_db_engine(f"sqlite:///{tmp_path / 'signal_insight.db'}")
    Base.metadata.create_all(engine)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    return create_session_factory(engine)


@pytest.fixture()
def storage_root(tmp_path: Path) -> Path:
    root = tmp_path / "storage"
    (root / UPLOADS_CONTAINER).mkdir(parents=True)
    return root


@pytest.fixture()
def storage(storage_root: Path) -> LocalFileStorage:
    return LocalFileStorage(storage_root)


@pytest.fixture()
def write_upload(storage_root: Path) -> Callable[[str, str | bytes], str]:
    """Write a file into the uploads container and return its source path."""

    def _write(name: str, content: str | bytes) -> str:
        target = storage_root / UPLOADS_CONTAINER / name
        target.parent.mkdir(parents=True, exist_ok=True)
        data = content.encode("utf-8") if isinstance(content, str) else content
        target.write_bytes(data)
        return name

    return _write
