"""
tests/test_app.py

Startup validation and the health endpoint.
"""

from __future__ import annotations

import importlib
import sys

import pytest
from fastapi.testclient import TestClient

_ENV_NAMES = (
    "DATABASE_URL",
    "CLOUD_DATABASE_URL",
    "LOCAL_DATABASE_URL",
    "LLM_ADAPTER",
    "LLM_API_KEY",
    "OPENAI_API_KEY",
    "JOB_LEASE_TIMEOUT_SECONDS",
    "PROCESSING_TIMEOUT_SECONDS",
)


@pytest.fixture()
def clean_env(monkeypatch: pytest.MonkeyPatch) -> pytest.MonkeyPatch:
    for name in _ENV_NAMES:
        monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr("db.config.load_env_files", lambda *args, **kwargs: None)
    return monkeypatch


def _import_main():
    sys.modules.pop("app.main", None)
    return importlib.import_module("app.main")


def test_health_endpoint(clean_env: pytest.MonkeyPatch, tmp_path) -> None:
    clean_env.setenv("DATABASE_URL", f"sqlite:///{tmp_path / 'health.db'}")
    clean_env.setenv("LLM_ADAPTER", "mock")

    main = _import_main()
    response = TestClient(main.app).get("/health")

    assert response.status_code == 200
    assert response.json() == {"status": "ok", "version": main.API_VERSION}


def test_startup_reports_every_problem(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("LLM_ADAPTER", "openai")
    clean_env.setenv("PROCESSING_TIMEOUT_SECONDS", "-5")

    with pytest.raises(RuntimeError) as exc_info:
        _import_main()

    message = str(exc_info.value)
    assert "No database URL configured" in message
    assert "LLM API key is not set" in message
    assert "PROCESSING_TIMEOUT_SECONDS" in message


def test_unknown_adapter_is_rejected(clean_env: pytest.MonkeyPatch) -> None:
    clean_env.setenv("DATABASE_URL", "sqlite://")
    clean_env.setenv("LLM_ADAPTER", "claude")

    with pytest.raises(RuntimeError, match="LLM_ADAPTER"):
        _import_main()
