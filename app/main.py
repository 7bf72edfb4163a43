from __future__ import annotations

import logging
import os
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.schemas.jobs import HealthResponse

API_VERSION = "1.0.0"

_DATABASE_URL_NAMES = ("DATABASE_URL", "CLOUD_DATABASE_URL", "LOCAL_DATABASE_URL")
_TIMEOUT_NAMES = ("JOB_LEASE_TIMEOUT_SECONDS", "PROCESSING_TIMEOUT_SECONDS")

logger = logging.getLogger(__name__)


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _database_errors() -> list[str]:
    if any(_env(name) for name in _DATABASE_URL_NAMES):
        return []
    return [f"No database URL configured. Set one of: {', '.join(_DATABASE_URL_NAMES)}."]


def _reasoning_errors() -> list[str]:
    adapter = _env("LLM_ADAPTER", "openai").lower()
    if adapter not in {"openai", "mock"}:
        return [f"LLM_ADAPTER='{adapter}' is not valid. Allowed values: ['mock', 'openai']."]
    if adapter == "mock" or _env("LLM_API_KEY") or _env("OPENAI_API_KEY"):
        return []
    return ["LLM API key is not set. Provide LLM_API_KEY or OPENAI_API_KEY (LLM_ADAPTER=openai)."]


def _timeout_errors() -> list[str]:
    errors: list[str] = []
    for name in _TIMEOUT_NAMES:
        raw = _env(name)
        if not raw:
            continue
        try:
            valid = float(raw) > 0
        except ValueError:
            valid = False
        if not valid:
            errors.append(f"{name}='{raw}' must be a positive number of seconds.")
    return errors


def _validate_env() -> None:
    """
    Fail fast on configuration problems before any connection is opened.

    Every problem is collected so one restart is enough to fix them all.
    The API key is only required for the openai adapter; job timeouts are
    optional but must be positive when present.
    """

    from db.config import load_env_files

    load_env_files()

    errors = _database_errors() + _reasoning_errors() + _timeout_errors()
    if errors:
        raise RuntimeError(
            "Startup validation failed - missing or invalid environment variables:\n"
            + "\n".join(f"  - {error}" for error in errors)
        )


def _configure_logging() -> None:
    level_name = _env("LOG_LEVEL", "INFO").upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def _check_db() -> None:
    """Run SELECT 1 through a fresh session; raise RuntimeError if unreachable."""
    from sqlalchemy import text

    from db.session import SessionLocal

    try:
        with SessionLocal() as db:
            db.execute(text("SELECT 1"))
    except Exception as exc:
        raise RuntimeError("Database unavailable.") from exc


def _missing_tables() -> list[str]:
    from sqlalchemy import inspect as sa_inspect

    import db.models  # noqa: F401
    from db.base import Base
    from db.session import get_engine

    existing = set(sa_inspect(get_engine()).get_table_names())
    return sorted(set(Base.metadata.tables) - existing)


def _check_schema() -> None:
    """
    Require the analysis tables to exist. Migrations are never run from here.
    """

    missing = _missing_tables()
    if not missing:
        return
    logger.critical(
        "Schema mismatch: tables %s are absent. Run 'alembic upgrade head' and restart.",
        ", ".join(missing),
    )
    raise RuntimeError(f"Schema mismatch: missing table(s) {', '.join(missing)}. Run migrations and restart.")


@asynccontextmanager
async def _lifespan(application: FastAPI) -> AsyncIterator[None]:
    _check_db()
    _check_schema()
    logger.info("Database connectivity and schema confirmed")
    yield


def create_app() -> FastAPI:
    """
    Build the SignalInsight API: job endpoints plus a health check.
    """

    _validate_env()
    _configure_logging()

    application = FastAPI(
        title="SignalInsight API",
        version=API_VERSION,
        lifespan=_lifespan,
    )

    from app.api.routers import jobs_router

    application.include_router(jobs_router)

    @application.get("/health", response_model=HealthResponse)
    def healthcheck() -> HealthResponse:
        return HealthResponse(status="ok", version=API_VERSION)

    return application


app = create_app()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host=_env("HOST", "127.0.0.1"),
        port=int(_env("PORT", "8000")),
    )
