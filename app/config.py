"""
app/config.py

Application-level configuration helpers.
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from datetime import timedelta
from functools import lru_cache

from db.config import load_env_files

_ALLOWED_LLM_ADAPTERS = {"openai", "mock"}


@lru_cache(maxsize=1)
def _load_env_once() -> None:
    """
    Ensure project `.env` files are loaded once before reading app settings.
    """

    load_env_files()


def _get_int_env(name: str, default: int) -> int:
    """
    Read an integer from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return int(raw_value)
    except ValueError:
        return default


def _get_float_env(name: str, default: float) -> float:
    """
    Read a float from environment variables with safe fallback.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None:
        return default
    try:
        return float(raw_value)
    except ValueError:
        return default


def _get_optional_float_env(name: str) -> float | None:
    """
    Read an optional positive float; unset, blank, invalid or non-positive means None.
    """

    _load_env_once()
    raw_value = os.getenv(name)
    if raw_value is None or not raw_value.strip():
        return None
    try:
        value = float(raw_value)
    except ValueError:
        return None
    return value if value > 0 else None


def _get_str_env(name: str, default: str) -> str:
    """
    Read a string from environment variables with fallback.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return default
    stripped = value.strip()
    return stripped if stripped else default


def _get_optional_str_env(name: str) -> str | None:
    """
    Read an optional string value from environment variables.
    """

    _load_env_once()
    value = os.getenv(name)
    if value is None:
        return None
    stripped = value.strip()
    return stripped if stripped else None


@dataclass(frozen=True)
class StorageSettings:
    """
    Where uploaded source files are read from.
    """

    root_dir: str = "data/uploads"
    container: str = "uploads"


@dataclass(frozen=True)
class ReasoningSettings:
    """
    LLM adapter settings for insight reasoning.
    """

    adapter: str = "openai"
    model: str = "gpt-4o-mini"
    api_key: str | None = None
    base_url: str | None = None
    max_tokens: int = 800
    temperature: float = 0.2
    timeout_seconds: float = 60.0
    max_response_chars: int = 100_000
    prompt_version: str = "v1.0"


@dataclass(frozen=True)
class JobSettings:
    """
    Job lifecycle settings. ``None`` disables the corresponding mechanism.
    """

    lease_timeout_seconds: float | None = None
    processing_timeout_seconds: float | None = None

    @property
    def lease_timeout(self) -> timedelta | None:
        if self.lease_timeout_seconds is None:
            return None
        return timedelta(seconds=self.lease_timeout_seconds)


@lru_cache(maxsize=1)
def get_storage_settings() -> StorageSettings:
    """
    Return cached source storage settings from environment variables.
    """

    return StorageSettings(
        root_dir=_get_str_env("SOURCE_ROOT_DIR", "data/uploads"),
        container=_get_str_env("SOURCE_CONTAINER", "uploads"),
    )


@lru_cache(maxsize=1)
def get_reasoning_settings() -> ReasoningSettings:
    """
    Return cached reasoning settings from environment variables.

    Raises RuntimeError if LLM_ADAPTER names an unknown adapter.
    """

    adapter = _get_str_env("LLM_ADAPTER", "openai").lower()
    if adapter not in _ALLOWED_LLM_ADAPTERS:
        raise RuntimeError(
            f"LLM_ADAPTER '{adapter}' is not valid. "
            f"Allowed values: {sorted(_ALLOWED_LLM_ADAPTERS)}."
        )

    return ReasoningSettings(
        adapter=adapter,
        model=_get_str_env("LLM_MODEL", "gpt-4o-mini"),
        api_key=_get_optional_str_env("LLM_API_KEY") or _get_optional_str_env("OPENAI_API_KEY"),
        base_url=_get_optional_str_env("LLM_BASE_URL"),
        max_tokens=max(1, _get_int_env("LLM_MAX_TOKENS", 800)),
        temperature=min(2.0, max(0.0, _get_float_env("LLM_TEMPERATURE", 0.2))),
        timeout_seconds=max(1.0, _get_float_env("LLM_TIMEOUT_SECONDS", 60.0)),
        max_response_chars=max(1, _get_int_env("LLM_MAX_RESPONSE_CHARS", 100_000)),
        prompt_version=_get_str_env("PROMPT_VERSION", "v1.0"),
    )


@lru_cache(maxsize=1)
def get_job_settings() -> JobSettings:
    """
    Return cached job lifecycle settings from environment variables.
    """

    return JobSettings(
        lease_timeout_seconds=_get_optional_float_env("JOB_LEASE_TIMEOUT_SECONDS"),
        processing_timeout_seconds=_get_optional_float_env("PROCESSING_TIMEOUT_SECONDS"),
    )
