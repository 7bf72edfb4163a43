"""
Typed read-side snapshots returned by repositories.
"""

from __future__ import annotations

import uuid
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from llm_synthesis.schema import BusinessInsightV1
from signals.schema import BusinessSignalsV1, SignalSummaryV1


@dataclass(frozen=True)
class JobRecord:
    """
    Immutable snapshot of one analysis job row.
    """

    job_id: uuid.UUID
    source_path: str
    status: str
    version: int
    submitted_at: datetime
    last_updated_at: datetime
    processing_started_at: datetime | None = None
    processing_completed_at: datetime | None = None
    processing_duration_ms: int | None = None
    error_message: str | None = None
    insights_available: bool = False


@dataclass(frozen=True)
class StoredSignals:
    job_id: uuid.UUID
    signals: BusinessSignalsV1
    summary: SignalSummaryV1
    created_at: datetime


@dataclass(frozen=True)
class StoredInsight:
    job_id: uuid.UUID
    insight: BusinessInsightV1
    raw_response: str
    metadata: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
