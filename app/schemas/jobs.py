"""
Schemas for job submission, status, processing and insight endpoints.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any
from uuid import UUID

from pydantic import BaseModel, Field

from llm_synthesis.schema import BusinessInsightV1


class SubmitJobRequest(BaseModel):
    source_path: str = Field(
        min_length=1,
        max_length=1024,
        description="Path of the uploaded file inside the source container",
    )


class JobAcceptedResponse(BaseModel):
    job_id: UUID
    status: str
    submitted_at: datetime


class JobStatusResponse(BaseModel):
    job_id: UUID
    status: str
    version: int
    submitted_at: datetime
    last_updated_at: datetime
    processing_started_at: datetime | None = None
    processing_completed_at: datetime | None = None
    processing_duration_ms: int | None = None
    error_message: str | None = None
    insights_available: bool = False


class JobInsightResponse(BaseModel):
    job_id: UUID
    insight: BusinessInsightV1
    metadata: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime | None = None


class HealthResponse(BaseModel):
    status: str
    version: str
