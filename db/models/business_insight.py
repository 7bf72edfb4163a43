"""
db/models/business_insight.py

Append-only store of validated insights and the raw reasoning output.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import ForeignKey, Index, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from db.base import Base, CreatedAtMixin, JSONDocument


class BusinessInsightRecord(Base, CreatedAtMixin):
    __tablename__ = "business_insights"

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        primary_key=True,
        default=uuid.uuid4,
    )
    job_id: Mapped[uuid.UUID] = mapped_column(
        Uuid(as_uuid=True),
        ForeignKey("analysis_jobs.id", ondelete="CASCADE"),
        nullable=False,
    )
    schema_version: Mapped[str] = mapped_column(String(16), nullable=False)
    insight: Mapped[dict[str, Any]] = mapped_column(JSONDocument, nullable=False)
    raw_response: Mapped[str] = mapped_column(Text, nullable=False)
    reasoning_metadata: Mapped[dict[str, Any]] = mapped_column(
        JSONDocument,
        nullable=False,
        comment="Prompt version, model, token usage and latency",
    )

    __table_args__ = (
        Index("ix_business_insights_job_id_created_at", "job_id", "created_at"),
    )
