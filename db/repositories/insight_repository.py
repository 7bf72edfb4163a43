"""
Append-only persistence for validated insights and raw reasoning output.
"""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.base import as_utc
from db.models.business_insight import BusinessInsightRecord
from db.repositories.errors import PersistenceError
from db.repositories.types import StoredInsight
from llm_synthesis.schema import INSIGHT_SCHEMA_VERSION, BusinessInsightV1, load_insight


class InsightRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def save_insight(
        self,
        job_id: uuid.UUID,
        insight: BusinessInsightV1,
        raw_text: str,
        metadata: dict[str, Any] | None = None,
    ) -> uuid.UUID:
        record = BusinessInsightRecord(
            job_id=job_id,
            schema_version=INSIGHT_SCHEMA_VERSION,
            insight=insight.model_dump(mode="json"),
            raw_response=raw_text,
            reasoning_metadata=dict(metadata or {}),
        )
        try:
            self._session.add(record)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to persist insight for job {job_id}.") from exc
        return record.id

    def get_latest_insight(self, job_id: uuid.UUID) -> StoredInsight | None:
        stmt = (
            select(BusinessInsightRecord)
            .where(BusinessInsightRecord.job_id == job_id)
            .order_by(BusinessInsightRecord.created_at.desc())
            .limit(1)
        )
        record = self._session.scalars(stmt).first()
        if record is None:
            return None
        return StoredInsight(
            job_id=record.job_id,
            insight=load_insight(record.schema_version, record.insight),
            raw_response=record.raw_response,
            metadata=dict(record.reasoning_metadata or {}),
            created_at=as_utc(record.created_at),
        )
