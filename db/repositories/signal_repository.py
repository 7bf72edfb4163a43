"""
Append-only persistence for extracted signals and their bounded summary.
"""

from __future__ import annotations

import uuid

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from db.base import as_utc
from db.models.business_signals import BusinessSignalsRecord
from db.repositories.errors import PersistenceError
from db.repositories.types import StoredSignals
from signals.schema import (
    SIGNALS_SCHEMA_VERSION,
    SUMMARY_SCHEMA_VERSION,
    BusinessSignalsV1,
    SignalSummaryV1,
    load_signals,
    load_summary,
)


class SignalRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def save_signals(
        self,
        job_id: uuid.UUID,
        signals: BusinessSignalsV1,
        summary: SignalSummaryV1,
    ) -> uuid.UUID:
        record = BusinessSignalsRecord(
            job_id=job_id,
            schema_version=SIGNALS_SCHEMA_VERSION,
            summary_schema_version=SUMMARY_SCHEMA_VERSION,
            record_count=signals.record_count,
            signals=signals.model_dump(mode="json"),
            summary=summary.model_dump(mode="json"),
        )
        try:
            self._session.add(record)
            self._session.flush()
        except SQLAlchemyError as exc:
            raise PersistenceError(f"Failed to persist signals for job {job_id}.") from exc
        return record.id

    def get_latest_signals(self, job_id: uuid.UUID) -> StoredSignals | None:
        stmt = (
            select(BusinessSignalsRecord)
            .where(BusinessSignalsRecord.job_id == job_id)
            .order_by(BusinessSignalsRecord.created_at.desc())
            .limit(1)
        )
        record = self._session.scalars(stmt).first()
        if record is None:
            return None
        return StoredSignals(
            job_id=record.job_id,
            signals=load_signals(record.schema_version, record.signals),
            summary=load_summary(record.summary_schema_version, record.summary),
            created_at=as_utc(record.created_at),
        )
