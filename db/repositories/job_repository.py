"""
Repository for the analysis job lifecycle.

Every state change is a single conditional ``UPDATE ... WHERE id = :id AND
status IN (:expected)`` that also bumps ``version``. A transition succeeded
when exactly one row was affected; anything else means another caller got
there first (or the job does not exist) and nothing was written.
"""

from __future__ import annotations

import uuid
from collections.abc import Iterable
from datetime import datetime, timedelta
from typing import Any

from sqlalchemy import exists, select, update
from sqlalchemy.orm import Session

from db.base import as_utc, utc_now
from db.models.analysis_job import AnalysisJob, JobStatus
from db.models.business_insight import BusinessInsightRecord
from db.repositories.types import JobRecord

MAX_ERROR_MESSAGE_LENGTH = 1000


def _duration_ms(started_at: datetime | None, finished_at: datetime) -> int | None:
    started = as_utc(started_at)
    if started is None:
        return None
    return max(0, int((finished_at - started).total_seconds() * 1000))


def truncate_error(message: str) -> str:
    return message[:MAX_ERROR_MESSAGE_LENGTH]


def _lease_criteria(lease_version: int | None) -> tuple[Any, ...]:
    if lease_version is None:
        return ()
    return (AnalysisJob.version == lease_version,)


class JobRepository:
    def __init__(self, session: Session) -> None:
        self._session = session

    def create_job(self, *, job_id: uuid.UUID, source_path: str) -> JobRecord:
        now = utc_now()
        job = AnalysisJob(
            id=job_id,
            source_path=source_path,
            status=JobStatus.PENDING,
            version=1,
            submitted_at=now,
            last_updated_at=now,
        )
        self._session.add(job)
        self._session.flush()
        return self._to_record(job, insights_available=False)

    def try_begin_processing(self, job_id: uuid.UUID) -> bool:
        """
        Acquire the processing lease. Exactly one concurrent caller wins.
        """

        now = utc_now()
        return self._transition(
            job_id,
            expected=(JobStatus.PENDING,),
            values={
                "status": JobStatus.PROCESSING,
                "processing_started_at": now,
                "processing_completed_at": None,
                "processing_duration_ms": None,
                "error_message": None,
                "last_updated_at": now,
            },
        )

    def mark_completed(self, job_id: uuid.UUID, lease_version: int | None = None) -> bool:
        """
        Finish a processing job. With ``lease_version`` the write only applies
        while the row is still at the version the caller leased.
        """

        now = utc_now()
        return self._transition(
            job_id,
            expected=(JobStatus.PROCESSING,),
            extra_criteria=_lease_criteria(lease_version),
            values={
                "status": JobStatus.COMPLETED,
                "processing_completed_at": now,
                "processing_duration_ms": _duration_ms(self._started_at(job_id), now),
                "error_message": None,
                "last_updated_at": now,
            },
        )

    def mark_failed(
        self,
        job_id: uuid.UUID,
        error_message: str,
        lease_version: int | None = None,
    ) -> bool:
        now = utc_now()
        return self._transition(
            job_id,
            expected=(JobStatus.PENDING, JobStatus.PROCESSING),
            extra_criteria=_lease_criteria(lease_version),
            values={
                "status": JobStatus.FAILED,
                "processing_completed_at": now,
                "processing_duration_ms": _duration_ms(self._started_at(job_id), now),
                "error_message": truncate_error(error_message),
                "last_updated_at": now,
            },
        )

    def requeue_failed(self, job_id: uuid.UUID) -> bool:
        """
        Move a failed job back to pending so it can be processed again.
        """

        return self._transition(
            job_id,
            expected=(JobStatus.FAILED,),
            values={
                "status": JobStatus.PENDING,
                "processing_started_at": None,
                "processing_completed_at": None,
                "processing_duration_ms": None,
                "last_updated_at": utc_now(),
            },
        )

    def reclaim_stale_lease(self, job_id: uuid.UUID, lease_timeout: timedelta) -> bool:
        """
        Return a job stuck in processing for longer than ``lease_timeout`` to pending.
        """

        now = utc_now()
        cutoff = now - lease_timeout
        return self._transition(
            job_id,
            expected=(JobStatus.PROCESSING,),
            values={
                "status": JobStatus.PENDING,
                "processing_started_at": None,
                "error_message": "Processing lease expired; job returned to pending.",
                "last_updated_at": now,
            },
            extra_criteria=(AnalysisJob.processing_started_at < cutoff,),
        )

    def get_status(self, job_id: uuid.UUID) -> JobRecord | None:
        stmt = (
            select(AnalysisJob)
            .where(AnalysisJob.id == job_id)
            .execution_options(populate_existing=True)
        )
        job = self._session.scalars(stmt).first()
        if job is None:
            return None
        insights_available = bool(
            self._session.scalar(
                select(exists().where(BusinessInsightRecord.job_id == job_id))
            )
        )
        return self._to_record(job, insights_available=insights_available)

    def get_source_path(self, job_id: uuid.UUID) -> str | None:
        return self._session.scalar(
            select(AnalysisJob.source_path).where(AnalysisJob.id == job_id)
        )

    def _started_at(self, job_id: uuid.UUID) -> datetime | None:
        return self._session.scalar(
            select(AnalysisJob.processing_started_at).where(AnalysisJob.id == job_id)
        )

    def _transition(
        self,
        job_id: uuid.UUID,
        *,
        expected: Iterable[str],
        values: dict[str, Any],
        extra_criteria: tuple[Any, ...] = (),
    ) -> bool:
        stmt = (
            update(AnalysisJob)
            .where(
                AnalysisJob.id == job_id,
                AnalysisJob.status.in_(tuple(expected)),
                *extra_criteria,
            )
            .values(version=AnalysisJob.version + 1, **values)
            .execution_options(synchronize_session=False)
        )
        result = self._session.execute(stmt)
        return result.rowcount == 1

    @staticmethod
    def _to_record(job: AnalysisJob, *, insights_available: bool) -> JobRecord:
        return JobRecord(
            job_id=job.id,
            source_path=job.source_path,
            status=job.status,
            version=job.version,
            submitted_at=as_utc(job.submitted_at),
            last_updated_at=as_utc(job.last_updated_at),
            processing_started_at=as_utc(job.processing_started_at),
            processing_completed_at=as_utc(job.processing_completed_at),
            processing_duration_ms=job.processing_duration_ms,
            error_message=job.error_message,
            insights_available=insights_available,
        )
