"""
Analysis job endpoints: submit, process, retry, status and insight lookup.
"""

from __future__ import annotations

import logging
from uuid import UUID

from fastapi import APIRouter, Depends, HTTPException, Response, status

from app.schemas.jobs import (
    JobAcceptedResponse,
    JobInsightResponse,
    JobStatusResponse,
    SubmitJobRequest,
)
from app.services.job_service import JobService, get_job_service
from db.repositories.errors import FileStorageError, InvalidSourcePathError
from db.repositories.types import JobRecord
from llm_synthesis.errors import ReasoningFailure
from signals.errors import (
    JobConflictError,
    NotFoundError,
    ProcessingCancelledError,
    SignalValidationError,
    UnsupportedFormatError,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/jobs", tags=["jobs"])


def _to_http_exception(exc: Exception) -> HTTPException | None:
    if isinstance(exc, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
    if isinstance(exc, JobConflictError):
        return HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(exc))
    if isinstance(exc, UnsupportedFormatError):
        return HTTPException(status_code=status.HTTP_415_UNSUPPORTED_MEDIA_TYPE, detail=str(exc))
    if isinstance(exc, (SignalValidationError, InvalidSourcePathError)):
        return HTTPException(status_code=422, detail=str(exc))
    if isinstance(exc, ReasoningFailure):
        return HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Insight reasoning failed; the job has been marked failed.",
        )
    if isinstance(exc, ProcessingCancelledError):
        return HTTPException(status_code=status.HTTP_504_GATEWAY_TIMEOUT, detail=str(exc))
    if isinstance(exc, FileStorageError):
        return HTTPException(status_code=status.HTTP_503_SERVICE_UNAVAILABLE, detail=str(exc))
    return None


def _to_status_response(record: JobRecord) -> JobStatusResponse:
    return JobStatusResponse(
        job_id=record.job_id,
        status=record.status,
        version=record.version,
        submitted_at=record.submitted_at,
        last_updated_at=record.last_updated_at,
        processing_started_at=record.processing_started_at,
        processing_completed_at=record.processing_completed_at,
        processing_duration_ms=record.processing_duration_ms,
        error_message=record.error_message,
        insights_available=record.insights_available,
    )


@router.post(
    "",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=JobAcceptedResponse,
)
def submit_job(
    payload: SubmitJobRequest,
    response: Response,
    service: JobService = Depends(get_job_service),
) -> JobAcceptedResponse:
    try:
        record = service.submit_job(payload.source_path)
    except Exception as exc:
        http_exc = _to_http_exception(exc)
        if http_exc is None:
            raise
        raise http_exc from exc

    response.headers["Location"] = f"/jobs/{record.job_id}"
    return JobAcceptedResponse(
        job_id=record.job_id,
        status=record.status,
        submitted_at=record.submitted_at,
    )


@router.get("/{job_id}", response_model=JobStatusResponse)
def get_job_status(
    job_id: UUID,
    service: JobService = Depends(get_job_service),
) -> JobStatusResponse:
    try:
        record = service.get_status(job_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    return _to_status_response(record)


@router.post(
    "/{job_id}/process",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=JobStatusResponse,
)
def process_job(
    job_id: UUID,
    service: JobService = Depends(get_job_service),
) -> JobStatusResponse:
    try:
        record = service.process_job(job_id)
    except Exception as exc:
        http_exc = _to_http_exception(exc)
        if http_exc is None:
            logger.exception("Unexpected failure while processing job %s", job_id)
            raise
        raise http_exc from exc
    return _to_status_response(record)


@router.post(
    "/{job_id}/retry",
    status_code=status.HTTP_202_ACCEPTED,
    response_model=JobStatusResponse,
)
def retry_job(
    job_id: UUID,
    service: JobService = Depends(get_job_service),
) -> JobStatusResponse:
    try:
        record = service.retry_job(job_id)
    except (NotFoundError, JobConflictError) as exc:
        raise _to_http_exception(exc) from exc
    return _to_status_response(record)


@router.get("/{job_id}/insights", response_model=JobInsightResponse)
def get_job_insights(
    job_id: UUID,
    service: JobService = Depends(get_job_service),
) -> JobInsightResponse:
    try:
        stored = service.get_latest_insight(job_id)
    except NotFoundError as exc:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc)) from exc
    if stored is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"No insights available for job {job_id}.",
        )
    return JobInsightResponse(
        job_id=stored.job_id,
        insight=stored.insight,
        metadata=stored.metadata,
        created_at=stored.created_at,
    )
