"""
Job orchestration: submission, lease-guarded processing, and status lookup.
"""

from __future__ import annotations

import logging
import threading
import time
import uuid
from collections.abc import Iterator
from contextlib import contextmanager
from functools import lru_cache

from sqlalchemy.orm import Session, sessionmaker

from app.config import (
    JobSettings,
    ReasoningSettings,
    get_job_settings,
    get_reasoning_settings,
    get_storage_settings,
)
from app.logging_utils import log_event
from db.models.analysis_job import JobStatus
from db.repositories.insight_repository import InsightRepository
from db.repositories.job_repository import JobRepository
from db.repositories.signal_repository import SignalRepository
from db.repositories.storage import LocalFileStorage, normalize_source_path
from db.repositories.types import JobRecord, StoredInsight
from llm_synthesis.adapter import BaseLLMAdapter, MockLLMAdapter, OpenAILLMAdapter
from llm_synthesis.reasoner import InsightReasoner
from parsing.factory import FileParserFactory
from signals.errors import JobConflictError, JobNotFoundError, raise_if_cancelled
from signals.extraction import SignalExtractionPipeline
from signals.summarizer import SignalSummarizer

logger = logging.getLogger(__name__)


class JobService:
    """
    Coordinates the job lifecycle around the signal pipeline.

    The processing lease is committed in its own transaction before any work
    starts; every path out of ``process_job`` leaves the job completed or
    failed.
    """

    def __init__(
        self,
        *,
        session_factory: sessionmaker[Session] | None = None,
        extraction_pipeline: SignalExtractionPipeline | None = None,
        summarizer: SignalSummarizer | None = None,
        reasoner: InsightReasoner | None = None,
        job_settings: JobSettings | None = None,
        parser_factory: FileParserFactory | None = None,
    ) -> None:
        if session_factory is None:
            from db.session import SessionLocal

            self._session_factory = SessionLocal
        else:
            self._session_factory = session_factory

        if extraction_pipeline is None:
            storage_settings = get_storage_settings()
            extraction_pipeline = SignalExtractionPipeline(
                reader=LocalFileStorage(storage_settings.root_dir),
                container=storage_settings.container,
                parser_factory=parser_factory,
            )
        self._pipeline = extraction_pipeline
        self._summarizer = summarizer or SignalSummarizer()
        self._reasoner = reasoner or build_insight_reasoner(get_reasoning_settings())
        self._job_settings = job_settings or get_job_settings()
        self._parser_factory = parser_factory or FileParserFactory()

    def submit_job(self, source_path: str) -> JobRecord:
        """
        Register a new pending job for ``source_path``.

        Raises:
            InvalidSourcePathError: If the path is blank or escapes its container.
            UnsupportedFormatError: If no parser handles the file extension.
        """

        normalized = normalize_source_path(source_path)
        self._parser_factory.create(normalized)

        job_id = uuid.uuid4()
        with self._transaction() as db:
            record = JobRepository(db).create_job(job_id=job_id, source_path=normalized)

        log_event(logger, logging.INFO, "job_submitted", job_id=job_id, status=record.status)
        return record

    def get_status(self, job_id: uuid.UUID) -> JobRecord:
        with self._session_factory() as db:
            record = JobRepository(db).get_status(job_id)
        if record is None:
            raise JobNotFoundError(job_id)
        return record

    def get_latest_insight(self, job_id: uuid.UUID) -> StoredInsight | None:
        with self._session_factory() as db:
            if JobRepository(db).get_source_path(job_id) is None:
                raise JobNotFoundError(job_id)
            return InsightRepository(db).get_latest_insight(job_id)

    def retry_job(self, job_id: uuid.UUID) -> JobRecord:
        """
        Return a failed job to pending so ``process_job`` can run it again.
        """

        with self._session_factory() as db:
            repository = JobRepository(db)
            with db.begin():
                requeued = repository.requeue_failed(job_id)
            record = repository.get_status(job_id)

        if record is None:
            raise JobNotFoundError(job_id)
        if not requeued:
            raise JobConflictError(
                job_id,
                f"Job {job_id} is {record.status}; only failed jobs can be retried.",
            )

        log_event(logger, logging.INFO, "job_requeued", job_id=job_id, status=record.status)
        return record

    def process_job(
        self,
        job_id: uuid.UUID,
        cancel_event: threading.Event | None = None,
    ) -> JobRecord:
        """
        Run the full pipeline for one job under the processing lease.

        Raises:
            JobNotFoundError: Unknown job id; nothing changes.
            JobConflictError: The job is completed, failed, or leased by another
                caller; nothing changes.
            Exception: Any processing failure, after the job is marked failed.
        """

        record = self._acquire_lease(job_id)
        log_event(logger, logging.INFO, "job_processing_started", job_id=job_id, status=JobStatus.PROCESSING)

        cancel_event = cancel_event or threading.Event()
        timer = self._start_timeout(cancel_event)
        started = time.perf_counter()
        try:
            signals = self._pipeline.extract(record.source_path, cancel_event)
            summary = self._summarizer.summarize(signals)

            raise_if_cancelled(cancel_event, "signal persistence")
            with self._transaction() as db:
                SignalRepository(db).save_signals(job_id, signals, summary)

            result = self._reasoner.reason(summary, cancel_event)

            raise_if_cancelled(cancel_event, "insight persistence")
            with self._transaction() as db:
                InsightRepository(db).save_insight(
                    job_id,
                    result.insight,
                    result.raw_response,
                    result.metadata,
                )
                if not JobRepository(db).mark_completed(job_id, lease_version=record.version):
                    raise JobConflictError(job_id, f"Job {job_id} lost its processing lease.")
        except JobConflictError:
            log_event(logger, logging.WARNING, "job_lease_lost", job_id=job_id)
            raise
        except Exception as exc:
            self._record_failure(job_id, exc, started, record.version)
            raise
        finally:
            if timer is not None:
                timer.cancel()

        completed = self.get_status(job_id)
        log_event(
            logger,
            logging.INFO,
            "job_completed",
            job_id=job_id,
            status=completed.status,
            duration_ms=completed.processing_duration_ms,
            record_count=signals.record_count,
            anomaly_count=summary.anomaly_count,
        )
        return completed

    @contextmanager
    def _transaction(self) -> Iterator[Session]:
        with self._session_factory() as db:
            with db.begin():
                yield db

    def _acquire_lease(self, job_id: uuid.UUID) -> JobRecord:
        with self._transaction() as db:
            repository = JobRepository(db)
            record = repository.get_status(job_id)
            if record is None:
                raise JobNotFoundError(job_id)

            lease_timeout = self._job_settings.lease_timeout
            if (
                record.status == JobStatus.PROCESSING
                and lease_timeout is not None
                and repository.reclaim_stale_lease(job_id, lease_timeout)
            ):
                log_event(logger, logging.WARNING, "job_lease_reclaimed", job_id=job_id)
                record = repository.get_status(job_id)

            if record.status == JobStatus.COMPLETED:
                raise JobConflictError(job_id, f"Job {job_id} is already completed.")
            if record.status == JobStatus.FAILED:
                raise JobConflictError(
                    job_id,
                    f"Job {job_id} has failed; retry it explicitly before processing again.",
                )

            if not repository.try_begin_processing(job_id):
                log_event(logger, logging.INFO, "job_lease_rejected", job_id=job_id)
                raise JobConflictError(job_id, f"Job {job_id} is already being processed.")

            # Read back inside the lease transaction so the version is the leased one.
            return repository.get_status(job_id)

    def _start_timeout(self, cancel_event: threading.Event) -> threading.Timer | None:
        timeout = self._job_settings.processing_timeout_seconds
        if timeout is None:
            return None
        timer = threading.Timer(timeout, cancel_event.set)
        timer.daemon = True
        timer.start()
        return timer

    def _record_failure(
        self,
        job_id: uuid.UUID,
        exc: Exception,
        started: float,
        lease_version: int,
    ) -> None:
        message = str(exc) or type(exc).__name__
        try:
            with self._transaction() as db:
                recorded = JobRepository(db).mark_failed(job_id, message, lease_version=lease_version)
        except Exception:
            logger.exception("Failed to mark job %s as failed", job_id)
            recorded = False
        if not recorded:
            log_event(logger, logging.WARNING, "job_failure_not_recorded", job_id=job_id)
        log_event(
            logger,
            logging.ERROR,
            "job_failed",
            job_id=job_id,
            status=JobStatus.FAILED,
            error_type=type(exc).__name__,
            elapsed_ms=int((time.perf_counter() - started) * 1000),
        )


def build_llm_adapter(settings: ReasoningSettings) -> BaseLLMAdapter:
    if settings.adapter == "mock":
        return MockLLMAdapter()
    return OpenAILLMAdapter(
        model=settings.model,
        max_tokens=settings.max_tokens,
        temperature=settings.temperature,
        timeout_seconds=settings.timeout_seconds,
        api_key=settings.api_key,
        base_url=settings.base_url,
    )


def build_insight_reasoner(settings: ReasoningSettings) -> InsightReasoner:
    return InsightReasoner(
        build_llm_adapter(settings),
        prompt_version=settings.prompt_version,
        max_response_chars=settings.max_response_chars,
    )


@lru_cache(maxsize=1)
def get_job_service() -> JobService:
    return JobService()
