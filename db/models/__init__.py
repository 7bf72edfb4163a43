"""
Model package exports.

Import all SQLAlchemy models here so metadata registration and Alembic
autogeneration work without extra imports.
"""

from db.models.analysis_job import AnalysisJob, JobStatus
from db.models.business_insight import BusinessInsightRecord
from db.models.business_signals import BusinessSignalsRecord

__all__ = [
    "AnalysisJob",
    "JobStatus",
    "BusinessSignalsRecord",
    "BusinessInsightRecord",
]
