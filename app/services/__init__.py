"""
app/services package marker.
"""

from app.services.job_service import (
    JobService,
    build_insight_reasoner,
    build_llm_adapter,
    get_job_service,
)

__all__ = [
    "JobService",
    "build_insight_reasoner",
    "build_llm_adapter",
    "get_job_service",
]
