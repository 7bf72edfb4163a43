"""
app/schemas package marker.
"""

from app.schemas.jobs import (
    HealthResponse,
    JobAcceptedResponse,
    JobInsightResponse,
    JobStatusResponse,
    SubmitJobRequest,
)

__all__ = [
    "HealthResponse",
    "JobAcceptedResponse",
    "JobInsightResponse",
    "JobStatusResponse",
    "SubmitJobRequest",
]
