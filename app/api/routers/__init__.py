"""
app/api/routers package marker.
"""

from app.api.routers.jobs import router as jobs_router

__all__ = [
    "jobs_router",
]
