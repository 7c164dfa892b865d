"""Health check route for the Alumni Profiler API.

``GET /api/health``
    Liveness check reporting which summary backend was selected at startup
    and a count of jobs per status.  Always returns HTTP 200 while the
    process is up; it performs no network I/O.
"""

from __future__ import annotations

from collections import Counter

from fastapi import APIRouter, Request
from fastapi.responses import JSONResponse

from alumni_profiler.api.dependencies import SettingsDep
from alumni_profiler.core.models.jobs import JobStatus

router = APIRouter(tags=["system"])


@router.get("/health")
async def health(request: Request, settings: SettingsDep) -> JSONResponse:
    """Return process status, the summary backend and job counts."""
    summarizer = getattr(request.app.state, "summarizer", None)
    service = getattr(request.app.state, "job_service", None)

    counts: Counter[str] = Counter()
    if service is not None:
        counts.update(job.status.value for job in service.list_jobs())
    jobs = {state.value: counts.get(state.value, 0) for state in JobStatus}

    return JSONResponse(
        {
            "status": "ok" if service is not None else "starting",
            "summary_backend": summarizer.backend_name if summarizer is not None else None,
            "generative_backend_configured": settings.generative_backend_configured,
            "jobs": jobs,
        }
    )
