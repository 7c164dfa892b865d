"""FastAPI dependency injection providers.

The :class:`~alumni_profiler.scraper.jobs.JobService` and the profile
exporter are created once per application (see ``api/main.py``) and stored
on ``app.state``; route handlers receive them through the ``Annotated``
aliases below.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, HTTPException, Request, status

from alumni_profiler.config.settings import Settings, get_settings
from alumni_profiler.scraper.export import ProfileExporter
from alumni_profiler.scraper.jobs import JobService


def get_job_service(request: Request) -> JobService:
    """Return the application's job service.

    Raises:
        HTTPException 503: If the application has not finished starting up.
    """
    service = getattr(request.app.state, "job_service", None)
    if service is None:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Job service is not initialised.",
        )
    return service


def get_exporter() -> ProfileExporter:
    return ProfileExporter()


JobServiceDep = Annotated[JobService, Depends(get_job_service)]
ExporterDep = Annotated[ProfileExporter, Depends(get_exporter)]
SettingsDep = Annotated[Settings, Depends(get_settings)]
