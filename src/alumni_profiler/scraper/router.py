"""FastAPI router for profile ingestion jobs.

Manages the lifecycle of jobs: creating (from a URL list or an uploaded
CSV), starting, monitoring, retrieving results, deleting and streaming
progress via Server-Sent Events.

Routes:
    POST   /jobs/                  — create a pending job from a URL list
    POST   /jobs/upload            — create a pending job from a CSV file
    GET    /jobs/                  — list jobs
    GET    /jobs/{job_id}          — snapshot with progress counters
    POST   /jobs/{job_id}/run      — start a pending job in the background
    GET    /jobs/{job_id}/results  — profile records produced so far
    GET    /jobs/{job_id}/stream   — SSE progress stream
    DELETE /jobs/{job_id}          — delete a completed/failed job
"""

from __future__ import annotations

import asyncio
import json
from typing import Annotated, Any, AsyncGenerator

import structlog
from fastapi import APIRouter, File, HTTPException, Request, UploadFile, status
from fastapi.responses import StreamingResponse

from alumni_profiler.api.dependencies import JobServiceDep
from alumni_profiler.core.exceptions import (
    IngestionError,
    JobNotFoundError,
    JobStateError,
    NoValidUrlsError,
)
from alumni_profiler.core.models.jobs import Job
from alumni_profiler.core.schemas.jobs import JobCreate, JobCreated, JobRead, JobRunAccepted
from alumni_profiler.core.schemas.profiles import ProfileRecordRead
from alumni_profiler.scraper.ingest import decode_upload, extract_urls_from_csv
from alumni_profiler.scraper.jobs import JobService

logger = structlog.get_logger(__name__)

router = APIRouter()

#: Seconds between two SSE progress frames.
STREAM_POLL_INTERVAL: float = 1.0


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _get_job_or_404(service: JobService, job_id: str) -> Job:
    """Fetch a job by id or raise HTTP 404."""
    try:
        return service.get_job(job_id)
    except JobNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Job '{job_id}' not found.",
        ) from exc


def _create_or_422(service: JobService, urls: list[str]) -> JobCreated:
    try:
        job = service.create_job(urls)
    except NoValidUrlsError as exc:
        raise HTTPException(
            status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
            detail=str(exc),
        ) from exc
    return JobCreated(job_id=job.id, total_profiles=job.total_count)


def _progress_payload(job: Job) -> dict[str, Any]:
    return {
        "status": job.status.value,
        "total_profiles": job.total_count,
        "processed": job.processed_count,
        "succeeded": job.success_count,
        "failed": job.failure_count,
        "current_url": job.current_url,
    }


# ---------------------------------------------------------------------------
# Create
# ---------------------------------------------------------------------------


@router.post("/", response_model=JobCreated, status_code=status.HTTP_201_CREATED)
async def create_job(payload: JobCreate, service: JobServiceDep) -> JobCreated:
    """Create a pending job from an already-parsed URL list.

    Raises:
        HTTPException 422: If no submitted URL is a valid profile URL.
    """
    return _create_or_422(service, payload.urls)


@router.post("/upload", response_model=JobCreated, status_code=status.HTTP_201_CREATED)
async def upload_job(
    file: Annotated[UploadFile, File(description="CSV file with a profile URL column.")],
    service: JobServiceDep,
) -> JobCreated:
    """Create a pending job from an uploaded CSV sheet.

    The URL is read from the first non-empty column among ``linkedin_url``,
    ``linkedinUrl``, ``url``, ``URL`` and ``LinkedIn``.

    Raises:
        HTTPException 400: If the file is empty, not UTF-8 or has no header.
        HTTPException 422: If no row holds a valid profile URL.
    """
    raw_bytes = await file.read()
    try:
        urls = extract_urls_from_csv(decode_upload(raw_bytes))
    except IngestionError as exc:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail=str(exc),
        ) from exc

    logger.info("profile_csv_uploaded", filename=file.filename, rows_with_url=len(urls))
    return _create_or_422(service, urls)


# ---------------------------------------------------------------------------
# Query
# ---------------------------------------------------------------------------


@router.get("/", response_model=list[JobRead])
async def list_jobs(service: JobServiceDep) -> list[JobRead]:
    return [JobRead.model_validate(job) for job in service.list_jobs()]


@router.get("/{job_id}", response_model=JobRead)
async def get_job(job_id: str, service: JobServiceDep) -> JobRead:
    """Return the full current snapshot of a job.

    Raises:
        HTTPException 404: If the job does not exist.
    """
    return JobRead.model_validate(_get_job_or_404(service, job_id))


@router.get("/{job_id}/results", response_model=list[ProfileRecordRead])
async def get_job_results(job_id: str, service: JobServiceDep) -> list[ProfileRecordRead]:
    """Return the records produced so far, in input order.

    Raises:
        HTTPException 404: If the job does not exist.
    """
    job = _get_job_or_404(service, job_id)
    return [ProfileRecordRead.model_validate(record) for record in list(job.results)]


# ---------------------------------------------------------------------------
# Run
# ---------------------------------------------------------------------------


@router.post(
    "/{job_id}/run",
    response_model=JobRunAccepted,
    status_code=status.HTTP_202_ACCEPTED,
)
async def run_job(job_id: str, service: JobServiceDep) -> JobRunAccepted:
    """Start a pending job; processing continues in the background.

    Raises:
        HTTPException 404: If the job does not exist.
        HTTPException 409: If the job is running, completed or failed.
    """
    _get_job_or_404(service, job_id)
    try:
        job = service.run_job(job_id)
    except JobStateError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc

    logger.info("profile_job_run_requested", job_id=job.id, total_profiles=job.total_count)
    return JobRunAccepted(job_id=job.id, status=job.status, total_profiles=job.total_count)


# ---------------------------------------------------------------------------
# Delete
# ---------------------------------------------------------------------------


@router.delete("/{job_id}", status_code=status.HTTP_204_NO_CONTENT, response_model=None)
async def delete_job(job_id: str, service: JobServiceDep) -> None:
    """Delete a job and its profile records (only if in a terminal state).

    Raises:
        HTTPException 404: If the job does not exist.
        HTTPException 409: If the job is still pending or running.
    """
    _get_job_or_404(service, job_id)
    try:
        service.delete_job(job_id)
    except JobStateError as exc:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=str(exc),
        ) from exc


# ---------------------------------------------------------------------------
# SSE progress stream
# ---------------------------------------------------------------------------


@router.get("/{job_id}/stream")
async def stream_job(job_id: str, request: Request, service: JobServiceDep) -> StreamingResponse:
    """Stream live job progress via Server-Sent Events.

    **Event types**:

    ``progress``::

        event: progress
        data: {"status":"running","total_profiles":3,"processed":1,
               "succeeded":1,"failed":0,"current_url":"https://..."}

    ``job_complete``: same payload, emitted once when the job reaches a
    terminal state; the stream then ends.

    Raises:
        HTTPException 404: If the job does not exist.
    """
    job = _get_job_or_404(service, job_id)

    async def event_generator() -> AsyncGenerator[str, None]:
        payload = _progress_payload(job)
        yield f"event: progress\ndata: {json.dumps(payload)}\n\n"

        while not job.is_terminal:
            if await request.is_disconnected():
                return
            await asyncio.sleep(STREAM_POLL_INTERVAL)

            current = _progress_payload(job)
            if current != payload:
                payload = current
                yield f"event: progress\ndata: {json.dumps(payload)}\n\n"

        yield f"event: job_complete\ndata: {json.dumps(_progress_payload(job))}\n\n"

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "X-Accel-Buffering": "no",
            "Connection": "keep-alive",
        },
    )
