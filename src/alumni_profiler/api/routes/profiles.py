"""Profile record routes: listing, detail and export downloads.

Routes:
    GET /profiles/                        — every profile record
    GET /profiles/export?format=csv|json  — download, optionally one job only
    GET /profiles/{profile_id}            — one record
"""

from __future__ import annotations

from typing import Literal, Optional

import structlog
from fastapi import APIRouter, HTTPException, Query, Response, status

from alumni_profiler.api.dependencies import ExporterDep, JobServiceDep
from alumni_profiler.core.exceptions import JobNotFoundError, ProfileNotFoundError
from alumni_profiler.core.schemas.profiles import ProfileRecordRead

logger = structlog.get_logger(__name__)

router = APIRouter()

_MEDIA_TYPES: dict[str, str] = {
    "csv": "text/csv; charset=utf-8",
    "json": "application/json",
}


@router.get("/", response_model=list[ProfileRecordRead])
async def list_profiles(service: JobServiceDep) -> list[ProfileRecordRead]:
    return [ProfileRecordRead.model_validate(record) for record in service.list_profiles()]


@router.get("/export")
async def export_profiles(
    service: JobServiceDep,
    exporter: ExporterDep,
    format: Literal["csv", "json"] = Query(default="csv"),  # noqa: A002
    job_id: Optional[str] = Query(default=None),
) -> Response:
    """Download profile records as CSV or JSON.

    Args:
        format: ``csv`` (UTF-8 with BOM) or ``json`` (indented array).
        job_id: Restrict the export to the records of one job.

    Raises:
        HTTPException 404: If ``job_id`` names an unknown job.
    """
    if job_id is not None:
        try:
            records = service.get_results(job_id)
        except JobNotFoundError as exc:
            raise HTTPException(
                status_code=status.HTTP_404_NOT_FOUND,
                detail=f"Job '{job_id}' not found.",
            ) from exc
    else:
        records = service.list_profiles()

    if format == "csv":
        body = await exporter.export_csv(records)
    else:
        body = await exporter.export_json(records)

    logger.info("profiles_export_served", format=format, job_id=job_id, count=len(records))
    return Response(
        content=body,
        media_type=_MEDIA_TYPES[format],
        headers={"Content-Disposition": f'attachment; filename="alumni_data.{format}"'},
    )


@router.get("/{profile_id}", response_model=ProfileRecordRead)
async def get_profile(profile_id: str, service: JobServiceDep) -> ProfileRecordRead:
    """Return one profile record.

    Raises:
        HTTPException 404: If the record does not exist.
    """
    try:
        record = service.get_profile(profile_id)
    except ProfileNotFoundError as exc:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Profile '{profile_id}' not found.",
        ) from exc
    return ProfileRecordRead.model_validate(record)
