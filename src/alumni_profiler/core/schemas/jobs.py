"""Pydantic request/response schemas for profile jobs.

Used by the job API routes for validation, serialisation, and OpenAPI
documentation generation.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from alumni_profiler.core.models.jobs import JobStatus
from alumni_profiler.core.schemas.profiles import ProfileRecordRead


class JobCreate(BaseModel):
    """Payload for creating a new job from an already-parsed URL list.

    Attributes:
        urls: Candidate profile URLs in processing order.  Invalid entries
            are dropped; the request is rejected if none remain.
    """

    urls: List[str] = Field(min_length=1)


class JobCreated(BaseModel):
    """Response of the create and upload endpoints."""

    job_id: str
    total_profiles: int


class JobRunAccepted(BaseModel):
    """Response of the run endpoint."""

    job_id: str
    status: JobStatus
    total_profiles: int


class FailedItemRead(BaseModel):
    url: str
    error: str
    reason: str

    model_config = ConfigDict(from_attributes=True)


class JobRead(BaseModel):
    """Full snapshot of a job, including the records produced so far."""

    id: str
    status: JobStatus
    urls: List[str]
    total_count: int
    processed_count: int
    success_count: int
    failure_count: int
    current_url: Optional[str]
    results: List[ProfileRecordRead]
    failures: List[FailedItemRead]
    created_at: datetime
    started_at: Optional[datetime]
    completed_at: Optional[datetime]
    error_message: Optional[str]

    model_config = ConfigDict(from_attributes=True)
