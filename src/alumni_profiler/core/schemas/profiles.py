"""Pydantic response schemas for profile records."""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict

from alumni_profiler.core.models.profiles import ProfileStatus


class PastRoleRead(BaseModel):
    title: str
    company: str
    years: str = ""
    location: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ProfileRecordRead(BaseModel):
    """Full representation of a profile record.

    Returned by the job results, profile list and profile detail endpoints.
    """

    id: str
    name: str
    title: str
    company: str
    location: str
    education: List[str]
    past_roles: List[PastRoleRead]
    summary: str
    source_url: str
    retrieved_at: datetime
    status: ProfileStatus
    error: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
