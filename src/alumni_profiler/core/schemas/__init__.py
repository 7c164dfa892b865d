from alumni_profiler.core.schemas.jobs import (
    FailedItemRead,
    JobCreate,
    JobCreated,
    JobRead,
    JobRunAccepted,
)
from alumni_profiler.core.schemas.profiles import PastRoleRead, ProfileRecordRead

__all__ = [
    "FailedItemRead",
    "JobCreate",
    "JobCreated",
    "JobRead",
    "JobRunAccepted",
    "PastRoleRead",
    "ProfileRecordRead",
]
