"""Profile record export to CSV and JSON.

Both methods are async and return raw bytes ready to be sent as an HTTP
download.  The exporter does not look anything up itself; the route handler
selects the records.
"""

from __future__ import annotations

import csv
import io
import json
from datetime import datetime
from typing import Any, Sequence

import structlog

from alumni_profiler.core.models.profiles import PastRole, ProfileRecord

logger = structlog.get_logger(__name__)

#: Header label per exported field, in column order.
_CSV_COLUMNS: list[tuple[str, str]] = [
    ("name", "Name"),
    ("title", "Current Title"),
    ("company", "Current Company"),
    ("location", "Location"),
    ("summary", "AI Summary"),
    ("education", "Education"),
    ("past_roles", "Past Roles"),
    ("source_url", "Profile URL"),
    ("retrieved_at", "Retrieved At"),
]


def _format_role(role: PastRole) -> str:
    text = f"{role.title} at {role.company}"
    if role.years:
        text += f" ({role.years})"
    return text


def _cell(value: Any) -> str:  # noqa: ANN401
    """Coerce a record value to a single spreadsheet cell."""
    if value is None:
        return ""
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, (list, tuple)):
        return "; ".join(
            _format_role(item) if isinstance(item, PastRole) else str(item) for item in value
        )
    return str(value)


def record_to_dict(record: ProfileRecord) -> dict[str, Any]:
    """JSON-ready mapping of one record."""
    return {
        "id": record.id,
        "name": record.name,
        "title": record.title,
        "company": record.company,
        "location": record.location,
        "education": list(record.education),
        "past_roles": [
            {
                "title": role.title,
                "company": role.company,
                "years": role.years,
                "location": role.location,
            }
            for role in record.past_roles
        ],
        "summary": record.summary,
        "source_url": record.source_url,
        "retrieved_at": record.retrieved_at.isoformat(),
        "status": record.status.value,
        "error": record.error,
    }


class ProfileExporter:
    """Serialise profile records for download."""

    async def export_csv(self, records: Sequence[ProfileRecord]) -> bytes:
        """Export records as a UTF-8 CSV file with a BOM, so spreadsheet
        applications pick the right encoding for non-ASCII names.

        Education entries and past roles are joined with ``"; "``; a role
        renders as ``"<title> at <company> (<years>)"``.
        """
        buf = io.StringIO()
        writer = csv.writer(buf, lineterminator="\r\n")
        writer.writerow([label for _, label in _CSV_COLUMNS])
        for record in records:
            writer.writerow([_cell(getattr(record, attr)) for attr, _ in _CSV_COLUMNS])

        logger.debug("profiles_exported", format="csv", count=len(records))
        return "\ufeff".encode("utf-8") + buf.getvalue().encode("utf-8")

    async def export_json(self, records: Sequence[ProfileRecord]) -> bytes:
        """Export records as an indented JSON array."""
        payload = [record_to_dict(record) for record in records]
        logger.debug("profiles_exported", format="json", count=len(records))
        return json.dumps(payload, ensure_ascii=False, indent=2).encode("utf-8")
