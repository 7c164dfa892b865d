"""CSV ingestion: turn an uploaded alumni sheet into candidate profile URLs.

Only column lookup happens here.  Shape validation is left to
:func:`~alumni_profiler.scraper.url_validator.filter_profile_urls` when the
job is created, so every row with a non-empty URL cell is returned.
"""

from __future__ import annotations

import csv
import io
from typing import Sequence

from alumni_profiler.core.exceptions import IngestionError
from alumni_profiler.scraper.config import URL_COLUMN_CANDIDATES


def decode_upload(raw_bytes: bytes) -> str:
    """Decode uploaded bytes as UTF-8 (a leading BOM is dropped).

    Raises:
        IngestionError: If the payload is empty or not valid UTF-8.
    """
    if not raw_bytes or not raw_bytes.strip():
        raise IngestionError("Uploaded file is empty")
    try:
        return raw_bytes.decode("utf-8-sig")
    except UnicodeDecodeError as exc:
        raise IngestionError(f"Uploaded file is not valid UTF-8 text: {exc}") from exc


def url_from_row(
    row: dict[str, str | None],
    columns: Sequence[str] = URL_COLUMN_CANDIDATES,
) -> str | None:
    """Return the first non-empty URL cell of ``row`` among ``columns``."""
    for column in columns:
        value = (row.get(column) or "").strip()
        if value:
            return value
    return None


def extract_urls_from_csv(
    text: str,
    columns: Sequence[str] = URL_COLUMN_CANDIDATES,
) -> list[str]:
    """Read candidate URLs from CSV text, in row order.

    Header names are matched after stripping surrounding whitespace.

    Raises:
        IngestionError: If the text has no header row.
    """
    reader = csv.DictReader(io.StringIO(text))
    if not reader.fieldnames:
        raise IngestionError("CSV file has no header row")
    reader.fieldnames = [(name or "").strip() for name in reader.fieldnames]

    urls: list[str] = []
    for row in reader:
        url = url_from_row(row, columns)
        if url is not None:
            urls.append(url)
    return urls
