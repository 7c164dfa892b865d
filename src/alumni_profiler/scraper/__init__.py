"""Profile ingestion pipeline.

Turns a list of public profile URLs into normalized career records.

Sub-modules:
- ``config``             — constants and tuning parameters
- ``url_validator``      — profile URL shape checks and ingestion filtering
- ``playwright_fetcher`` — headless Chromium fetcher with login-wall detection
- ``profile_extractor``  — layered-locator field extraction (BeautifulSoup)
- ``summarizer``         — Gemini summaries with an offline keyword fallback
- ``controller``         — per-job state machine and pacing policy
- ``jobs``               — job service used by the HTTP layer
- ``ingest``             — CSV upload parsing
- ``export``             — CSV / JSON export of profile records
- ``router``             — FastAPI router (``/api/jobs/``)
"""
