"""FastAPI application factory and entry point.

Creates the application instance, registers middleware, mounts the job,
profile and health routers under ``/api`` and wires the ingestion pipeline
in the lifespan handler.

Usage::

    # Development server (from project root)
    uvicorn alumni_profiler.api.main:app --reload
"""

from __future__ import annotations

import time
import uuid
from contextlib import asynccontextmanager
from typing import AsyncIterator, Callable, Optional

import httpx
import structlog
from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware

from alumni_profiler import __version__
from alumni_profiler.config.settings import Settings, get_settings
from alumni_profiler.core.logging_config import configure_logging, request_id_var
from alumni_profiler.core.repository import JobRepository, ProfileRepository
from alumni_profiler.scraper.controller import JobController, PacingPolicy
from alumni_profiler.scraper.jobs import JobService
from alumni_profiler.scraper.playwright_fetcher import ProfileFetcher, playwright_session_factory
from alumni_profiler.scraper.summarizer import Summarizer, build_summarizer
from alumni_profiler.scraper.url_validator import make_validator

# ---------------------------------------------------------------------------
# Logging configuration: applied once at module import time so that log
# records emitted during app construction are captured correctly.
# The log level is re-applied inside create_app() after settings are loaded.
# ---------------------------------------------------------------------------

configure_logging("INFO")

logger = structlog.get_logger(__name__)


def build_job_service(settings: Settings, summarizer: Summarizer) -> JobService:
    """Wire repositories, fetcher and controller from settings."""
    validator = make_validator(settings.profile_host, settings.profile_path_prefix)
    profiles = ProfileRepository()
    fetcher = ProfileFetcher(
        playwright_session_factory(
            headless=settings.browser_headless,
            timeout=settings.fetch_timeout_seconds,
            settle_delay=settings.settle_delay_seconds,
        ),
        timeout=settings.fetch_timeout_seconds,
    )
    controller = JobController(
        fetcher,
        summarizer,
        profiles,
        pacing=PacingPolicy(
            delay_seconds=settings.inter_item_delay_seconds,
            jitter_seconds=settings.inter_item_jitter_seconds,
        ),
        url_validator=validator,
    )
    return JobService(controller, JobRepository(), profiles, url_validator=validator)


def create_app(job_service: Optional[JobService] = None) -> FastAPI:
    """Build and configure the FastAPI application.

    Args:
        job_service: Pre-built service.  When given, the lifespan handler
            leaves the pipeline wiring alone; tests use this to inject fakes.

    Returns:
        A fully configured ``FastAPI`` instance.
    """
    settings = get_settings()

    # Re-apply logging configuration with the correct level from settings.
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(application: FastAPI) -> AsyncIterator[None]:
        client: Optional[httpx.AsyncClient] = None
        if getattr(application.state, "job_service", None) is None:
            client = httpx.AsyncClient()
            summarizer = build_summarizer(settings, client)
            application.state.summarizer = summarizer
            application.state.job_service = build_job_service(settings, summarizer)
        logger.info(
            "application_startup",
            app_name=settings.app_name,
            debug=settings.debug,
            log_level=settings.log_level,
            summary_backend=getattr(application.state.summarizer, "backend_name", None),
        )
        try:
            yield
        finally:
            await application.state.job_service.shutdown()
            if client is not None:
                await client.aclose()
            logger.info("application_shutdown")

    application = FastAPI(
        title=settings.app_name,
        description=(
            "Batch ingestion of public alumni profiles into normalized career "
            "records with short professional summaries."
        ),
        version=__version__,
        debug=settings.debug,
        lifespan=lifespan,
    )
    application.state.job_service = job_service
    application.state.summarizer = None

    # ---- Middleware --------------------------------------------------------

    application.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # ---- Request logging middleware ----------------------------------------

    @application.middleware("http")
    async def request_logging_middleware(
        request: Request, call_next: Callable
    ) -> Response:
        """Log every incoming request and its response status + duration.

        Attaches a unique ``request_id`` to the structlog context so that all
        log lines emitted during a request can be correlated.
        """
        request_id = str(uuid.uuid4())
        request_id_var.set(request_id)
        structlog.contextvars.clear_contextvars()
        structlog.contextvars.bind_contextvars(
            request_id=request_id,
            method=request.method,
            path=request.url.path,
        )

        start = time.perf_counter()
        response: Optional[Response] = None
        try:
            response = await call_next(request)
        except Exception as exc:
            logger.error("unhandled_exception", exc_info=exc)
            raise
        finally:
            elapsed_ms = round((time.perf_counter() - start) * 1000, 2)
            status_code = getattr(response, "status_code", 500)
            log_fn = logger.warning if status_code >= 400 else logger.info
            log_fn(
                "request_complete",
                status_code=status_code,
                elapsed_ms=elapsed_ms,
            )

        response.headers["X-Request-ID"] = request_id
        return response

    # ---- Routers -------------------------------------------------------------

    from alumni_profiler.api.routes import health as health_routes  # noqa: PLC0415
    from alumni_profiler.api.routes import profiles as profile_routes  # noqa: PLC0415
    from alumni_profiler.scraper.router import router as jobs_router  # noqa: PLC0415

    application.include_router(health_routes.router, prefix="/api")
    application.include_router(jobs_router, prefix="/api/jobs", tags=["jobs"])
    application.include_router(profile_routes.router, prefix="/api/profiles", tags=["profiles"])

    return application


# ---------------------------------------------------------------------------
# Module-level singleton
# ---------------------------------------------------------------------------

app = create_app()
"""The FastAPI application instance.

This is the ASGI callable passed to Uvicorn.
"""
