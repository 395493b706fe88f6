"""
admitlead - lead intake backend for admissions consulting.

Receives Tally form webhooks, reconciles them into leads, and sends SMS/LMS
to C-level leads through Solapi.
"""
import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, Response
from fastapi.middleware.cors import CORSMiddleware
from starlette.middleware.base import BaseHTTPMiddleware

from admitlead.api.router import api_router
from admitlead.config import Settings, get_settings
from admitlead.database import dispose_engine
from admitlead.services.variants import c_lead_variant, lead_variant
from admitlead.utils.logging import (
    configure_structured_logging,
    generate_correlation_id,
    set_correlation_id,
)

logger = logging.getLogger("admitlead")

VERSION = "1.0.0"
CORRELATION_HEADER = "X-Correlation-ID"


class CorrelationIdMiddleware(BaseHTTPMiddleware):
    """Reuses the caller's X-Correlation-ID or mints one; echoed on the response."""

    async def dispatch(self, request: Request, call_next) -> Response:
        cid = request.headers.get(CORRELATION_HEADER) or generate_correlation_id()
        set_correlation_id(cid)
        response = await call_next(request)
        response.headers[CORRELATION_HEADER] = cid
        return response


def _warn_on_open_configuration(settings: Settings) -> None:
    for variant in (lead_variant(settings), c_lead_variant(settings)):
        if not variant.secret:
            logger.warning(
                "No shared secret for %s - unauthenticated deliveries are accepted",
                variant.endpoint, extra={"variant": variant.name},
            )
    if not settings.solapi_api_key:
        logger.warning("SOLAPI_API_KEY not set - C-lead messages will fail to send")


def _init_sentry(settings: Settings) -> None:
    try:
        import sentry_sdk
        sentry_sdk.init(dsn=settings.sentry_dsn, traces_sample_rate=0.1, environment=settings.app_env)
    except Exception as e:
        logger.warning("Sentry initialization failed: %s", str(e))
        return
    logger.info("Sentry initialized")


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    logger.info("admitlead starting (env=%s)", settings.app_env)
    _warn_on_open_configuration(settings)
    if settings.sentry_dsn:
        _init_sentry(settings)

    yield

    await dispose_engine()
    logger.info("admitlead stopped")


def cors_origins(settings: Settings) -> list[str]:
    """Local CRM frontend, the app's own URL, then ALLOWED_ORIGINS (comma-separated)."""
    extra = [o.strip() for o in settings.allowed_origins.split(",") if o.strip()]
    return ["http://localhost:3000", settings.app_base_url, *extra]


def create_app() -> FastAPI:
    settings = get_settings()
    configure_structured_logging(settings.log_level)

    application = FastAPI(
        title="admitlead",
        description="Tally lead intake, returning-contact reconciliation, C-lead messaging",
        version=VERSION,
        lifespan=lifespan,
    )
    application.add_middleware(
        CORSMiddleware,
        allow_origins=cors_origins(settings),
        allow_credentials=True,
        allow_methods=["GET", "POST", "PATCH", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", CORRELATION_HEADER, "X-Tally-Signature"],
    )
    # Added last so it wraps CORS and tags preflight responses too
    application.add_middleware(CorrelationIdMiddleware)
    application.include_router(api_router)
    return application


app = create_app()
