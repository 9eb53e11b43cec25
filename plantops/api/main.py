"""
FastAPI application entry point for the plant operations API.

``create_app()`` builds the application: CORS, the error envelope, and the
routers. The lifespan loads Settings, configures logging, builds the
record stores from synthetic seed data, opens the history journal and
starts the telemetry feed; on shutdown it stops the feed and closes the
journal. Every service is stored on app.state for the Depends() providers.

Error mapping: InvalidInputError and request validation errors give 400,
RecordNotFoundError 404, MailDeliveryError 502, HTTPException keeps its
status, and anything else gives 500 with a generic message. Every error body is
``{"status": "error", "message": ...}``.

CHANGELOG:
- 2026-10-14: Mount the mail router and its in-memory service (STORY-022)
- 2026-10-12: Add console entry point running uvicorn (STORY-020)
- 2026-10-10: Start and stop the telemetry feed in the lifespan (STORY-018)
- 2026-10-07: Open the history journal in the lifespan (STORY-012)
- 2026-10-06: Wire API_TOKENS parsing into startup (STORY-011)
- 2026-10-02: Initial creation (STORY-001)

TODO:
- None
"""

import json
import logging
import random
import sys
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from datetime import UTC, datetime

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from plantops.api.health import router as health_router
from plantops.api.history import router as history_router
from plantops.api.mail import router as mail_router
from plantops.api.plants import router as plants_router
from plantops.api.responses import error_body
from plantops.api.rtus import router as rtus_router
from plantops.api.telemetry import router as telemetry_router
from plantops.auth.bearer import BearerAuth, parse_api_tokens
from plantops.config import Settings
from plantops.errors import InvalidInputError, MailDeliveryError, RecordNotFoundError
from plantops.services.history import HistoryLog
from plantops.services.mail import LoggingTransport, MailService
from plantops.services.seed import generate_plants, generate_rtus
from plantops.services.store import PlantStore, RtuStore
from plantops.services.telemetry import TelemetryFeed

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Logging setup
# ---------------------------------------------------------------------------


class _JsonFormatter(logging.Formatter):
    """Minimal JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "ts": datetime.fromtimestamp(record.created, tz=UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1] is not None:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def configure_logging(level: str = "INFO", json_format: bool = False) -> None:
    """Install a single stderr handler on the root logger.

    Args:
        level: Root log level name.
        json_format: Emit one JSON object per line instead of plain text.
    """
    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(_JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(name)s] %(levelname)s: %(message)s")
        )
    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)


def log_config_summary(settings: Settings, token_count: int) -> None:
    """Log a config summary at startup. Token values are never logged."""
    logger.info(
        "Plant operations API starting with config: "
        "log_level=%s, seed_plants=%d, seed_rtus=%d, seed_random=%s, "
        "plant_page_size=%d, rtu_page_size=%d, max_page_size=%d, "
        "telemetry_devices=%s, telemetry_interval=%.1f-%.1fs, "
        "history_path=%s, cors_origins=%s, api_tokens=%d",
        settings.log_level,
        settings.seed_plants,
        settings.seed_rtus,
        settings.seed_random,
        settings.plant_page_size,
        settings.rtu_page_size,
        settings.max_page_size,
        ",".join(settings.device_ids),
        settings.telemetry_min_interval_s,
        settings.telemetry_max_interval_s,
        settings.history_path,
        ",".join(settings.origins),
        token_count,
    )


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Build services on startup and release them on shutdown.

    Raises:
        RuntimeError: If API_TOKENS contains no valid token:user entry.
    """
    settings: Settings = app.state.settings
    configure_logging(settings.log_level, settings.log_json)

    token_map = parse_api_tokens(settings.api_tokens)
    if not token_map:
        raise RuntimeError("API_TOKENS parsed but contains no valid token:user entries")
    app.state.auth = BearerAuth(token_map)
    log_config_summary(settings, len(token_map))

    rng = random.Random(settings.seed_random)
    plants = PlantStore(generate_plants(settings.seed_plants, rng))
    rtus = RtuStore(plants, generate_rtus(settings.seed_rtus, plants.list(), rng))
    app.state.plants = plants
    app.state.rtus = rtus
    app.state.mail = MailService(LoggingTransport(), settings.mail_sender_domain)

    feed = TelemetryFeed(
        settings.device_ids,
        settings.telemetry_min_interval_s,
        settings.telemetry_max_interval_s,
        rng=random.Random(settings.seed_random),
    )
    app.state.feed = feed

    async with HistoryLog(settings.history_path) as history:
        app.state.history = history
        await feed.start()
        logger.info("Plant operations API ready")
        try:
            yield
        finally:
            logger.info("Plant operations API shutting down")
            await feed.stop()


# ---------------------------------------------------------------------------
# Error envelope
# ---------------------------------------------------------------------------


def _validation_message(exc: RequestValidationError) -> str:
    parts = []
    for err in exc.errors():
        loc = ".".join(str(p) for p in err.get("loc", ()) if p != "body")
        parts.append(f"{loc}: {err.get('msg', 'invalid value')}" if loc else err.get("msg", ""))
    return "; ".join(parts) or "Invalid request."


async def _invalid_input_handler(request: Request, exc: InvalidInputError) -> JSONResponse:
    return JSONResponse(status_code=400, content=error_body(str(exc)))


async def _request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    return JSONResponse(status_code=400, content=error_body(_validation_message(exc)))


async def _not_found_handler(request: Request, exc: RecordNotFoundError) -> JSONResponse:
    return JSONResponse(status_code=404, content=error_body(str(exc)))


async def _mail_delivery_handler(request: Request, exc: MailDeliveryError) -> JSONResponse:
    return JSONResponse(status_code=502, content=error_body(str(exc)))


async def _http_exception_handler(
    request: Request, exc: StarletteHTTPException
) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content=error_body(str(exc.detail)),
        headers=getattr(exc, "headers", None),
    )


async def _unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s", request.method, request.url.path, exc_info=exc
    )
    return JSONResponse(status_code=500, content=error_body("Internal server error"))


# ---------------------------------------------------------------------------
# Application factory
# ---------------------------------------------------------------------------


def create_app(settings: Settings | None = None) -> FastAPI:
    """Build the FastAPI application.

    Args:
        settings: Configuration; loaded from the environment when omitted.

    Returns:
        FastAPI: The configured application. Services are created when its
        lifespan starts.
    """
    settings = settings or Settings()
    app = FastAPI(
        title="Plant Operations API",
        description="Power-plant and RTU records with simulated telemetry.",
        version="0.1.0",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.origins,
        allow_methods=["GET", "POST", "PATCH", "DELETE"],
        allow_headers=["Authorization", "Content-Type"],
    )

    app.add_exception_handler(InvalidInputError, _invalid_input_handler)
    app.add_exception_handler(RequestValidationError, _request_validation_handler)
    app.add_exception_handler(RecordNotFoundError, _not_found_handler)
    app.add_exception_handler(MailDeliveryError, _mail_delivery_handler)
    app.add_exception_handler(StarletteHTTPException, _http_exception_handler)
    app.add_exception_handler(Exception, _unexpected_error_handler)

    app.include_router(health_router)
    app.include_router(plants_router)
    # Telemetry before RTUs: /api/rtus/data must win over /api/rtus/{rtu_id}.
    app.include_router(telemetry_router)
    app.include_router(rtus_router)
    app.include_router(history_router)
    app.include_router(mail_router)

    @app.get("/")
    async def root() -> dict:
        """Root health check endpoint."""
        return {"status": "ok"}

    return app


def main() -> None:
    """Console entry point: serve the API with uvicorn."""
    settings = Settings()
    uvicorn.run(
        "plantops.api.main:create_app",
        factory=True,
        host=settings.host,
        port=settings.port,
        log_config=None,
    )


if __name__ == "__main__":
    main()
