"""
main.py
FastAPI application entry point.
Registers all routers, middleware, startup/shutdown events.
"""

import json
import logging
import os
import time
import uuid
from contextlib import asynccontextmanager
from logging import LogRecord

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.gzip import GZipMiddleware
from fastapi.responses import JSONResponse
from prometheus_fastapi_instrumentator import Instrumentator

from config.portal import close_portal, get_portal, init_portal
from config.settings import settings
from shared.ledger.errors import LedgerError
from shared.schemas.schemas import ErrorResponse

# Service routers
from services.auth.router import router as auth_router
from services.teacher.router import router as teacher_router
from services.booking.router import router as booking_router
from services.package.router import router as package_router
from services.payment.router import router as payment_router
from services.cms.router import router as cms_router
from services.admin.router import router as admin_router


# ── Logging ──────────────────────────────────────────────────

class JSONFormatter(logging.Formatter):
    """One JSON object per log line."""

    def format(self, record: LogRecord) -> str:
        entry = {
            "ts": self.formatTime(record),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
            "app": settings.APP_NAME,
            "env": settings.APP_ENV,
            "instance": os.getenv("INSTANCE_NAME", "unknown"),
        }
        request_id = getattr(record, "request_id", None)
        if request_id:
            entry["request_id"] = request_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry)


def configure_logging() -> None:
    handler = logging.StreamHandler()
    handler.setFormatter(JSONFormatter())
    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)


configure_logging()
logger = logging.getLogger(__name__)


# ── Lifespan (startup/shutdown) ───────────────────────────────

@asynccontextmanager
async def lifespan(app: FastAPI):
    """Startup and shutdown lifecycle handler."""
    logger.info(f"Starting {settings.APP_NAME} API...")

    # Load every snapshot bucket into the ledger and restore the session
    await init_portal()

    logger.info(f"{settings.APP_NAME} v{settings.APP_VERSION} is ready")
    yield

    await close_portal()
    logger.info("Server shutdown complete")


# ── App Factory ───────────────────────────────────────────────

def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        version=settings.APP_VERSION,
        description="""
## Dream Education Studio API

Booking and CMS portal for a single recording studio:
- **Auth**: teacher registration, admin approval, remember-me sessions
- **Bookings**: hourly studio slots paid for with prepaid hours
- **Payments**: package purchases verified by the admin
- **CMS**: landing-page content and duration-tiered pricing

### Authentication
Protected endpoints require `Authorization: Bearer <access_token>` from `/auth/login`.
Only the active session's token is accepted.

### Roles
- `teacher`: buy packages, book slots, view own history
- `admin`: approve teachers, verify payments, manage bookings, packages and content
        """,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
        responses={
            status_code: {"model": ErrorResponse}
            for status_code in (400, 401, 403, 404, 409)
        },
    )

    # ── Middleware (outermost first) ───────────────
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
        expose_headers=["X-Request-ID", "X-Process-Time", "Content-Disposition"],
    )

    # GZip compression
    app.add_middleware(GZipMiddleware, minimum_size=500)

    # ── Request context ────────────────────────────────────────────

    @app.middleware("http")
    async def request_context_middleware(request: Request, call_next):
        """Tag each request with an X-Request-ID and report how long it took."""
        request.state.request_id = request.headers.get("X-Request-ID") or uuid.uuid4().hex
        started = time.perf_counter()

        response = await call_next(request)

        elapsed_ms = (time.perf_counter() - started) * 1000
        response.headers["X-Request-ID"] = request.state.request_id
        response.headers["X-Process-Time"] = f"{elapsed_ms:.2f}ms"
        if request.method != "GET":
            logger.info(
                f"{request.method} {request.url.path} -> {response.status_code} ({elapsed_ms:.1f}ms)",
                extra={"request_id": request.state.request_id},
            )
        return response

    # ── Exception Handlers ─────────────────────────────────────────

    @app.exception_handler(LedgerError)
    async def ledger_exception_handler(request: Request, exc: LedgerError):
        """Domain rejections go straight back to the user."""
        request_id = getattr(request.state, "request_id", None)
        logger.info(f"{exc.code}: {exc.message}", extra={"request_id": request_id})
        body = ErrorResponse(detail=exc.message, code=exc.code, request_id=request_id)
        return JSONResponse(status_code=exc.status_code, content=body.model_dump())

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Anything the ledger did not anticipate. Details only in DEBUG."""
        request_id = getattr(request.state, "request_id", None)
        logger.error(f"Unhandled {type(exc).__name__}: {exc}", exc_info=True, extra={"request_id": request_id})

        detail = str(exc) if settings.DEBUG else "An internal server error occurred"
        body = ErrorResponse(detail=detail, code="INTERNAL_ERROR", request_id=request_id)
        return JSONResponse(status_code=500, content=body.model_dump())

    # ── Routes ────────────────────────────────────────────────────

    # Health check (public)
    @app.get("/health", tags=["Health"], include_in_schema=False)
    async def health_check():
        checks = {"status": "ok", "version": settings.APP_VERSION, "store": settings.STORE_BACKEND}

        try:
            current = get_portal()
        except RuntimeError:
            current = None

        if current is None:
            checks["status"] = "degraded"
        else:
            checks["teachers"] = len(current.ledger.teachers)
            # Store check
            if await current.repository.store.ping():
                checks["store_status"] = "ok"
            else:
                checks["store_status"] = "error"
                checks["status"] = "degraded"

        status_code = 200 if checks["status"] == "ok" else 503
        return JSONResponse(content=checks, status_code=status_code)

    @app.get("/", include_in_schema=False)
    async def root():
        return {
            "name": settings.APP_NAME,
            "version": settings.APP_VERSION,
            "docs": "/docs",
            "health": "/health",
        }

    # Register all service routers
    app.include_router(auth_router)
    app.include_router(teacher_router)
    app.include_router(booking_router)
    app.include_router(package_router)
    app.include_router(payment_router)
    app.include_router(cms_router)
    app.include_router(admin_router)

    # ── Prometheus Metrics ─────────────────────────────────────────
    Instrumentator().instrument(app).expose(app, endpoint="/metrics", tags=["Monitoring"])

    return app


# ── Entry Point ───────────────────────────────────────────────

app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(
        "main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
        workers=settings.WORKERS,
        log_level="debug" if settings.DEBUG else "info",
        access_log=True,
    )
