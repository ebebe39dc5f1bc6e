"""Main FastAPI application."""
import asyncio
import logging
import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware

from plantcare.settings import settings
from plantcare.api.auth import router as auth_router
from plantcare.api.users import router as users_router
from plantcare.api.plants import router as plants_router
from plantcare.api.waterings import router as waterings_router
from plantcare.api.notifications import router as notifications_router
from plantcare.domain.common.errors import (
    AuthorizationError,
    ConflictError,
    NotFoundError,
    ValidationError,
)
from plantcare.infra.db.base import AsyncSessionLocal, Base, engine
# Import all models to ensure they're registered with Base
from plantcare.infra.db.models import (  # noqa: F401
    PlantModel,
    PushSubscriptionModel,
    UserModel,
    WateringModel,
)
from plantcare.infra.jobs.scheduler import ReminderScheduler

# Configure logging
logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events."""
    # Startup
    try:
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)
    except Exception as e:
        # The database may still be starting; /ready reports it
        logger.warning("Could not connect to database during startup: %s", e)

    scheduler = None
    if settings.scheduler_enabled:
        scheduler = ReminderScheduler(
            AsyncSessionLocal,
            interval_minutes=settings.due_check_interval_minutes,
            digest_hour=settings.daily_digest_hour,
            tz=settings.schedule_tz,
        )
        scheduler.start()
    else:
        logger.info("Reminder scheduler disabled")
    app.state.reminder_scheduler = scheduler

    yield

    # Shutdown
    try:
        if scheduler is not None:
            await scheduler.stop()
        await engine.dispose()
    except asyncio.CancelledError:
        logger.info("Lifespan shutdown cancelled (e.g. Ctrl+C); cleanup attempted.")
        raise


app = FastAPI(
    title=settings.app_name,
    version=settings.app_version,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
    allow_headers=["*"],
)


class LoggingMiddleware(BaseHTTPMiddleware):
    """Log every request with its status and duration."""

    async def dispatch(self, request: Request, call_next):
        start_time = time.time()
        logger.info("[REQUEST] %s %s", request.method, request.url.path)
        logger.debug("   Query params: %s", dict(request.query_params))
        if logger.isEnabledFor(logging.DEBUG):
            headers = dict(request.headers)
            auth_header = headers.get("authorization", "")
            if auth_header.startswith("Bearer "):
                token = auth_header[7:]
                headers["authorization"] = f"Bearer {token[:20]}..." if len(token) > 20 else "Bearer ***"
            logger.debug("   Headers: %s", headers)

        response = await call_next(request)

        process_time = time.time() - start_time
        logger.info(
            "[RESPONSE] %s %s - %s (%.3fs)",
            request.method,
            request.url.path,
            response.status_code,
            process_time,
        )
        return response


# Add logging middleware AFTER CORS (CORS must be first)
app.add_middleware(LoggingMiddleware)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Log validation errors and return them in FastAPI's usual shape."""
    errors = exc.errors()
    logger.warning(
        "[VALIDATION ERROR] %s %s: %d error(s)", request.method, request.url.path, len(errors)
    )
    for error in errors:
        logger.debug("   %s: %s", ".".join(str(p) for p in error.get("loc", ())), error.get("msg"))
    return JSONResponse(status_code=422, content={"detail": jsonable_errors(errors)})


def jsonable_errors(errors):
    """Validation errors may carry exception objects in ``ctx``; stringify them."""
    cleaned = []
    for error in errors:
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {k: str(v) for k, v in error["ctx"].items()}
        cleaned.append(error)
    return cleaned


# Domain error handlers: map domain exceptions to HTTP status
@app.exception_handler(NotFoundError)
async def domain_not_found_handler(request: Request, exc: NotFoundError):
    """Return 404 when a resource is not found or not owned by the caller."""
    return JSONResponse(status_code=404, content={"detail": str(exc)})


@app.exception_handler(AuthorizationError)
async def domain_authorization_handler(request: Request, exc: AuthorizationError):
    return JSONResponse(status_code=403, content={"detail": exc.message})


@app.exception_handler(ValidationError)
async def domain_validation_handler(request: Request, exc: ValidationError):
    return JSONResponse(status_code=422, content={"detail": exc.message})


@app.exception_handler(ConflictError)
async def domain_conflict_handler(request: Request, exc: ConflictError):
    return JSONResponse(status_code=409, content={"detail": exc.message})


# Health check (root and under /v1 so GET /v1/health works behind a /v1 proxy prefix)
@app.get("/health")
@app.get(f"{settings.api_v1_prefix}/health")
async def health_check():
    """Health check endpoint."""
    return {"status": "ok", "version": settings.app_version}


@app.get("/ready")
async def readiness():
    """Readiness endpoint: 200 if config, packages and database are fine, 503 otherwise."""
    from plantcare.readiness import run_all_checks_async, is_ready
    checks = await run_all_checks_async()
    ready, summary = is_ready(checks)
    if ready:
        return {"ready": True, "checks": summary}
    return JSONResponse(status_code=503, content={"ready": False, "checks": summary})


# API v1 routes
app.include_router(auth_router, prefix=settings.api_v1_prefix)
app.include_router(users_router, prefix=settings.api_v1_prefix)
app.include_router(plants_router, prefix=settings.api_v1_prefix)
app.include_router(waterings_router, prefix=settings.api_v1_prefix)
app.include_router(notifications_router, prefix=settings.api_v1_prefix)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run("plantcare.main:app", host="0.0.0.0", port=8000, reload=True)
