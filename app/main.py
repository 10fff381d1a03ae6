"""
app/main.py

Purpose: Application entry point

- Configures logging before anything else logs
- Startup: validate settings, connect MongoDB, ensure indexes, build the
  workflow with the configured notification providers
- Registers error handlers, middleware and routers
- No business logic should be written here
"""

import time
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware

from app.api import admin_code_requests, health, utilities
from app.core.config import settings, validate_settings
from app.core.errors import add_exception_handlers
from app.core.logging import get_logger, setup_logging
from app.db.indexes import create_indexes
from app.db.mongo import close_mongo_connection, connect_to_mongo
from app.db.store import MongoDocumentStore
from app.services.admin_code_service import AdminCodeRequestWorkflow
from app.services.notification_service import build_notification_dispatcher

setup_logging()
logger = get_logger(__name__)


def build_workflow() -> AdminCodeRequestWorkflow:
    """
    Providers are chosen here once and kept for the process lifetime.
    """
    return AdminCodeRequestWorkflow(
        store=MongoDocumentStore(),
        notifier=build_notification_dispatcher(settings),
        settings=settings,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info(f"🚀 Starting admin console ({settings.ENVIRONMENT}, debug={settings.DEBUG})")

    try:
        validate_settings()
        await connect_to_mongo()
        await create_indexes()
        app.state.workflow = build_workflow()
    except Exception as e:
        logger.critical(f"Failed to start application: {e}", exc_info=True)
        raise

    logger.info("🎉 Admin console ready")
    yield

    logger.info("🛑 Shutting down admin console")
    await close_mongo_connection()


app = FastAPI(
    title=health.SERVICE_NAME,
    description="Admin code request review and notification service for the booking platform",
    version=health.SERVICE_VERSION,
    lifespan=lifespan,
    debug=settings.DEBUG,
    docs_url="/docs" if settings.is_development else None,
    redoc_url="/redoc" if settings.is_development else None,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.middleware("http")
async def add_process_time_header(request: Request, call_next):
    started = time.perf_counter()
    response = await call_next(request)
    elapsed = time.perf_counter() - started
    response.headers["X-Process-Time"] = f"{elapsed:.4f}"

    # Approvals wait on two provider calls in sequence
    if elapsed > settings.SLOW_REQUEST_SECONDS:
        logger.warning(f"Slow request: {request.method} {request.url.path} took {elapsed:.2f}s")

    return response


add_exception_handlers(app)

app.include_router(health.router)
app.include_router(admin_code_requests.router, prefix=settings.API_PREFIX, tags=["Admin Code Requests"])
app.include_router(utilities.router, prefix=settings.API_PREFIX, tags=["Utilities"])


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "app.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.is_development,
        log_level=settings.LOG_LEVEL.lower()
    )
