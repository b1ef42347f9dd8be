"""
Main Application Entry Point.

This module initializes the FastAPI application, configures middleware (CORS,
request timing), registers the exception handlers and includes all API
routers. It serves as the root of the web server.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from visit_scheduler.core.database import init_db
from visit_scheduler.core.logging_config import get_logger, setup_logging
from visit_scheduler.core.monitoring import initialize_logfire

from .api.v1 import applications, health, migrate, sessions, visit_requests, visits
from .core import constant
from .core.config import settings
from .exception_handlers import setup_exception_handlers
from .middleware import LogfireMiddleware
from .services import close_api_clients
from .tasks import ScheduledTaskRunner

# Initialize logging
setup_logging()
logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Manage application lifespan events.

    Creates missing tables and starts the scheduled tasks on startup. Stops
    the tasks and closes the downstream API clients on shutdown.
    """
    try:
        logger.info("Starting up Visit Scheduler Server...")
        await init_db()
        logger.info("Database initialized successfully")
    except Exception as e:
        logger.error(f"Database initialization failed: {e}", exc_info=True)

    task_runner = ScheduledTaskRunner()
    task_runner.start()
    app.state.task_runner = task_runner

    yield

    logger.info("Shutting down Visit Scheduler Server...")
    await task_runner.stop()
    await close_api_clients()


app = FastAPI(
    title=constant.PROJECT_NAME,
    description="""
    Visit Scheduler API

    Books prison visits against recurring session templates: session listing,
    slot reservation, booking, cancellation, visit requests and legacy visit
    migration.
    """,
    version="0.1.0",
    openapi_url=f"{constant.API_V1_STR}/openapi.json",
    docs_url=f"{constant.API_V1_STR}/docs",
    redoc_url=f"{constant.API_V1_STR}/redoc",
    lifespan=lifespan,
)

initialize_logfire(app)

cors = settings.cors
app.add_middleware(
    CORSMiddleware,
    allow_origins=cors.origins,
    allow_credentials=cors.allow_credentials,
    allow_methods=cors.allow_methods,
    allow_headers=cors.allow_headers,
)
app.add_middleware(LogfireMiddleware)

setup_exception_handlers(app)

app.include_router(health.router, tags=["health"])
app.include_router(sessions.router, prefix=f"{constant.API_V1_STR}/visit-sessions")
app.include_router(applications.router, prefix=f"{constant.API_V1_STR}/applications")
# must precede the visits router
app.include_router(visit_requests.router, prefix=f"{constant.API_V1_STR}/visits/requests")
app.include_router(visits.router, prefix=f"{constant.API_V1_STR}/visits")
app.include_router(migrate.router, prefix=f"{constant.API_V1_STR}/migrate-visits")
