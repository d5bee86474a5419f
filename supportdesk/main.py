"""
SupportDesk - Main Application
==============================

Support ticket lifecycle service with SLA-driven escalation.

Modules:
- Directory: Clients and agents
- Tickets: Ticket lifecycle, state machine and access policies
- SLA Escalation: Background and on-demand escalation of overdue tickets

Clean Architecture Layers:
- Interfaces: FastAPI controllers
- Application: Services and DTOs
- Domain: Entities and value objects
- Infrastructure: Database, config watcher, scheduler
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.exc import SQLAlchemyError

# Configuration and Core
from supportdesk.config import settings
from supportdesk.core import ApplicationException

# Infrastructure
from supportdesk.infrastructure.database import (
    close_database,
    create_tables,
    get_session_context,
    init_database,
)

# SLA Module
from supportdesk.sla.application import SLAEscalationSweeper
from supportdesk.sla.domain import SLAConfig
from supportdesk.sla.infrastructure import SLAConfigManager, SLAScheduler
from supportdesk.tickets.infrastructure import SQLAlchemyTicketRepository

# Module Routers
from supportdesk.directory.interfaces import agents_router, clients_router
from supportdesk.sla.interfaces import sla_router
from supportdesk.tickets.interfaces import tickets_router

# Shared
from supportdesk.shared.api.middleware import (
    CorrelationIDMiddleware,
    LoggingMiddleware,
    application_exception_handler,
    global_exception_handler,
    request_validation_exception_handler,
)
from supportdesk.shared.infrastructure.logging import get_logger, log_latency, setup_logging

logger = get_logger(__name__)

# Global service instances
sla_config_manager = None
sla_scheduler = None


async def sla_sweep_job() -> None:
    """Background SLA sweep, one session per run."""
    async with get_session_context() as session:
        sweeper = SLAEscalationSweeper(SQLAlchemyTicketRepository(session), sla_config_manager)
        with log_latency(logger, "scheduled_sla_sweep"):
            await sweeper.sweep()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator:
    """
    Application lifespan manager.

    STARTUP:
    1. Setup structured logging
    2. Initialize database
    3. Create database tables
    4. Load SLA configuration and watch the file
    5. Start SLA scheduler

    SHUTDOWN:
    1. Stop SLA scheduler
    2. Stop config watcher
    3. Close database connections
    """
    global sla_config_manager, sla_scheduler

    # === STARTUP ===
    setup_logging(settings.log_level, settings.environment)
    logger.info("Starting SupportDesk", extra={
        "version": settings.app_version,
        "environment": settings.environment
    })

    logger.info("Initializing database")
    init_database()

    # Create tables (for development - use Alembic in production)
    logger.info("Creating database tables")
    try:
        await create_tables()
    except (SQLAlchemyError, OSError) as e:
        logger.warning(f"Database not available - running in degraded mode: {e}")

    logger.info("Loading SLA configuration")
    sla_config_manager = SLAConfigManager(SLAConfig.from_settings(settings))
    sla_config_manager.load(settings.sla_config_path)
    sla_config_manager.start_watching()
    app.state.sla_config_provider = sla_config_manager

    if settings.sla_sweep_enabled:
        sla_scheduler = SLAScheduler(interval_seconds=settings.sla_sweep_interval_seconds)
        await sla_scheduler.start(sla_sweep_job)
    else:
        logger.info("Scheduled SLA sweep disabled")

    logger.info("SupportDesk started successfully")

    yield  # Application runs here

    # === SHUTDOWN ===
    logger.info("Shutting down SupportDesk")

    if sla_scheduler:
        await sla_scheduler.stop()

    if sla_config_manager:
        sla_config_manager.stop_watching()

    await close_database()

    logger.info("SupportDesk shutdown complete")


# Create FastAPI application
app = FastAPI(
    title="SupportDesk API",
    description="""
    ## Support Ticket Lifecycle & SLA Escalation

    Every request must carry `X-Actor-Id` and `X-Actor-Role`
    (`ADMIN`, `SUPERVISOR` or `AGENT`).

    ---

    ### Tickets

    - `POST /tickets` - Open a ticket (priority from the client category)
    - `GET /tickets` - Paged, filtered listing (agents see only their own)
    - `GET /tickets/{id}` - Ticket with client and agent snapshots
    - `PUT /tickets/{id}` - Partial update, status changes follow the lifecycle
    - `DELETE /tickets/{id}` - Soft delete (admins and supervisors)

    ### SLA Escalation

    - `POST /sla/sweep` - Escalate overdue tickets now
    - `GET /sla/breaches` - Tickets currently past their window

    | Client category | Priority | SLA window |
    |-----------------|----------|------------|
    | VIP             | HIGH     | 2 hours    |
    | NORMAL          | MEDIUM   | 24 hours   |

    ### Directory

    - `/clients` - Client records (delete: admins only, and only without tickets)
    - `/agents` - Agent profiles, deactivated rather than deleted
    """,
    version=settings.app_version,
    docs_url="/docs",
    redoc_url="/redoc",
    lifespan=lifespan
)

# === CORS Middleware ===
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# === Custom Middleware (last added runs first) ===
app.add_middleware(LoggingMiddleware)
app.add_middleware(CorrelationIDMiddleware)

app.add_exception_handler(ApplicationException, application_exception_handler)
app.add_exception_handler(RequestValidationError, request_validation_exception_handler)
app.add_exception_handler(Exception, global_exception_handler)

# === Include Module Routers ===
app.include_router(tickets_router)
app.include_router(sla_router)
app.include_router(clients_router)
app.include_router(agents_router)


# === Health Check Endpoint ===

@app.get("/health", tags=["Health"], responses={
    200: {
        "description": "Service is healthy",
        "content": {
            "application/json": {
                "example": {
                    "status": "healthy",
                    "version": "1.0.0",
                    "environment": "development",
                    "checks": {
                        "sla_config": "loaded",
                        "sla_scheduler": "running"
                    }
                }
            }
        }
    }
})
async def health_check(request: Request):
    """
    Health check endpoint for load balancers and orchestrators.

    Returns service health status including:
    - SLA configuration status
    - Scheduler state
    """
    provider = getattr(request.app.state, "sla_config_provider", None)
    checks = {
        "sla_config": "loaded" if provider is not None else "settings",
        "sla_scheduler": "running" if sla_scheduler and sla_scheduler.is_running else "stopped",
    }

    return {
        "status": "healthy",
        "version": settings.app_version,
        "environment": settings.environment,
        "checks": checks
    }


@app.get("/", tags=["Root"])
async def root():
    """Root endpoint with API information."""
    return {
        "service": "SupportDesk",
        "version": settings.app_version,
        "architecture": "Clean Architecture / Modular Monolith",
        "docs": "/docs",
        "health": "/health",
        "modules": {
            "tickets": {"prefix": "/tickets"},
            "sla": {"prefix": "/sla"},
            "directory": {"prefix": ["/clients", "/agents"]},
        }
    }


# === Development Entry Point ===

if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "supportdesk.main:app",
        host=settings.host,
        port=settings.port,
        reload=settings.environment == "development",
        log_level="info"
    )
