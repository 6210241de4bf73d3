"""GROFAST — FastAPI Application Factory."""

import logging
from contextlib import asynccontextmanager

from fastapi import Depends, FastAPI
from fastapi.middleware.cors import CORSMiddleware
from slowapi import _rate_limit_exceeded_handler
from slowapi.errors import RateLimitExceeded

from grofast.announcements.router import router as announcements_router
from grofast.attendance.router import router as attendance_router
from grofast.auth.dependencies import verify_api_key
from grofast.auth.router import router as auth_router
from grofast.chat.router import channels_router, messages_router
from grofast.clients.router import router as clients_router
from grofast.common.exceptions import register_exception_handlers
from grofast.common.rate_limit import limiter
from grofast.config import settings
from grofast.dashboard.router import router as dashboard_router
from grofast.database import engine
from grofast.employees.router import router as employees_router
from grofast.leave.router import router as leave_router
from grofast.meetings.router import router as meetings_router
from grofast.realtime.hub import RealtimeHub
from grofast.realtime.router import router as realtime_router
from grofast.reports.router import router as reports_router
from grofast.tasks.router import router as tasks_router
from grofast.updates.router import learning_updates_router, work_updates_router

logger = logging.getLogger(__name__)

API_PREFIX = "/api/v1"


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s [%(levelname)s] %(name)s — %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown events."""
    logger.info("GROFAST starting (environment=%s)", settings.ENVIRONMENT)
    yield
    await engine.dispose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application."""
    configure_logging(settings.LOG_LEVEL)

    app = FastAPI(
        title="GROFAST",
        description="Team management: tasks, attendance, leave, clients, meetings and chat",
        version="1.0.0",
        docs_url="/api/docs" if settings.ENVIRONMENT != "production" else None,
        redoc_url="/api/redoc" if settings.ENVIRONMENT != "production" else None,
        lifespan=lifespan,
    )

    # In-process realtime hub (websocket fan-out)
    app.state.realtime = RealtimeHub()

    # Exception handlers (RFC 7807)
    register_exception_handlers(app)

    # Rate limiting (slowapi)
    app.state.limiter = limiter
    app.add_exception_handler(RateLimitExceeded, _rate_limit_exceeded_handler)

    # CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins_list,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Health check (no auth)
    @app.get(f"{API_PREFIX}/health", tags=["system"])
    async def health_check():
        return {
            "status": "healthy",
            "version": "1.0.0",
            "environment": settings.ENVIRONMENT,
        }

    # Register routers; every HTTP route carries the apikey check
    api_key = [Depends(verify_api_key)]
    http_routers = [
        (auth_router, "/auth"),
        (employees_router, "/employees"),
        (tasks_router, "/tasks"),
        (leave_router, "/leave-requests"),
        (attendance_router, "/attendance"),
        (clients_router, "/clients"),
        (meetings_router, "/meetings"),
        (channels_router, "/channels"),
        (messages_router, "/messages"),
        (work_updates_router, "/work-updates"),
        (learning_updates_router, "/learning-updates"),
        (announcements_router, "/announcements"),
        (dashboard_router, "/dashboard"),
        (reports_router, "/reports"),
    ]
    for router, prefix in http_routers:
        app.include_router(router, prefix=f"{API_PREFIX}{prefix}", dependencies=api_key)

    # Websocket checks the apikey query param itself
    app.include_router(realtime_router, prefix=f"{API_PREFIX}/realtime")

    return app


app = create_app()
