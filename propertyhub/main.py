"""PropertyHub API — FastAPI application factory."""


import logging
import sys
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from propertyhub.core.config import settings
from propertyhub.core.exceptions import register_exception_handlers
from propertyhub.db.base import init_models
from propertyhub.middleware.audit import AuditMiddleware
from propertyhub.schemas.common import HealthResponse

from propertyhub.routers.v1.auth import router as auth_router
from propertyhub.routers.v1.files import router as files_router
from propertyhub.routers.v1.financial import router as financial_router
from propertyhub.routers.v1.land_registry import router as land_registry_router
from propertyhub.routers.v1.properties import router as properties_router
from propertyhub.routers.v1.rent_payments import router as rent_payments_router
from propertyhub.routers.v1.tenancies import router as tenancies_router
from propertyhub.routers.v1.users import router as users_router

logger = logging.getLogger(__name__)

_V1_ROUTERS = (
    auth_router,
    users_router,
    properties_router,
    tenancies_router,
    rent_payments_router,
    financial_router,
    files_router,
    land_registry_router,
)


def _configure_logging() -> None:
    """Set up structured logging for the application."""
    level = logging.DEBUG if settings.is_development else logging.INFO
    logging.basicConfig(
        level=level,
        format="%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S",
        stream=sys.stdout,
        force=True,
    )
    # Quiet noisy libraries
    for name in ("sqlalchemy.engine", "aiosqlite", "pdfminer", "passlib", "multipart", "httpcore", "httpx"):
        logging.getLogger(name).setLevel(logging.WARNING)


@asynccontextmanager
async def lifespan(app: FastAPI):
    if settings.auto_create_tables:
        await init_models()
        logger.info("Database tables ensured (%s)", settings.database_url.split("://")[0])
    yield


def create_app() -> FastAPI:
    _configure_logging()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan,
    )

    # --- CORS ---
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.frontend_url],
        allow_credentials=True,
        allow_methods=["GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS"],
        allow_headers=["*"],
    )

    # --- Audit middleware ---
    if settings.audit_log_enabled:
        app.add_middleware(AuditMiddleware)

    # --- Global exception handlers ---
    register_exception_handlers(app)

    # --- v1 API routes (/api/v1/*) ---
    for router in _V1_ROUTERS:
        app.include_router(router, prefix="/api/v1")

    # --- Health check ---
    @app.get("/health", response_model=HealthResponse, tags=["Health"])
    async def health():
        return HealthResponse(app=settings.app_name, env=settings.app_env, version=settings.app_version)

    return app


app = create_app()
