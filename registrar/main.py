# registrar/main.py - Application factory, middleware and entry point
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from contextlib import asynccontextmanager
from typing import Optional
import logging
import traceback
import time

from registrar.core.config import Settings, get_settings
from registrar.core.db import DatabaseManager
from registrar.core.security import TokenManager, PasswordManager
from registrar.services.bootstrap import bootstrap_database
from registrar.services.storage import DocumentStorage
from registrar.api.routers import auth, enrollments, reenrollments, students, reports, tariffs, payments

logger = logging.getLogger(__name__)


def configure_logging(settings: Settings) -> None:
    logging.basicConfig(
        level=getattr(logging, settings.LOG_LEVEL),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan events"""
    settings: Settings = app.state.settings
    db: DatabaseManager = app.state.db

    logger.info("Starting School Registration API...")
    logger.info(f"Environment: {settings.ENV}")
    logger.info(f"Database: {settings.safe_database_url()}")

    db.initialize()
    bootstrap_database(db, settings)

    yield

    logger.info("Shutting down School Registration API...")
    db.close()


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """
    Build the API around one set of settings.

    The database manager, token and password managers and document storage
    are created here and shared through ``app.state``.
    """
    settings = settings or get_settings()
    configure_logging(settings)

    app = FastAPI(
        title=settings.API_TITLE,
        description="Registration office backend: enrollments, re-enrollments, payments and reporting",
        version=settings.API_VERSION,
        docs_url="/docs" if settings.is_development else None,
        redoc_url="/redoc" if settings.is_development else None,
        lifespan=lifespan
    )

    app.state.settings = settings
    app.state.db = DatabaseManager(settings)
    app.state.token_manager = TokenManager(settings)
    app.state.password_manager = PasswordManager(settings.BCRYPT_ROUNDS)
    app.state.storage = DocumentStorage.from_settings(settings)

    @app.middleware("http")
    async def log_requests(request: Request, call_next):
        """Log every request with its status and duration"""
        start_time = time.time()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Error processing {request.method} {request.url.path}: {e}")
            raise

        process_time = time.time() - start_time
        logger.info(f"{request.method} {request.url.path} -> {response.status_code} ({process_time:.3f}s)")
        return response

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization", "Accept", "Origin"],
        expose_headers=["Content-Disposition"],
        max_age=3600,
    )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Handle uncaught exceptions; the traceback is only ever logged"""
        logger.error(f"Unhandled exception on {request.method} {request.url.path}: {exc}")
        logger.error("".join(traceback.format_exception(type(exc), exc, exc.__traceback__)))

        return JSONResponse(
            status_code=500,
            content={"detail": "Internal server error"}
        )

    @app.get("/health")
    def health_check():
        database = app.state.db.health_check()
        return {
            "status": "healthy" if database["status"] == "healthy" else "degraded",
            "environment": settings.ENV,
            "version": settings.API_VERSION,
            "database": database,
        }

    app.include_router(auth.router, prefix="/api/auth", tags=["Authentication"])
    app.include_router(enrollments.router, prefix="/api/enrollments", tags=["Enrollments"])
    app.include_router(reenrollments.router, prefix="/api/re-enrollments", tags=["Re-enrollments"])
    app.include_router(students.router, prefix="/api/students", tags=["Students"])
    app.include_router(reports.router, prefix="/api", tags=["Reports"])
    app.include_router(tariffs.router, prefix="/api/tariffs", tags=["Tariffs"])
    app.include_router(payments.router, prefix="/api/payments", tags=["Payments"])

    return app


def run() -> None:
    """Serve the API with uvicorn using settings from the environment"""
    import uvicorn

    settings = get_settings()
    uvicorn.run(
        "registrar.main:create_app",
        factory=True,
        host=settings.API_HOST,
        port=settings.API_PORT,
        reload=settings.is_development,
    )


if __name__ == "__main__":
    run()
