from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from hajzi.api.exception_handlers import register_exception_handlers
from hajzi.api.v1.router import api_router
from hajzi.config.settings import settings
from hajzi.core.logging import get_logger, setup_logging
from hajzi.core.middleware import register_middlewares
from hajzi.db.init_db import init_db

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    # Production schemas are managed outside the app
    if not settings.is_production():
        init_db()
    logger.info("Application started", extra={"environment": settings.ENVIRONMENT})
    yield
    logger.info("Application stopped")


def create_app() -> FastAPI:
    """Build the FastAPI app: logging, middlewares, error handlers and the v1 routes."""
    setup_logging()

    app = FastAPI(
        title=settings.APP_NAME,
        debug=settings.DEBUG,
        version=settings.API_VERSION,
        docs_url="/docs",
        redoc_url="/redoc",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS or ["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    register_middlewares(app)
    register_exception_handlers(app)

    app.include_router(api_router, prefix=settings.API_V1_STR)

    return app


app = create_app()
