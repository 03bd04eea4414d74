"""
FastAPI application factory. No business logic; only wiring, error mapping and middleware.

Run with: uvicorn stockroom.main:create_app --factory
"""

import logging

from dotenv import load_dotenv

load_dotenv()

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from stockroom.api.v1 import router as v1_router
from stockroom.core.config import Settings, get_settings
from stockroom.core.exception_handlers import setup_exception_handlers
from stockroom.core.security import TokenService

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        datefmt="%Y-%m-%dT%H:%M:%SZ",
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    """
    Build the application. Raises ConfigurationError when JWT_SECRET is missing,
    so a misconfigured process fails at startup instead of on every request.
    """
    settings = settings or get_settings()
    configure_logging(settings.LOG_LEVEL)
    token_service = TokenService.from_settings(settings)

    app = FastAPI(
        title="Stockroom API",
        version="0.1.0",
        docs_url="/docs",
        redoc_url="/redoc",
    )
    # Read-only after startup; shared by every request.
    app.state.settings = settings
    app.state.token_service = token_service

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"] if settings.APP_ENV == "dev" else [],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    setup_exception_handlers(app)
    app.include_router(v1_router, prefix=settings.API_V1_PREFIX)

    @app.get("/")
    def root() -> dict[str, str]:
        """Root route; minimal payload for discovery."""
        return {"message": "Stockroom API"}

    logger.info(
        "Stockroom API configured (env=%s, auth_role_source=%s)",
        settings.APP_ENV,
        settings.AUTH_ROLE_SOURCE,
    )
    return app
