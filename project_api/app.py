"""
FastAPI application entry point for the project API.
"""

from __future__ import annotations

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from project_api.config import get_settings
from project_api.dependencies import close_stores
from project_api.error_handlers import register_error_handlers
from project_api.logging_config import setup_logging
from project_api.routes import router

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    settings = get_settings()
    setup_logging(settings.log_level)
    logger.info("Project API started")
    yield
    await close_stores()
    logger.info("Project API shutting down")


def create_app() -> FastAPI:
    settings = get_settings()
    app = FastAPI(title="Project API", version="0.1.0", lifespan=lifespan)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    register_error_handlers(app)
    app.include_router(router, prefix=settings.api_prefix)
    return app


app = create_app()
