"""FastAPI application entry point."""

import logging
import structlog
from contextlib import asynccontextmanager
from fastapi import FastAPI

from src.api.webhooks.whatsapp import router as whatsapp_router
from src.config import settings
from src.database import dispose_engine
from src.redis_client import close_redis_client

_development = settings.environment == "development"

structlog.configure(
    processors=[
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.add_log_level,
        *([] if _development else [structlog.processors.format_exc_info]),
        structlog.dev.ConsoleRenderer() if _development
        else structlog.processors.JSONRenderer(),
    ],
    wrapper_class=structlog.make_filtering_bound_logger(
        getattr(logging, settings.log_level.upper(), logging.INFO)
    ),
)

logger = structlog.get_logger()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application startup and shutdown."""
    logger.info(
        "app_starting",
        environment=settings.environment,
        company=settings.company_name,
        llm_model=settings.llm_model,
    )
    yield
    logger.info("app_shutting_down")
    await close_redis_client()
    await dispose_engine()


app = FastAPI(
    title="LiftQuote API",
    description="WhatsApp lead qualification and tiered quoting for lift rentals",
    version="0.1.0",
    lifespan=lifespan,
)

# Include routers
app.include_router(whatsapp_router)


@app.get("/")
async def root():
    """Root endpoint."""
    return {
        "name": "LiftQuote API",
        "version": "0.1.0",
        "status": "running",
    }
