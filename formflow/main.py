"""FastAPI application entry point for the form visibility service.

This module initializes the FastAPI application, sets up logging,
creates the response tables, registers routers, and handles global
exception handling.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from formflow.config import get_settings
from formflow.logging_config import setup_logging, get_logger
from formflow.models.database import Base, engine
from formflow.routes import forms, health

logger = get_logger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager.

    Startup configures logging and creates the response tables if they
    don't exist yet.
    """
    settings = get_settings()
    setup_logging()
    Base.metadata.create_all(engine)

    logger.info(
        f"Form service starting - "
        f"Environment: {settings.environment}, "
        f"Log Level: {settings.log_level}, "
        f"Forms: {settings.forms_dir}"
    )

    yield

    logger.info("Form service shutting down")


app = FastAPI(
    title="Form Visibility Service",
    description="Serves forms with conditional skip logic and collects responses",
    version="1.0.0",
    lifespan=lifespan
)


@app.get("/")
async def root() -> dict:
    """Root endpoint with basic API information."""
    settings = get_settings()
    return {
        "service": "Form Visibility Service",
        "version": "1.0.0",
        "environment": settings.environment,
        "status": "operational"
    }


app.include_router(health.router, tags=["Health"])
app.include_router(forms.router, tags=["Forms"])


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Global exception handler for unhandled exceptions.

    Logs all unhandled exceptions and returns a generic error response
    to prevent leaking internal details.
    """
    logger.error(
        f"Unhandled exception for {request.method} {request.url}: {exc}",
        exc_info=True
    )

    return JSONResponse(
        status_code=500,
        content={
            "error": "Internal server error",
            "message": "An unexpected error occurred. Please try again later."
        }
    )
