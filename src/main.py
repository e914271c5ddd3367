"""Main application entry point for the bar ordering client.

This module provides the FastAPI application factory and configuration
for running the service locally or in production.
"""

import logging
import os

from fastapi import FastAPI

from bar_ordering_client.app_context import build_context
from bar_ordering_client.config import load_settings
from bar_ordering_client.handlers.api_handler import create_app
from bar_ordering_client.observability import configure_logging, setup_observability

logger = logging.getLogger(__name__)


def create_application() -> FastAPI:
    """Create and configure the FastAPI application with all dependencies.

    This factory function:
    1. Loads settings from the environment
    2. Configures logging
    3. Wires the backend client, stores and services
    4. Creates the FastAPI app
    5. Sets up observability

    Returns:
        Configured FastAPI application instance

    Raises:
        ValueError: If any configuration value is invalid
    """
    settings = load_settings()

    # Configure structured logging
    configure_logging(settings.log_level)

    logger.info("Initializing bar ordering client...")

    if settings.credentials_path is None:
        logger.warning("No CREDENTIALS_PATH configured - staff sessions will not survive a restart")

    context = build_context(settings)
    logger.info(
        f"Polling configured - staff: {settings.staff_poll_interval_seconds}s, "
        f"customer: {settings.customer_poll_interval_seconds}s"
    )

    app = create_app(context)
    setup_observability(app)

    logger.info("Bar ordering client initialized successfully")

    return app


# Create the FastAPI application instance (only when not in test mode)
# This prevents the app from being created during test collection
if os.getenv("ENVIRONMENT") != "test":  # noqa: SIM108
    app = create_application()
else:
    # Create a placeholder app for test imports
    app = FastAPI()


if __name__ == "__main__":
    """Run the application with uvicorn when executed directly."""
    import uvicorn

    port = int(os.getenv("PORT", "8001"))
    host = os.getenv("HOST", "0.0.0.0")

    logger.info(f"Starting development server on {host}:{port}")
    logger.info(f"API documentation available at http://{host}:{port}/docs")

    uvicorn.run(
        "main:app",
        host=host,
        port=port,
        reload=True,
        log_level=os.getenv("LOG_LEVEL", "info").lower(),
    )
