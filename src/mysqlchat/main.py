"""Main application entrypoint for the MySQL chat plugin."""

from fastapi import FastAPI

from mysqlchat.api.v1 import routes_health
from mysqlchat.api.v1.routes_actions import router as actions_router
from mysqlchat.core.config import settings
from mysqlchat.core.logging import setup_logging


def create_app() -> FastAPI:
    """Create and configure the FastAPI application.

    Returns:
        FastAPI: Configured FastAPI application instance
    """
    # Initialize logging first
    setup_logging()

    # Create FastAPI application
    app = FastAPI(
        title=settings.SERVICE_NAME,
        version=settings.SERVICE_VERSION,
    )

    # Register routers
    app.include_router(routes_health.router, tags=["health"])
    app.include_router(actions_router, tags=["actions"])

    return app


# Export app instance for ASGI servers
app = create_app()
