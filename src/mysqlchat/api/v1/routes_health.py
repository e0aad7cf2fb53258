"""Health check endpoint for the MySQL chat plugin."""

from fastapi import APIRouter

from mysqlchat.core.config import settings

router = APIRouter()


@router.get("/health")
async def health_check() -> dict:
    """Health check endpoint.

    Returns service status, name, and version. Touches neither the LLM
    nor any database, so it answers even when both are unreachable.

    Returns:
        dict: Health status response with status, service, and version fields
    """
    # Static payload built from settings only
    return {
        "status": "ok",
        "service": settings.SERVICE_NAME,
        "version": settings.SERVICE_VERSION,
    }
