"""
Video Link Resolver API v1 Router Aggregator.

Combines the v1 endpoint routers into a single APIRouter that the application
mounts under the /api/v1 prefix.

Router Structure:
    - /video: Share-link resolution and media proxy endpoints
"""

import logging

from fastapi import APIRouter

from app.api.v1.video import router as video_router


# Configure logger
logger = logging.getLogger(__name__)

# Create the main API v1 router
api_router = APIRouter()

api_router.include_router(
    video_router,
    prefix="/video",
    tags=["video"],
)

loaded_routers: list[str] = ["video"]


__all__ = ["api_router", "loaded_routers"]

logger.debug("API v1 routers loaded: %s", ", ".join(loaded_routers))
