"""
API v1 routes.
"""

from fastapi import APIRouter

from catalog.api.v1 import collaboration, live, notifications, projects

router = APIRouter()

router.include_router(notifications.router, prefix="/notifications", tags=["Notifications"])
router.include_router(projects.router, prefix="/projects", tags=["Projects"])
router.include_router(collaboration.router, tags=["Collaboration"])
router.include_router(live.router, tags=["Live"])
